#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2runs/cli.py
"""Command-line interface for md2runs.

Converts a markdown file (or standard input) into styled runs and prints
them as plain text, JSON, or a table of runs::

    md2runs notes.md --format table --rich
    echo "# Title\\n\\nBody" | md2runs - --format json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import TextIO

from md2runs import __version__
from md2runs.config import load_config_with_priority, options_from_config
from md2runs.exceptions import Md2RunsError
from md2runs.images import ImageCache, ImagePresenter
from md2runs.logging_utils import configure_logging
from md2runs.renderers.styled_runs import StyledRunRenderer
from md2runs.styling.runs import StyledDocument

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_ERROR = 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the md2runs command."""
    parser = argparse.ArgumentParser(
        prog="md2runs",
        description="Convert markdown into a sequence of styled text runs.",
    )
    parser.add_argument("input", help="Markdown file to convert, or '-' to read from standard input")
    parser.add_argument("--config", help="Configuration file (TOML, JSON, YAML or pyproject.toml)")
    parser.add_argument("--base-font-size", type=float, help="Base font size for body text (default: 15)")
    parser.add_argument(
        "--format",
        choices=["text", "json", "table"],
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--no-unescape",
        action="store_true",
        help="Do not rewrite literal '\\n' sequences to newlines before parsing",
    )
    parser.add_argument(
        "--fetch-images",
        action="store_true",
        help="Download referenced images and replace image runs with attachments",
    )
    parser.add_argument("--max-image-width", type=float, help="Maximum display width for images (default: 300)")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: WARNING)",
    )
    parser.add_argument("--log-file", help="Also write log output to this file")
    parser.add_argument("--trace", action="store_true", help="Verbose logging with timestamps and logger names")
    parser.add_argument("--rich", action="store_true", help="Use rich formatting for table output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _read_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def should_use_rich_output(args: argparse.Namespace, stream: TextIO | None = None) -> bool:
    """Return True if rich output was requested and the stream is a terminal."""
    if not args.rich:
        return False
    target = stream or sys.stdout
    isatty = getattr(target, "isatty", None)
    return bool(callable(isatty) and isatty())


def _describe_run_style(attributes: object) -> str:
    data = attributes.to_dict()  # type: ignore[attr-defined]
    flags = [f"{data['font_family']} {data['font_size']:g}pt"]
    if data["weight"] != "regular":
        flags.append(data["weight"])
    if data["slant"] != "normal":
        flags.append(data["slant"])
    for key in ("strikethrough", "foreground", "background", "link", "mention", "list_depth", "quote_depth"):
        if key in data:
            flags.append(key if data[key] is True else f"{key}={data[key]}")
    if "image" in data:
        flags.append(f"image={data['image']['url']}")
    if "attachment" in data:
        attachment = data["attachment"]
        kind = "placeholder" if attachment.get("placeholder") else "image"
        flags.append(f"attachment={kind} {attachment.get('width')}x{attachment.get('height')}")
    return ", ".join(flags)


def format_table(document: StyledDocument, use_rich: bool = False) -> str | None:
    """Render the run list as a table.

    With ``use_rich`` the table is printed directly with rich and None is
    returned; otherwise a plain-text table is returned.
    """
    if use_rich:
        from rich.console import Console
        from rich.table import Table

        table = Table(title=f"Styled runs ({len(document)})")
        table.add_column("#", justify="right", style="cyan", no_wrap=True)
        table.add_column("Text", style="white")
        table.add_column("Style", style="green")
        for index, run in enumerate(document):
            table.add_row(str(index), repr(run.text), _describe_run_style(run.attributes))
        Console().print(table)
        return None

    lines = [f"{index:>4}  {run.text!r:<40}  {_describe_run_style(run.attributes)}" for index, run in enumerate(document)]
    return "\n".join(lines)


def format_output(document: StyledDocument, output_format: str, use_rich: bool = False) -> str | None:
    """Format a converted document for printing."""
    if output_format == "json":
        return json.dumps(document.to_dict(), indent=2, ensure_ascii=False)
    if output_format == "table":
        return format_table(document, use_rich=use_rich)
    return document.text


def _present_images(document: StyledDocument, presenter: ImagePresenter) -> StyledDocument:
    presented = presenter.present(document)
    results = asyncio.run(presenter.load_pending(presented))
    failures = [result for result in results if not result.ok]
    if failures:
        logger.warning(f"{len(failures)} of {len(results)} images could not be loaded")
    return presented


def main(argv: list[str] | None = None) -> int:
    """Execute the md2runs command line.

    Returns
    -------
    int
        Process exit code (0 on success, 1 on input or configuration errors)

    """
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(args.log_level, log_file=args.log_file, trace_mode=args.trace)

    try:
        config = options_from_config(load_config_with_priority(args.config))
        converter_options = config.converter
        if args.base_font_size is not None:
            converter_options = converter_options.create_updated(base_font_size=args.base_font_size)
        presentation_options = config.presentation
        if args.max_image_width is not None:
            presentation_options = presentation_options.create_updated(max_width=args.max_image_width)
    except (Md2RunsError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        markdown_content = _read_input(args.input)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: Could not read input {args.input}: {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        document = StyledRunRenderer(converter_options).render_markdown(
            markdown_content, unescape=not args.no_unescape
        )
        if args.fetch_images:
            presenter = ImagePresenter(ImageCache(config.images), presentation_options)
            document = _present_images(document, presenter)
    except Md2RunsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    output = format_output(document, args.format, use_rich=should_use_rich_output(args))
    if output is not None:
        print(output)
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
