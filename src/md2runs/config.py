#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2runs/config.py
"""Configuration file discovery and loading.

Configuration can come from TOML, JSON or YAML files, or from the
``[tool.md2runs]`` table of a ``pyproject.toml``. Top-level keys configure
the converter (``StyledRunOptions``); the ``images`` table configures the
image cache and the ``presentation`` table the image presenter::

    base_font_size = 17
    mention_route_prefix = "/people/"

    [images]
    max_entries = 50
    require_https = true

    [presentation]
    max_width = 320
"""

from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found,unused-ignore]
from typing import Any, Dict, Optional

import yaml

from md2runs.constants import ENV_CONFIG
from md2runs.exceptions import ValidationError
from md2runs.options import ImageCacheOptions, ImagePresentationOptions, StyledRunOptions

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = [".md2runs.toml", ".md2runs.yaml", ".md2runs.yml", ".md2runs.json", "pyproject.toml"]
IMAGES_SECTION = "images"
PRESENTATION_SECTION = "presentation"


@dataclass(frozen=True)
class Md2RunsConfig:
    """Option objects built from a configuration mapping."""

    converter: StyledRunOptions = field(default_factory=StyledRunOptions)
    images: ImageCacheOptions = field(default_factory=ImageCacheOptions)
    presentation: ImagePresentationOptions = field(default_factory=ImagePresentationOptions)


def _config_error(message: str, path: Path, original_error: Exception | None = None) -> ValidationError:
    return ValidationError(message, parameter_name="config", parameter_value=str(path), original_error=original_error)


def _load_pyproject_section(pyproject_path: Path) -> Dict[str, Any]:
    """Load the [tool.md2runs] section of a pyproject.toml (empty if absent)."""
    try:
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise _config_error(f"Invalid TOML in pyproject.toml {pyproject_path}: {e}", pyproject_path, e) from e

    config = data.get("tool", {}).get("md2runs", {})
    if not isinstance(config, dict):
        raise _config_error(
            f"[tool.md2runs] section in {pyproject_path} must be a table, got {type(config).__name__}", pyproject_path
        )
    return config


def _load_toml_config(config_path: Path) -> Dict[str, Any]:
    try:
        with open(config_path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise _config_error(f"Invalid TOML in config file {config_path}: {e}", config_path, e) from e


def _load_json_config(config_path: Path) -> Dict[str, Any]:
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = json.load(f)
    except json.JSONDecodeError as e:
        raise _config_error(f"Invalid JSON in config file {config_path}: {e}", config_path, e) from e

    if not isinstance(config, dict):
        raise _config_error(f"JSON config file must contain an object, got {type(config).__name__}", config_path)
    return config


def _load_yaml_config(config_path: Path) -> Dict[str, Any]:
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise _config_error(f"Invalid YAML in config file {config_path}: {e}", config_path, e) from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise _config_error(f"YAML config file must contain a mapping, got {type(config).__name__}", config_path)
    return config


def load_config_file(config_path: Path | str) -> Dict[str, Any]:
    """Load configuration from a JSON, TOML, YAML or pyproject.toml file.

    Parameters
    ----------
    config_path : Path or str
        Path to the configuration file

    Returns
    -------
    dict
        Configuration mapping

    Raises
    ------
    ValidationError
        If the file is missing, unreadable, malformed or of an unsupported type

    Examples
    --------
    >>> config = load_config_file(".md2runs.toml")
    >>> config.get("base_font_size")
    17

    """
    config_path = Path(config_path)

    if not config_path.is_file():
        raise _config_error(f"Configuration file does not exist: {config_path}", config_path)

    filename = config_path.name.lower()
    ext = config_path.suffix.lower()

    try:
        if filename == "pyproject.toml":
            return _load_pyproject_section(config_path)
        elif ext == ".toml":
            return _load_toml_config(config_path)
        elif ext in (".yaml", ".yml"):
            return _load_yaml_config(config_path)
        elif ext == ".json":
            return _load_json_config(config_path)
    except OSError as e:
        raise _config_error(f"Error reading config file {config_path}: {e}", config_path, e) from e

    raise _config_error(f"Unsupported config file format: {ext}. Use .json, .toml, or .yaml", config_path)


def discover_config_file(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Find a configuration file in ``start_dir`` (default: cwd), then the home directory.

    A pyproject.toml only counts when it has a [tool.md2runs] table.
    """
    search_dirs = [start_dir or Path.cwd(), Path.home()]
    for directory in search_dirs:
        for name in CONFIG_FILENAMES:
            candidate = directory / name
            if not candidate.is_file():
                continue
            if name == "pyproject.toml":
                try:
                    if not _load_pyproject_section(candidate):
                        continue
                except ValidationError:
                    continue
            logger.debug(f"Discovered config file: {candidate}")
            return candidate
    return None


def load_config_with_priority(explicit_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration with priority handling.

    Priority order (highest to lowest):
    1. Explicit config file path (--config flag)
    2. MD2RUNS_CONFIG environment variable
    3. Auto-discovered config file

    Returns
    -------
    dict
        Configuration mapping (empty if no config was found)

    """
    if explicit_path:
        return load_config_file(explicit_path)

    env_path = os.getenv(ENV_CONFIG)
    if env_path:
        return load_config_file(env_path)

    discovered = discover_config_file()
    if discovered:
        return load_config_file(discovered)

    return {}


def merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge two configuration mappings; nested tables are merged recursively.

    Examples
    --------
    >>> merge_configs({"images": {"max_entries": 10}}, {"images": {"require_https": True}})
    {'images': {'max_entries': 10, 'require_https': True}}

    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value
    return result


def options_from_config(config: Dict[str, Any]) -> Md2RunsConfig:
    """Build option objects from a configuration mapping.

    Parameters
    ----------
    config : dict
        Mapping as returned by :func:`load_config_file`

    Returns
    -------
    Md2RunsConfig
        Converter, image cache and presentation options

    Raises
    ------
    ValidationError
        If a section is not a table or a value fails option validation

    """
    images = config.get(IMAGES_SECTION, {})
    presentation = config.get(PRESENTATION_SECTION, {})
    for name, section in ((IMAGES_SECTION, images), (PRESENTATION_SECTION, presentation)):
        if not isinstance(section, dict):
            raise ValidationError(
                f"[{name}] must be a table, got {type(section).__name__}", parameter_name=name, parameter_value=section
            )

    top_level = {k: v for k, v in config.items() if k not in (IMAGES_SECTION, PRESENTATION_SECTION)}
    unknown = {k.replace("-", "_") for k in top_level} - StyledRunOptions.field_names()
    if unknown:
        logger.warning(f"Ignoring unknown configuration keys: {', '.join(sorted(unknown))}")

    try:
        return Md2RunsConfig(
            converter=StyledRunOptions.from_mapping(top_level),
            images=ImageCacheOptions.from_mapping(images),
            presentation=ImagePresentationOptions.from_mapping(presentation),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid configuration value: {e}", original_error=e) from e
