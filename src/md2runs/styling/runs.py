#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2runs/styling/runs.py
"""Styled runs and the styled document sequence.

A ``StyledDocument`` is an ordered, append-only sequence of ``StyledRun``
values. The converter builds each node's output as a fresh document, applies
style unions to it with ``map_runs`` and appends it to its parent's document;
runs that have already been appended are never modified. The only in-place
edit is ``replace_run``, used by display consumers to patch image runs after
conversion has finished.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, Union, overload

from md2runs.styling.attributes import StyleAttributes


@dataclass(frozen=True)
class StyledRun:
    """A contiguous span of text with one set of style attributes.

    Parameters
    ----------
    text : str
        Run text
    attributes : StyleAttributes
        Style applied to the whole run

    """

    text: str
    attributes: StyleAttributes

    def restyled(self, transform: Callable[[StyleAttributes], StyleAttributes]) -> StyledRun:
        """Return a run with the same text and transformed attributes."""
        return StyledRun(self.text, transform(self.attributes))

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "attributes": self.attributes.to_dict()}


class StyledDocument:
    """Ordered sequence of styled runs.

    Zero-length runs are dropped on insertion, so every stored run carries at
    least one character.

    Parameters
    ----------
    runs : iterable of StyledRun, optional
        Initial runs, appended in order

    Examples
    --------
        >>> doc = StyledDocument()
        >>> doc.append(StyledRun("Hello", StyleAttributes(font_size=15.0)))
        >>> doc.text
        'Hello'

    """

    def __init__(self, runs: Iterable[StyledRun] = ()):
        self._runs: list[StyledRun] = []
        self.extend(runs)

    def append(self, run: StyledRun) -> None:
        """Append one run; empty runs are ignored."""
        if run.text:
            self._runs.append(run)

    def append_text(self, text: str, attributes: StyleAttributes) -> None:
        """Append ``text`` as a run with ``attributes``."""
        self.append(StyledRun(text, attributes))

    def extend(self, runs: Iterable[StyledRun]) -> None:
        """Append every run of ``runs`` (a document or any iterable of runs)."""
        for run in runs:
            self.append(run)

    @property
    def runs(self) -> tuple[StyledRun, ...]:
        """Snapshot of the runs in order."""
        return tuple(self._runs)

    @property
    def text(self) -> str:
        """Concatenated text of all runs."""
        return "".join(run.text for run in self._runs)

    def __len__(self) -> int:
        return len(self._runs)

    def __iter__(self) -> Iterator[StyledRun]:
        return iter(tuple(self._runs))

    @overload
    def __getitem__(self, index: int) -> StyledRun: ...

    @overload
    def __getitem__(self, index: slice) -> list[StyledRun]: ...

    def __getitem__(self, index: Union[int, slice]) -> Union[StyledRun, list[StyledRun]]:
        return self._runs[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StyledDocument):
            return NotImplemented
        return self._runs == other._runs

    def __repr__(self) -> str:
        return f"StyledDocument(runs={len(self._runs)}, text={self.text!r})"

    def spans(self) -> Iterator[tuple[int, int, StyledRun]]:
        """Yield ``(start, end, run)`` character ranges over the document text."""
        offset = 0
        for run in tuple(self._runs):
            end = offset + len(run.text)
            yield offset, end, run
            offset = end

    def find_runs(self, predicate: Callable[[StyledRun], bool]) -> list[tuple[int, StyledRun]]:
        """Return ``(index, run)`` pairs of every run matching ``predicate``."""
        return [(index, run) for index, run in enumerate(self._runs) if predicate(run)]

    def runs_with(self, attribute: str) -> list[tuple[int, StyledRun]]:
        """Return ``(index, run)`` pairs of every run carrying ``attribute``.

        An attribute counts as present when it is neither None nor False,
        e.g. ``runs_with("image")`` enumerates all image-marker runs.

        Raises
        ------
        AttributeError
            If ``attribute`` is not a StyleAttributes field

        """
        if attribute not in StyleAttributes.__dataclass_fields__:
            raise AttributeError(f"StyleAttributes has no attribute {attribute!r}")
        return self.find_runs(lambda run: getattr(run.attributes, attribute) not in (None, False))

    def map_runs(self, transform: Callable[[StyleAttributes], StyleAttributes]) -> StyledDocument:
        """Return a new document with ``transform`` applied to every run's attributes."""
        return StyledDocument(run.restyled(transform) for run in self._runs)

    def replace_run(self, index: int, run: StyledRun) -> None:
        """Replace the run at ``index`` in place.

        Raises
        ------
        IndexError
            If ``index`` is out of range
        ValueError
            If ``run`` has no text

        """
        if not run.text:
            raise ValueError("Replacement run must not be empty")
        self._runs[index] = run

    def copy(self) -> StyledDocument:
        return StyledDocument(self._runs)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready representation of the document."""
        return {"text": self.text, "runs": [run.to_dict() for run in self._runs]}
