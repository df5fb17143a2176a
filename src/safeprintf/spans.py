from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Position:
    """A concrete source position.

    Offsets are 0-based; line/column are 1-based for user-facing messages.
    """

    offset: int
    line: int
    column: int


@dataclass(frozen=True, slots=True)
class Span:
    """Half-open span [start, end) in a single file."""

    file: str
    start: Position
    end: Position

    def __post_init__(self) -> None:
        if self.end.offset < self.start.offset:
            raise ValueError(f"span ends before it starts: {self.start} > {self.end}")

    def format(self) -> str:
        return f"{self.file}:{self.start.line}:{self.start.column}"

    @property
    def length(self) -> int:
        return self.end.offset - self.start.offset


def join_span(*spans: Span | None) -> Span:
    """Join spans into a single span (from first to last)."""
    real = [s for s in spans if s is not None]
    if not real:
        raise ValueError("join_span() requires at least one span")
    first, last = real[0], real[-1]
    if first.file != last.file:
        raise ValueError(f"cannot join spans across files: {first.file} / {last.file}")
    return Span(file=first.file, start=first.start, end=last.end)


@dataclass(frozen=True, slots=True)
class SourceFile:
    """Source text plus a line table for offset -> line/column lookups."""

    name: str
    text: str
    line_starts: tuple[int, ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        starts = [0]
        for i, ch in enumerate(self.text):
            if ch == "\n":
                starts.append(i + 1)
        object.__setattr__(self, "line_starts", tuple(starts))

    @property
    def line_count(self) -> int:
        return len(self.line_starts)

    def position(self, offset: int) -> Position:
        if offset < 0 or offset > len(self.text):
            raise IndexError(f"offset {offset} outside of {self.name}")
        idx = bisect_right(self.line_starts, offset) - 1
        return Position(offset=offset, line=idx + 1, column=offset - self.line_starts[idx] + 1)

    def span(self, start: int, end: int) -> Span:
        return Span(file=self.name, start=self.position(start), end=self.position(end))

    def slice(self, span: Span) -> str:
        return self.text[span.start.offset : span.end.offset]

    def line_text(self, line: int) -> str:
        """Text of a 1-based line, without its newline."""
        start = self.line_starts[line - 1]
        if line < len(self.line_starts):
            end = self.line_starts[line] - 1
        else:
            end = len(self.text)
        return self.text[start:end].rstrip("\r")
