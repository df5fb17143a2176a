from __future__ import annotations

from dataclasses import dataclass

from .spans import Span


@dataclass(slots=True)
class LexError(Exception):
    """Fatal tokenizer error; aborts analysis of one file."""

    span: Span
    message: str
    hint: str | None = None

    def __str__(self) -> str:
        base = f"{self.span.format()}: {self.message}"
        if self.hint:
            return f"{base}\nhint: {self.hint}"
        return base


class InternalError(RuntimeError):
    """A consistency failure inside safeprintf itself, not in the analyzed source."""


class OverlappingEditsError(InternalError):
    def __init__(self, first: tuple[int, int], second: tuple[int, int]) -> None:
        super().__init__(
            f"rewrite edits overlap: [{first[0]}, {first[1]}) and [{second[0]}, {second[1]})"
        )
        self.first = first
        self.second = second
