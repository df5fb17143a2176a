"""Code-frame rendering of diagnostics.

Example::

    error[ExcessSpecifiers]: excess specifiers, this will read arbitrary data off the stack!
     --> main.c:5:19
      |
    4 |     char input[1024] = {0};
    5 |     printf("%s is %s", input);
      |                   ^^ 1 too many specifiers
      |                        ----- not enough arguments
    6 | }
      |
      = help: Add an argument or remove a specifier.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .diagnostics import Diagnostic, Label
from .spans import SourceFile

TAB_WIDTH = 4


@dataclass(frozen=True, slots=True)
class _Frame:
    first: int
    last: int


def _label_lines(label: Label) -> tuple[int, int]:
    start, end = label.span.start, label.span.end
    last = end.line
    # A span ending right after a newline belongs to the previous line.
    if last > start.line and end.column == 1:
        last -= 1
    return start.line, last


def _frames(labels: Iterable[Label], context: int, line_count: int) -> list[_Frame]:
    ranges = sorted(
        (max(1, a - context), min(line_count, b + context)) for a, b in map(_label_lines, labels)
    )
    out: list[_Frame] = []
    for first, last in ranges:
        if out and first <= out[-1].last + 1:
            out[-1] = _Frame(out[-1].first, max(out[-1].last, last))
        else:
            out.append(_Frame(first, last))
    return out


def _underline(label: Label, line: int, text: str) -> tuple[int, int] | None:
    """Display columns [start, end) to underline on `line`, or None."""
    first, last = _label_lines(label)
    if not first <= line <= last:
        return None
    c0 = label.span.start.column - 1 if line == first else 0
    if line == label.span.end.line:
        c1 = label.span.end.column - 1
    else:
        c1 = len(text)
    lo = len(text[:c0].expandtabs(TAB_WIDTH))
    hi = len(text[:c1].expandtabs(TAB_WIDTH))
    return lo, max(hi, lo + 1)


def render_diagnostic(diag: Diagnostic, source: SourceFile, *, context: int = 1) -> str:
    header = f"{diag.severity.value}[{diag.kind.value}]: {diag.message}"
    primary = diag.primary_span
    if primary is None:
        return header + (f"\n  = help: {diag.help}" if diag.help else "")

    frames = _frames(diag.labels, context, source.line_count)
    width = len(str(frames[-1].last))
    pad = " " * width
    out = [header, f"{pad}--> {primary.format()}", f"{pad} |"]

    for idx, frame in enumerate(frames):
        if idx:
            out.append("...")
        for line in range(frame.first, frame.last + 1):
            text = source.line_text(line)
            out.append(f"{line:>{width}} | {text.expandtabs(TAB_WIDTH)}".rstrip())
            marks = []
            for label in diag.labels:
                cols = _underline(label, line, text)
                if cols is None:
                    continue
                ends_here = line == _label_lines(label)[1]
                marks.append((cols, label, ends_here))
            for (lo, hi), label, ends_here in sorted(marks, key=lambda m: m[0]):
                ch = "^" if label.primary else "-"
                row = " " * lo + ch * (hi - lo)
                if ends_here and label.message:
                    row += " " + label.message
                out.append(f"{pad} | {row}")

    out.append(f"{pad} |")
    if diag.help:
        out.append(f"{pad} = help: {diag.help}")
    return "\n".join(out)


def render_diagnostics(diags: Iterable[Diagnostic], source: SourceFile) -> str:
    return "\n\n".join(render_diagnostic(d, source) for d in diags)
