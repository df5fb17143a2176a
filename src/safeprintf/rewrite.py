from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from .calls import Argument
from .errors import OverlappingEditsError
from .format_string import Conversion
from .matcher import CheckedCall, find_cast


log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RewriteEdit:
    """Replace text[start:end] with `replacement`; start == end is an insertion."""

    start: int
    end: int
    replacement: str

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"edit ends before it starts: [{self.start}, {self.end})")


def apply_edits(text: str, edits: Iterable[RewriteEdit]) -> str:
    """Copy `text`, substituting every edit. Text outside the edits is kept byte for byte."""
    ordered = sorted(enumerate(edits), key=lambda p: (p[1].start, p[1].end, p[0]))
    out: list[str] = []
    pos = 0
    prev = (0, 0)
    for _, e in ordered:
        if e.start < pos:
            raise OverlappingEditsError(prev, (e.start, e.end))
        out.append(text[pos : e.start])
        out.append(e.replacement)
        pos = e.end
        prev = (e.start, e.end)
    out.append(text[pos:])
    return "".join(out)


def _wrap(arg: Argument, c_type: str) -> list[RewriteEdit]:
    # `(type) (<argument>)`, as two insertions so edits nested in the argument survive.
    start, end = arg.span.start.offset, arg.span.end.offset
    return [RewriteEdit(start, start, f"({c_type}) ("), RewriteEdit(end, end, ")")]


def typecast_edits(calls: Sequence[CheckedCall]) -> list[RewriteEdit]:
    """Edits casting every argument that doesn't already carry a recognized cast.

    Fixed parameters (`snprintf`'s buffer and size, ...) get the function's
    declared types; formatted arguments get the type their specifier reads.
    """
    edits: list[RewriteEdit] = []
    for cc in calls:
        if cc.aborted:
            continue
        call = cc.call
        for arg, c_type in zip(call.fixed_arguments, call.function.fixed_params):
            if find_cast(arg) is None:
                edits.extend(_wrap(arg, c_type))
        for ta in cc.arguments:
            c_type = ta.slot.c_type
            if ta.explicit or c_type is None:
                continue
            edits.extend(_wrap(ta.argument, c_type))
    return edits


def _runtime_tags(cc: CheckedCall) -> list[str] | None:
    """The `fmt_*` tag of every formatted argument, or None if the call can't be optimized."""
    fmt = cc.format
    if fmt is None or cc.has_errors or not cc.call.function.variadic:
        return None
    for spec in fmt.specifiers:
        if spec.kind is not Conversion.PERCENT and not spec.is_plain:
            return None
    if not len(cc.arguments) == len(cc.call.trailing_arguments) == len(fmt.slots):
        return None
    tags = []
    for ta in cc.arguments:
        family = ta.slot.family
        if family is None or ta.slot.specifier.kind is Conversion.COUNT:
            return None
        tags.append(family.runtime_tag)
    return tags


def optimize_edits(calls: Sequence[CheckedCall]) -> list[RewriteEdit]:
    """Edits turning calls into `safe_*` calls with the format string pre-split.

    `printf("a %d b", x)` becomes `safe_printf(2, { "a ", { x, fmt_int }, " b" })`:
    fixed arguments are kept, then the number of text segments and a list
    alternating text segments and `{ argument, tag }` pairs. Calls using
    flags, widths, precisions or length modifiers are left alone.
    """
    edits: list[RewriteEdit] = []
    for cc in calls:
        call = cc.call
        tags = _runtime_tags(cc)
        if cc.format is None or call.format_argument is None or tags is None:
            log.debug("%s: not optimizable, left unchanged", call.span.format())
            continue

        segments = cc.format.text_segments()
        args = call.trailing_arguments
        fmt_start = call.format_argument.span.start.offset
        close_end = call.close.span.end.offset
        head = f"{len(segments)}, {{ \"{segments[0]}\""

        edits.append(
            RewriteEdit(call.name.span.start.offset, call.name.span.end.offset, call.function.safe_name)
        )
        if not args:
            edits.append(RewriteEdit(fmt_start, close_end, head + " })"))
            continue
        edits.append(RewriteEdit(fmt_start, args[0].span.start.offset, head + ", { "))
        for k in range(len(args) - 1):
            edits.append(
                RewriteEdit(
                    args[k].span.end.offset,
                    args[k + 1].span.start.offset,
                    f", {tags[k]} }}, \"{segments[k + 1]}\", {{ ",
                )
            )
        edits.append(
            RewriteEdit(args[-1].span.end.offset, close_end, f", {tags[-1]} }}, \"{segments[-1]}\" }})")
        )
    return edits
