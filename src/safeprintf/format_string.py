from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from . import diagnostics as D
from .calls import Argument
from .families import TypeFamily, c_type_for
from .spans import SourceFile, Span
from .tokens import TokenKind


class Conversion(str, Enum):
    INTEGER = "integer"
    UNSIGNED = "unsigned"
    FLOATING = "floating"
    CHAR = "char"
    STRING = "string"
    POINTER = "pointer"
    COUNT = "count"  # %n
    PERCENT = "percent"  # %%, consumes no argument
    INVALID = "invalid"


_CONVERSIONS = {
    **dict.fromkeys("di", Conversion.INTEGER),
    **dict.fromkeys("uoxX", Conversion.UNSIGNED),
    **dict.fromkeys("fFeEgGaA", Conversion.FLOATING),
    "c": Conversion.CHAR,
    "s": Conversion.STRING,
    "p": Conversion.POINTER,
    "n": Conversion.COUNT,
}

_FAMILIES = {
    Conversion.INTEGER: TypeFamily.INTEGER,
    Conversion.UNSIGNED: TypeFamily.UNSIGNED,
    Conversion.FLOATING: TypeFamily.FLOATING,
    Conversion.CHAR: TypeFamily.CHAR,
    Conversion.STRING: TypeFamily.STRING,
    Conversion.POINTER: TypeFamily.POINTER,
    Conversion.COUNT: TypeFamily.POINTER,
}

_COUNT_TYPES = {
    "": "int*",
    "hh": "signed char*",
    "h": "short*",
    "l": "long*",
    "ll": "long long*",
    "q": "long long*",
    "j": "intmax_t*",
    "z": "size_t*",
    "t": "ptrdiff_t*",
}

_FLAGS = "-+ #0'"
_LENGTHS = ("hh", "ll", "h", "l", "j", "z", "t", "L", "q")


@dataclass(frozen=True, slots=True)
class FormatSpecifier:
    """One `%` directive. `start`/`end` are offsets into the literal content."""

    raw: str
    kind: Conversion
    conversion: str
    flags: str
    width: str | None
    precision: str | None
    length: str
    start: int
    end: int
    span: Span

    @property
    def family(self) -> TypeFamily | None:
        return _FAMILIES.get(self.kind)

    @property
    def c_type(self) -> str | None:
        if self.kind is Conversion.COUNT:
            return _COUNT_TYPES.get(self.length, "int*")
        fam = self.family
        return c_type_for(fam, self.length) if fam is not None else None

    @property
    def is_plain(self) -> bool:
        """No flags, width, precision or length modifier."""
        return not (self.flags or self.width is not None or self.precision is not None or self.length)

    def slots(self) -> tuple["Slot", ...]:
        if self.kind is Conversion.PERCENT:
            return ()
        out: list[Slot] = []
        if self.width == "*":
            out.append(Slot(self, "width"))
        if self.precision == "*":
            out.append(Slot(self, "precision"))
        out.append(Slot(self, "value"))
        return tuple(out)


@dataclass(frozen=True, slots=True)
class Slot:
    """An argument position a specifier consumes: `*` width, `*` precision, or the value."""

    specifier: FormatSpecifier
    role: str

    @property
    def family(self) -> TypeFamily | None:
        if self.role != "value":
            return TypeFamily.INTEGER
        return self.specifier.family

    @property
    def c_type(self) -> str | None:
        if self.role != "value":
            return "int"
        return self.specifier.c_type


Part = Union[str, FormatSpecifier]


@dataclass(frozen=True, slots=True)
class FormatString:
    content: str
    parts: tuple[Part, ...]
    span: Span
    # content offsets where a new adjacent literal begins
    breaks: tuple[int, ...] = ()

    @property
    def specifiers(self) -> tuple[FormatSpecifier, ...]:
        return tuple(p for p in self.parts if isinstance(p, FormatSpecifier))

    @property
    def slots(self) -> tuple[Slot, ...]:
        return tuple(s for spec in self.specifiers for s in spec.slots())

    def reconstruct(self) -> str:
        return "".join(p if isinstance(p, str) else p.raw for p in self.parts)

    def text_segments(self) -> list[str]:
        """Literal text around each argument-consuming specifier, `%%` folded to `%`.

        The result always has one more element than there are specifiers
        consuming arguments. Where adjacent literals were joined inside a
        segment, it keeps them apart as `a" "b`, so an escape at the end of
        one literal never absorbs characters of the next (`"\\x41" "B"`).
        """
        breaks = set(self.breaks)
        segments = [""]
        pos = 0
        for p in self.parts:
            if isinstance(p, str):
                for k, ch in enumerate(p):
                    if pos + k in breaks and segments[-1]:
                        segments[-1] += "\" \""
                    segments[-1] += ch
                pos += len(p)
                continue
            if p.kind is Conversion.PERCENT:
                if p.start in breaks and segments[-1]:
                    segments[-1] += "\" \""
                segments[-1] += "%"
            else:
                segments.append("")
            pos = p.end
        return segments


def _literal_content(argument: Argument) -> tuple[str, list[int], tuple[int, ...]]:
    """Join the bodies of adjacent string literals.

    Also returns each char's file offset and where every literal after the
    first starts in the joined text.
    """
    content: list[str] = []
    offsets: list[int] = []
    breaks: list[int] = []
    for tok in argument.code:
        if tok.kind is not TokenKind.STRING:
            raise ValueError(f"not a string literal: {tok!r}")
        body_start = tok.lexeme.index('"') + 1
        body = tok.lexeme[body_start:-1]
        base = tok.span.start.offset + body_start
        if content:
            breaks.append(len(offsets))
        content.append(body)
        offsets.extend(range(base, base + len(body)))
    return "".join(content), offsets, tuple(breaks)


def parse_format_string(
    argument: Argument, source: SourceFile
) -> tuple[FormatString, list[D.Diagnostic]]:
    """Split a string-literal argument into literal text and specifiers.

    Escape sequences are skipped, never decoded, so `\\%` stays text.
    Invalid conversions are reported and kept as `Conversion.INVALID`
    specifiers so they still take up an argument.
    """
    s, offsets, breaks = _literal_content(argument)
    n = len(s)
    parts: list[Part] = []
    diags: list[D.Diagnostic] = []

    def span_of(i: int, j: int) -> Span:
        return source.span(offsets[i], offsets[j - 1] + 1)

    i = seg_start = 0
    while i < n:
        c = s[i]
        if c == "\\":
            i += 2
            continue
        if c != "%":
            i += 1
            continue
        if i > seg_start:
            parts.append(s[seg_start:i])

        j = i + 1
        if j < n and s[j] == "%":
            j += 1
            parts.append(
                FormatSpecifier("%%", Conversion.PERCENT, "%", "", None, None, "", i, j, span_of(i, j))
            )
            i = seg_start = j
            continue

        k = j
        while k < n and s[k] in _FLAGS:
            k += 1
        flags = s[j:k]

        width = None
        if k < n and s[k] == "*":
            width, k = "*", k + 1
        else:
            w = k
            while k < n and s[k].isdigit():
                k += 1
            width = s[w:k] or None

        precision = None
        if k < n and s[k] == ".":
            k += 1
            if k < n and s[k] == "*":
                precision, k = "*", k + 1
            else:
                p = k
                while k < n and s[k].isdigit():
                    k += 1
                precision = s[p:k]

        length = ""
        for cand in _LENGTHS:
            if s.startswith(cand, k):
                length, k = cand, k + len(cand)
                break

        conv = s[k] if k < n else ""
        kind = _CONVERSIONS.get(conv)
        if kind is None:
            kind = Conversion.INVALID
            if conv in ("", "\\"):
                conv = ""
        if conv:
            k += 1

        spec = FormatSpecifier(s[i:k], kind, conv, flags, width, precision, length, i, k, span_of(i, k))
        if kind is Conversion.INVALID:
            diags.append(D.invalid_specifier(spec.span, spec.raw))
        parts.append(spec)
        i = seg_start = k

    if seg_start < n:
        parts.append(s[seg_start:])

    return FormatString(content=s, parts=tuple(parts), span=argument.span, breaks=breaks), diags
