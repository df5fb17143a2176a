from __future__ import annotations

from safeprintf.calls import extract_calls
from safeprintf.diagnostics import DiagnosticKind
from safeprintf.format_string import Conversion, FormatSpecifier, parse_format_string
from safeprintf.lexer import tokenize
from safeprintf.spans import SourceFile


def parse(literal: str):
    src = f"printf({literal});"
    calls, _ = extract_calls(tokenize(src, file="t.c"))
    return parse_format_string(calls[0].arguments[0], SourceFile("t.c", src))


def test_plain_text_has_no_specifiers() -> None:
    fmt, diags = parse('"Hello, world!"')
    assert diags == []
    assert fmt.parts == ("Hello, world!",)
    assert fmt.slots == ()


def test_percent_literal_is_not_a_specifier() -> None:
    fmt, diags = parse('"100%%\\n"')
    assert diags == []
    assert fmt.slots == ()
    assert [p.kind for p in fmt.specifiers] == [Conversion.PERCENT]
    assert fmt.parts[0] == "100"
    assert fmt.parts[-1] == "\\n"
    assert fmt.reconstruct() == fmt.content == "100%%\\n"


def test_full_specifier() -> None:
    fmt, diags = parse('"%-08.3lf"')
    assert diags == []
    (spec,) = fmt.specifiers
    assert spec.kind is Conversion.FLOATING
    assert (spec.flags, spec.width, spec.precision, spec.length, spec.conversion) == ("-0", "8", "3", "l", "f")
    assert spec.raw == "%-08.3lf"
    assert not spec.is_plain


def test_conversion_kinds() -> None:
    fmt, _ = parse('"%d %i %u %x %o %e %g %c %s %p %n %zu %lld %hhx"')
    assert [s.kind for s in fmt.specifiers] == [
        Conversion.INTEGER,
        Conversion.INTEGER,
        Conversion.UNSIGNED,
        Conversion.UNSIGNED,
        Conversion.UNSIGNED,
        Conversion.FLOATING,
        Conversion.FLOATING,
        Conversion.CHAR,
        Conversion.STRING,
        Conversion.POINTER,
        Conversion.COUNT,
        Conversion.UNSIGNED,
        Conversion.INTEGER,
        Conversion.UNSIGNED,
    ]
    assert [s.c_type for s in fmt.specifiers][-3:] == ["size_t", "long long", "unsigned char"]


def test_star_width_and_precision_take_arguments() -> None:
    fmt, diags = parse('"%*.*d"')
    assert diags == []
    assert [s.role for s in fmt.slots] == ["width", "precision", "value"]
    assert [s.c_type for s in fmt.slots] == ["int", "int", "int"]


def test_empty_precision() -> None:
    fmt, _ = parse('"%.f"')
    (spec,) = fmt.specifiers
    assert spec.precision == ""
    assert spec.kind is Conversion.FLOATING


def test_invalid_conversion_still_takes_a_slot() -> None:
    fmt, diags = parse('"%y and %d"')
    assert [d.kind for d in diags] == [DiagnosticKind.INVALID_SPECIFIER]
    assert [s.kind for s in fmt.specifiers] == [Conversion.INVALID, Conversion.INTEGER]
    assert len(fmt.slots) == 2
    assert "`%y`" in diags[0].message


def test_trailing_percent_is_invalid() -> None:
    fmt, diags = parse('"50 %"')
    assert len(diags) == 1
    (spec,) = fmt.specifiers
    assert spec.raw == "%"
    assert spec.kind is Conversion.INVALID
    assert fmt.reconstruct() == "50 %"


def test_escapes_are_never_specifiers() -> None:
    fmt, diags = parse('"a\\%d \\"%s\\""')
    assert diags == []
    assert [s.kind for s in fmt.specifiers] == [Conversion.STRING]


def test_specifier_span_is_file_absolute() -> None:
    fmt, _ = parse('"x %d"')
    (spec,) = fmt.specifiers
    assert (spec.start, spec.end) == (2, 4)
    assert (spec.span.start.offset, spec.span.end.offset) == (10, 12)
    assert (spec.span.start.column, spec.span.end.column) == (11, 13)


def test_adjacent_literals_are_concatenated() -> None:
    fmt, diags = parse('"a %d" "b %s", 1, "x"')
    assert diags == []
    assert fmt.content == "a %db %s"
    second = fmt.specifiers[1]
    assert second.span.start.offset == 17
    assert isinstance(second, FormatSpecifier)


def test_text_segments() -> None:
    fmt, _ = parse('"Hello, %s!"')
    assert fmt.text_segments() == ["Hello, ", "!"]
    fmt, _ = parse('"100%% %d"')
    assert fmt.text_segments() == ["100% ", ""]
    fmt, _ = parse('"%d%d"')
    assert fmt.text_segments() == ["", "", ""]


def test_text_segments_keep_literal_boundaries() -> None:
    fmt, _ = parse('"\\x41" "B%d"')
    assert fmt.content == "\\x41B%d"
    assert fmt.breaks == (4,)
    assert fmt.text_segments() == ['\\x41" "B', ""]
    fmt, _ = parse('"\\1" "%%%d"')
    assert fmt.text_segments() == ['\\1" "%', ""]
    fmt, _ = parse('"a%d" "b"')
    assert fmt.text_segments() == ["a", "b"]
