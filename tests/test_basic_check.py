from __future__ import annotations

from pathlib import Path

from safeprintf import DiagnosticKind, Severity, analyze_file, analyze_source, typecast_source


FIXTURES = Path(__file__).parent / "fixtures"


def kinds(src: str) -> list[DiagnosticKind]:
    return [d.kind for d in analyze_source(src, file="t.c").diagnostics]


def test_hello_world_is_clean() -> None:
    src = '#include <stdio.h>\n\nint main() {\n    printf("Hello, world!\\n");\n    return 0;\n}\n'
    analysis = analyze_source(src, file="hello.c")
    assert analysis.diagnostics == ()
    assert not analysis.has_errors
    assert len(analysis.calls) == 1


def test_literal_percent_needs_no_argument() -> None:
    assert kinds('printf("100%%\\n");') == []


def test_matching_counts_are_clean() -> None:
    assert kinds('printf("%d %s %c %f %p", 1, "s", \'c\', 2.0, &x);') == []
    assert kinds('fprintf(stderr, "%s: %d\\n", prog, code);') == []


def test_positions_after_block_comment() -> None:
    analysis = analyze_source("/* a\n * b\n */\nprintf(x);", file="t.c")
    (d,) = analysis.diagnostics
    assert d.kind is DiagnosticKind.NON_LITERAL_FORMAT_STRING
    assert d.primary_span is not None
    assert d.primary_span.format() == "t.c:4:8"
    assert str(d).startswith("t.c:4:8: error[NonLiteralFormatString]")


def test_unterminated_comment_is_fatal() -> None:
    analysis = analyze_source('printf("%d");\n/* never closed\n', file="t.c")
    assert analysis.fatal
    assert analysis.calls == ()
    (d,) = analysis.diagnostics
    assert d.kind is DiagnosticKind.UNTERMINATED_LITERAL_OR_COMMENT
    assert d.severity is Severity.ERROR
    assert d.primary_span is not None and d.primary_span.format() == "t.c:2:1"


def test_checking_resumes_after_unbalanced_call() -> None:
    assert kinds('printf("%d", (1;\nprintf(x);') == [
        DiagnosticKind.UNBALANCED_PARENTHESES,
        DiagnosticKind.NON_LITERAL_FORMAT_STRING,
    ]


def test_diagnostics_are_sorted_by_position() -> None:
    src = 'printf("%d", (double) 1, 2);\nprintf("%y", 1);\nprintf("%d");\n'
    analysis = analyze_source(src, file="t.c")
    offsets = [d.primary_span.start.offset for d in analysis.diagnostics if d.primary_span]
    assert offsets == sorted(offsets)
    assert [d.kind for d in analysis.diagnostics] == [
        DiagnosticKind.TYPE_MISMATCH,
        DiagnosticKind.EXCESS_ARGUMENTS,
        DiagnosticKind.INVALID_SPECIFIER,
        DiagnosticKind.EXCESS_SPECIFIERS,
    ]
    assert [d.kind for d in analysis.errors] == [
        DiagnosticKind.INVALID_SPECIFIER,
        DiagnosticKind.EXCESS_SPECIFIERS,
    ]


def test_each_run_starts_fresh() -> None:
    a = analyze_source("printf(x);", file="a.c")
    b = analyze_source('printf("ok");', file="b.c")
    assert len(a.diagnostics) == 1
    assert b.diagnostics == ()


def test_readme_example() -> None:
    analysis = analyze_file(FIXTURES / "readme.c")
    assert analysis.diagnostics == ()
    assert [cc.call.span.start.line for cc in analysis.calls] == [4, 5, 6, 12, 13]

    lines = typecast_source(analysis).splitlines()
    assert lines[3] == '    printf("Hello, world!");'
    assert lines[4] == '    printf("Balance: $%d.", (int) (100));'
    assert lines[5] == '    printf ( " s p a c e %d ", (int) (100) );'
    assert lines[11] == '    snprintf((char* restrict) (input), (size_t) (1023), "Hello, %s!", (char*) (name));'
    assert lines[12] == '    printf("%s", (char*) (input));'
    assert lines[15] == "    void* function_ptr = printf;"
    assert lines[18] == '    // printf("%s, %s", (int) 1, (int) 1);'


def test_crlf_line_endings_survive(tmp_path: Path) -> None:
    p = tmp_path / "crlf.c"
    p.write_bytes(b'int main() {\r\n    printf("%d", 1);\r\n}\r\n')
    analysis = analyze_file(p)
    assert analysis.diagnostics == ()
    assert typecast_source(analysis) == 'int main() {\r\n    printf("%d", (int) (1));\r\n}\r\n'
