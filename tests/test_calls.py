from __future__ import annotations

from pathlib import Path

from safeprintf.calls import extract_calls
from safeprintf.diagnostics import DiagnosticKind
from safeprintf.lexer import tokenize
from safeprintf.spans import SourceFile


FIXTURES = Path(__file__).parent / "fixtures"


def calls_of(src: str):
    return extract_calls(tokenize(src, file="t.c"))


def arg_texts(src: str, call) -> list[str]:
    source = SourceFile("t.c", src)
    return [source.slice(a.span) for a in call.arguments]


def test_readme_call_sites() -> None:
    src = (FIXTURES / "readme.c").read_text(encoding="utf-8")
    calls, diags = calls_of(src)
    assert diags == []
    assert [c.function.name for c in calls] == ["printf", "printf", "printf", "snprintf", "printf"]
    assert [c.name.span.start.line for c in calls] == [4, 5, 6, 12, 13]


def test_nested_commas_do_not_split_arguments() -> None:
    src = 'printf("%d %d", f(1, 2), (size_t) (1023));'
    calls, diags = calls_of(src)
    assert diags == []
    assert arg_texts(src, calls[0]) == ['"%d %d"', "f(1, 2)", "(size_t) (1023)"]


def test_function_reference_is_not_a_call() -> None:
    calls, diags = calls_of("void *p = printf;\nint (*q)(const char *, ...) = &printf;")
    assert calls == []
    assert diags == []


def test_declarations_and_members_are_not_calls() -> None:
    src = 'int printf(const char *fmt, ...);\nobj.printf("x");\np->printf(y);\nreturn printf("z");'
    calls, diags = calls_of(src)
    assert diags == []
    assert len(calls) == 1
    assert calls[0].name.span.start.line == 4


def test_comment_between_name_and_paren() -> None:
    src = 'printf /* hi */ ("x");'
    calls, _ = calls_of(src)
    assert len(calls) == 1
    assert arg_texts(src, calls[0]) == ['"x"']


def test_argument_edges_skip_comments() -> None:
    src = 'printf("%d", /* n */ x /* end */);'
    calls, _ = calls_of(src)
    assert arg_texts(src, calls[0]) == ['"%d"', "x"]


def test_unbalanced_call_is_reported_and_scanning_resumes() -> None:
    src = 'printf("%d", (1;\nprintf("ok");'
    calls, diags = calls_of(src)
    assert [d.kind for d in diags] == [DiagnosticKind.UNBALANCED_PARENTHESES]
    assert diags[0].primary_span.start.column == 7
    assert len(calls) == 1
    assert calls[0].name.span.start.line == 2


def test_unbalanced_at_eof() -> None:
    calls, diags = calls_of('printf("x"')
    assert calls == []
    assert [d.kind for d in diags] == [DiagnosticKind.UNBALANCED_PARENTHESES]


def test_nested_tracked_calls_are_found() -> None:
    src = 'printf("%d", snprintf(buf, 8, "%s", s));'
    calls, _ = calls_of(src)
    assert [c.function.name for c in calls] == ["printf", "snprintf"]


def test_empty_argument_is_an_error() -> None:
    calls, diags = calls_of('printf("a",);\nprintf(, 1);')
    assert calls == []
    assert [d.kind for d in diags] == [DiagnosticKind.EMPTY_ARGUMENT, DiagnosticKind.EMPTY_ARGUMENT]


def test_no_arguments() -> None:
    calls, diags = calls_of("printf( /* nothing */ );")
    assert diags == []
    assert calls[0].arguments == ()
    assert calls[0].format_argument is None


def test_format_argument_position_per_function() -> None:
    src = 'snprintf(buf, sizeof(buf), "%s", name);'
    calls, _ = calls_of(src)
    call = calls[0]
    source = SourceFile("t.c", src)
    assert [source.slice(a.span) for a in call.fixed_arguments] == ["buf", "sizeof(buf)"]
    assert source.slice(call.format_argument.span) == '"%s"'
    assert [source.slice(a.span) for a in call.trailing_arguments] == ["name"]


def test_custom_function_table() -> None:
    from safeprintf.functions import FormatFunction

    table = {"log_msg": FormatFunction("log_msg", ("int",))}
    calls, _ = extract_calls(tokenize('log_msg(3, "%d", x); printf(y);'), table)
    assert [c.function.name for c in calls] == ["log_msg"]
