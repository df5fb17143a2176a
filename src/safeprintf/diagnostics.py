from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from .spans import Span


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class DiagnosticKind(str, Enum):
    NON_LITERAL_FORMAT_STRING = "NonLiteralFormatString"
    INVALID_SPECIFIER = "InvalidSpecifier"
    EXCESS_SPECIFIERS = "ExcessSpecifiers"
    EXCESS_ARGUMENTS = "ExcessArguments"
    TYPE_MISMATCH = "TypeMismatch"
    UNTERMINATED_LITERAL_OR_COMMENT = "UnterminatedLiteralOrComment"
    UNBALANCED_PARENTHESES = "UnbalancedParentheses"
    MISSING_ARGUMENTS = "MissingArguments"
    EMPTY_ARGUMENT = "EmptyArgument"

    @property
    def severity(self) -> Severity:
        if self in _WARNINGS:
            return Severity.WARNING
        return Severity.ERROR


_WARNINGS = frozenset({DiagnosticKind.EXCESS_ARGUMENTS, DiagnosticKind.TYPE_MISMATCH})


@dataclass(frozen=True, slots=True)
class Label:
    span: Span
    message: str
    primary: bool = True


@dataclass(frozen=True, slots=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str
    labels: tuple[Label, ...] = ()
    help: str | None = None

    @property
    def severity(self) -> Severity:
        return self.kind.severity

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    @property
    def primary_span(self) -> Span | None:
        for label in self.labels:
            if label.primary:
                return label.span
        return self.labels[0].span if self.labels else None

    def sort_key(self) -> tuple[int, int]:
        sp = self.primary_span
        return (sp.start.offset, sp.end.offset) if sp is not None else (-1, -1)

    def __str__(self) -> str:
        sp = self.primary_span
        where = f"{sp.format()}: " if sp is not None else ""
        return f"{where}{self.severity.value}[{self.kind.value}]: {self.message}"


def sort_diagnostics(diags: Iterable[Diagnostic]) -> tuple[Diagnostic, ...]:
    return tuple(sorted(diags, key=Diagnostic.sort_key))


def has_errors(diags: Iterable[Diagnostic]) -> bool:
    return any(d.is_error for d in diags)


# --- factories -------------------------------------------------------------


def unterminated(span: Span, message: str, hint: str | None) -> Diagnostic:
    return Diagnostic(
        DiagnosticKind.UNTERMINATED_LITERAL_OR_COMMENT,
        message,
        (Label(span, "starts here"),),
        hint,
    )


def unbalanced_parentheses(name: str, callee: Span, open_paren: Span) -> Diagnostic:
    return Diagnostic(
        DiagnosticKind.UNBALANCED_PARENTHESES,
        f"unbalanced parentheses in call to `{name}`",
        (
            Label(open_paren, "this parenthesis is never closed"),
            Label(callee, "in this call", primary=False),
        ),
        "Close the argument list with `)` before the end of the statement.",
    )


def empty_argument(name: str, span: Span) -> Diagnostic:
    return Diagnostic(
        DiagnosticKind.EMPTY_ARGUMENT,
        f"empty argument in call to `{name}`",
        (Label(span, "expected an argument here"),),
        "Remove the extra comma or supply the missing argument.",
    )


def missing_arguments(name: str, span: Span, expected: int, got: int) -> Diagnostic:
    return Diagnostic(
        DiagnosticKind.MISSING_ARGUMENTS,
        f"missing function arguments, `{name}` takes at least {expected}",
        (Label(span, "not enough arguments in function call"),),
        f"Supply enough arguments for the function call ({got} given).",
    )


def non_literal_format(call_text: str, span: Span, ident: str | None) -> Diagnostic:
    if ident is not None:
        help = f'To safely print a string, use `{call_text}"%s", {ident})` instead.'
    else:
        help = f'Use a string literal as the format argument, like `{call_text}"hello")`.'
    return Diagnostic(
        DiagnosticKind.NON_LITERAL_FORMAT_STRING,
        "format string isn't a string literal, this is potentially an overflow vulnerability!",
        (Label(span, "not a string literal"),),
        help,
    )


def invalid_specifier(span: Span, raw: str) -> Diagnostic:
    return Diagnostic(
        DiagnosticKind.INVALID_SPECIFIER,
        f"invalid conversion specifier `{raw}`",
        (Label(span, "unknown conversion"),),
        "Use a valid conversion such as `%d` or `%s`, or `%%` for a literal percent sign.",
    )


def excess_specifiers(format_span: Span, args_span: Span, count: int) -> Diagnostic:
    if count == 1:
        help = "Add an argument or remove a specifier."
    else:
        help = f"Add {count} arguments or remove {count} specifiers."
    return Diagnostic(
        DiagnosticKind.EXCESS_SPECIFIERS,
        "excess specifiers, this will read arbitrary data off the stack!",
        (
            Label(format_span, f"{count} too many specifiers"),
            Label(args_span, "not enough arguments", primary=False),
        ),
        help,
    )


def excess_arguments(format_span: Span, args_span: Span, count: int) -> Diagnostic:
    if count == 1:
        help = "Add a specifier or remove an argument."
    else:
        help = f"Add {count} specifiers or remove {count} arguments."
    return Diagnostic(
        DiagnosticKind.EXCESS_ARGUMENTS,
        "excess arguments",
        (
            Label(format_span, "not enough specifiers", primary=False),
            Label(args_span, f"{count} too many arguments"),
        ),
        help,
    )


def type_mismatch(
    specifier_span: Span,
    specifier_raw: str,
    expected: str,
    expected_type: str,
    cast_span: Span,
    cast_family: str,
    cast_type: str,
    suggested_specifier: str,
) -> Diagnostic:
    return Diagnostic(
        DiagnosticKind.TYPE_MISMATCH,
        f"incorrect specifier for type casted argument: `{specifier_raw}` expects "
        f"{expected}, argument is cast to {cast_family}",
        (
            Label(specifier_span, f"format string expects `{expected_type}` value"),
            Label(cast_span, f"argument is casted as `{cast_type}`", primary=False),
        ),
        f"Change the specifier to `%{suggested_specifier}`, or change the cast to `({expected_type})`.",
    )
