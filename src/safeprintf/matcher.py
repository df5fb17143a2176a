from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from . import diagnostics as D
from .calls import Argument, CallSite
from .families import CAST_FAMILIES, TypeFamily, normalize_type
from .format_string import FormatString, Slot, parse_format_string
from .spans import SourceFile, Span, join_span
from .tokens import Token, TokenKind


log = logging.getLogger(__name__)

_UNARY = frozenset({"-", "+", "!", "~", "&", "*"})
_CLOSERS = {"(": ")", "[": "]"}


@dataclass(frozen=True, slots=True)
class Cast:
    """An explicit `(type)` prefix; `family` is None when the type isn't in the vocabulary."""

    spelling: str
    family: TypeFamily | None
    span: Span


@dataclass(frozen=True, slots=True)
class TypedArgument:
    argument: Argument
    slot: Slot
    cast: Cast | None

    @property
    def explicit(self) -> bool:
        return self.cast is not None and self.cast.family is not None

    @property
    def family(self) -> TypeFamily | None:
        return self.cast.family if self.cast is not None else None


@dataclass(frozen=True, slots=True)
class CheckedCall:
    call: CallSite
    format: FormatString | None
    arguments: tuple[TypedArgument, ...]
    diagnostics: tuple[D.Diagnostic, ...]

    @property
    def aborted(self) -> bool:
        """Analysis stopped before the format string could be parsed."""
        return self.format is None

    @property
    def has_errors(self) -> bool:
        return D.has_errors(self.diagnostics)


def _is_open(t: Token) -> bool:
    return t.kind is TokenKind.LPAREN or (t.kind is TokenKind.PUNCT and t.lexeme == "[")


def _matching(toks: Sequence[Token], i: int) -> int | None:
    """Index of the bracket closing toks[i], or None."""
    stack: list[str] = []
    for k in range(i, len(toks)):
        lex = toks[k].lexeme
        if lex in _CLOSERS:
            stack.append(_CLOSERS[lex])
        elif stack and lex == stack[-1]:
            stack.pop()
            if not stack:
                return k
    return None


def _is_postfix_chain(toks: Sequence[Token]) -> bool:
    k = 0
    while k < len(toks):
        t = toks[k]
        if _is_open(t):
            m = _matching(toks, k)
            if m is None:
                return False
            k = m + 1
        elif t.kind is TokenKind.PUNCT and t.lexeme in (".", "->"):
            if k + 1 >= len(toks) or toks[k + 1].kind is not TokenKind.IDENT:
                return False
            k += 2
        elif t.kind is TokenKind.PUNCT and t.lexeme in ("++", "--"):
            k += 1
        else:
            return False
    return True


def _is_primary(toks: Sequence[Token]) -> bool:
    k = 0
    while k < len(toks) and toks[k].kind is TokenKind.PUNCT and toks[k].lexeme in _UNARY:
        k += 1
    if k >= len(toks):
        return False
    t = toks[k]
    if t.kind is TokenKind.STRING:
        return all(x.kind is TokenKind.STRING for x in toks[k:])
    if t.kind in (TokenKind.OTHER, TokenKind.CHAR):
        return k == len(toks) - 1
    if t.kind is TokenKind.IDENT:
        return _is_postfix_chain(toks[k + 1 :])
    if t.kind is TokenKind.LPAREN:
        m = _matching(toks, k)
        return m is not None and _is_postfix_chain(toks[m + 1 :])
    return False


def find_cast(argument: Argument) -> Cast | None:
    """Recognize `(type) operand` where the operand is a single primary expression.

    Anything looser (a cast followed by a binary operator, a double cast,
    a cast wrapped in extra parentheses) is not recognized.
    """
    code = argument.code
    if len(code) < 4 or code[0].kind is not TokenKind.LPAREN:
        return None
    k = 1
    words: list[str] = []
    while k < len(code) and (
        code[k].kind is TokenKind.IDENT or (code[k].kind is TokenKind.PUNCT and code[k].lexeme == "*")
    ):
        words.append(code[k].lexeme)
        k += 1
    if not words or words[0] == "*" or k >= len(code) or code[k].kind is not TokenKind.RPAREN:
        return None
    if not _is_primary(code[k + 1 :]):
        return None
    spelling = normalize_type(" ".join(words))
    if not spelling or spelling.startswith("*"):
        return None
    return Cast(spelling, CAST_FAMILIES.get(spelling), join_span(code[0].span, code[k].span))


def check_call(call: CallSite, source: SourceFile) -> CheckedCall:
    """Parse the call's format string and match its specifiers to the arguments."""
    fn = call.function
    fmt_arg = call.format_argument
    if fmt_arg is None:
        span = join_span(call.open.span, call.close.span)
        diag = D.missing_arguments(fn.name, span, fn.format_index + 1, len(call.arguments))
        return CheckedCall(call, None, (), (diag,))

    if not fmt_arg.is_string_literal:
        tok = fmt_arg.single_token
        ident = tok.lexeme if tok is not None and tok.kind is TokenKind.IDENT else None
        prefix = source.text[call.name.span.start.offset : fmt_arg.span.start.offset]
        call_text = " ".join(prefix.split())
        if call_text.endswith(","):
            call_text += " "
        diag = D.non_literal_format(call_text, fmt_arg.span, ident)
        return CheckedCall(call, None, (), (diag,))

    fmt, diags = parse_format_string(fmt_arg, source)
    if not fn.variadic:
        return CheckedCall(call, fmt, (), tuple(diags))

    slots = fmt.slots
    args = call.trailing_arguments
    typed: list[TypedArgument] = []
    for slot, arg in zip(slots, args):
        cast = find_cast(arg)
        typed.append(TypedArgument(arg, slot, cast))
        expected = slot.family
        if expected is None or cast is None or cast.family is None or cast.family is expected:
            continue
        diags.append(
            D.type_mismatch(
                specifier_span=slot.specifier.span,
                specifier_raw=slot.specifier.raw,
                expected=expected.value,
                expected_type=slot.c_type or expected.c_type,
                cast_span=cast.span,
                cast_family=cast.family.value,
                cast_type=cast.spelling,
                suggested_specifier=cast.family.specifier,
            )
        )

    if len(slots) > len(args):
        excess = slots[len(args) :]
        fmt_span = join_span(excess[0].specifier.span, excess[-1].specifier.span)
        args_span = join_span(args[0].span, args[-1].span) if args else call.close.span
        diags.append(D.excess_specifiers(fmt_span, args_span, len(excess)))
    elif len(args) > len(slots):
        extra = args[len(slots) :]
        args_span = join_span(extra[0].span, extra[-1].span)
        diags.append(D.excess_arguments(fmt_arg.span, args_span, len(extra)))

    log.debug("%s: %d specifier(s), %d argument(s)", call.span.format(), len(slots), len(args))
    return CheckedCall(call, fmt, tuple(typed), tuple(diags))
