from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Sequence

from . import diagnostics as D
from .functions import DEFAULT_FUNCTIONS, FormatFunction
from .spans import Span, join_span
from .tokens import Token, TokenKind


log = logging.getLogger(__name__)

# Identifiers that may directly precede a call expression. Any other
# identifier in front of a tracked name means a declaration (`int printf(`).
_EXPRESSION_KEYWORDS = frozenset({"return", "else", "do", "case", "sizeof"})


@dataclass(frozen=True, slots=True)
class Argument:
    """One top-level, comma-delimited argument of a call."""

    tokens: tuple[Token, ...]

    def __post_init__(self) -> None:
        if not self.tokens:
            raise ValueError("an argument needs at least one token")

    @property
    def span(self) -> Span:
        return join_span(self.tokens[0].span, self.tokens[-1].span)

    @property
    def code(self) -> tuple[Token, ...]:
        """Tokens without comments."""
        return tuple(t for t in self.tokens if not t.is_trivia)

    @property
    def single_token(self) -> Token | None:
        code = self.code
        return code[0] if len(code) == 1 else None

    @property
    def is_string_literal(self) -> bool:
        return all(t.kind is TokenKind.STRING for t in self.code)


@dataclass(frozen=True, slots=True)
class CallSite:
    function: FormatFunction
    name: Token
    open: Token
    close: Token
    arguments: tuple[Argument, ...]

    @property
    def span(self) -> Span:
        return join_span(self.name.span, self.close.span)

    @property
    def fixed_arguments(self) -> tuple[Argument, ...]:
        return self.arguments[: self.function.format_index]

    @property
    def format_argument(self) -> Argument | None:
        idx = self.function.format_index
        return self.arguments[idx] if idx < len(self.arguments) else None

    @property
    def trailing_arguments(self) -> tuple[Argument, ...]:
        return self.arguments[self.function.format_index + 1 :]

    def __repr__(self) -> str:
        return f"CallSite({self.function.name}, args={len(self.arguments)}, {self.span.format()})"


def _prev_code(tokens: Sequence[Token], i: int) -> Token | None:
    j = i - 1
    while j >= 0 and tokens[j].is_trivia:
        j -= 1
    return tokens[j] if j >= 0 else None


def _next_code(tokens: Sequence[Token], i: int) -> int:
    # The token list always ends in EOF, which is not trivia.
    while tokens[i].is_trivia:
        i += 1
    return i


def _is_reference_only(tokens: Sequence[Token], i: int) -> bool:
    prev = _prev_code(tokens, i)
    if prev is None:
        return False
    if prev.kind is TokenKind.PUNCT and prev.lexeme in (".", "->"):
        return True
    return prev.kind is TokenKind.IDENT and prev.lexeme not in _EXPRESSION_KEYWORDS


def _strip_trivia(toks: list[Token]) -> tuple[Token, ...]:
    lo, hi = 0, len(toks)
    while lo < hi and toks[lo].is_trivia:
        lo += 1
    while hi > lo and toks[hi - 1].is_trivia:
        hi -= 1
    return tuple(toks[lo:hi])


def _scan_call(
    tokens: Sequence[Token], name_idx: int, open_idx: int, fn: FormatFunction
) -> CallSite | D.Diagnostic:
    name, open_ = tokens[name_idx], tokens[open_idx]
    slots: list[tuple[Token, ...]] = []
    separators: list[Token] = [open_]
    current: list[Token] = []
    depth = 0

    for k in range(open_idx, len(tokens)):
        t = tokens[k]
        if t.kind is TokenKind.EOF or (t.kind is TokenKind.PUNCT and t.lexeme == ";"):
            return D.unbalanced_parentheses(fn.name, name.span, open_.span)
        if t.kind is TokenKind.LPAREN:
            depth += 1
            if depth == 1:
                continue
        elif t.kind is TokenKind.RPAREN:
            depth -= 1
            if depth == 0:
                slots.append(_strip_trivia(current))
                separators.append(t)
                break
        elif t.kind is TokenKind.COMMA and depth == 1:
            slots.append(_strip_trivia(current))
            separators.append(t)
            current = []
            continue
        current.append(t)

    close = separators[-1]
    if len(slots) == 1 and not slots[0]:
        # f() takes no arguments at all
        return CallSite(fn, name, open_, close, ())

    for idx, slot in enumerate(slots):
        if not slot:
            gap = join_span(separators[idx].span, separators[idx + 1].span)
            return D.empty_argument(fn.name, gap)

    return CallSite(fn, name, open_, close, tuple(Argument(s) for s in slots))


def extract_calls(
    tokens: Sequence[Token],
    functions: Mapping[str, FormatFunction] = DEFAULT_FUNCTIONS,
) -> tuple[list[CallSite], list[D.Diagnostic]]:
    """Find calls to tracked functions in a token stream.

    Calls are returned in source order. Nested calls (a tracked call inside
    another one's arguments) are found too. Malformed calls produce a
    diagnostic instead of a `CallSite`, and scanning continues right after
    their opening parenthesis.
    """
    calls: list[CallSite] = []
    diags: list[D.Diagnostic] = []

    for i, tok in enumerate(tokens):
        if tok.kind is not TokenKind.IDENT:
            continue
        fn = functions.get(tok.lexeme)
        if fn is None:
            continue
        j = _next_code(tokens, i + 1)
        if tokens[j].kind is not TokenKind.LPAREN:
            log.debug("%s: `%s` used as a value, not a call", tok.span.format(), tok.lexeme)
            continue
        if _is_reference_only(tokens, i):
            log.debug("%s: `%s` is declared or a member, not a call", tok.span.format(), tok.lexeme)
            continue

        out = _scan_call(tokens, i, j, fn)
        if isinstance(out, D.Diagnostic):
            diags.append(out)
        else:
            calls.append(out)

    return calls, diags
