from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import LexError
from .spans import Position, Span
from .tokens import Token, TokenKind


_IDENT_RE = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")
# C preprocessing numbers: digits with any suffix or exponent.
_NUMBER_RE = re.compile(r"\.?[0-9](?:[eEpP][+-]|[A-Za-z0-9_.])*")
_PUNCTUATORS = (
    "...", "<<=", ">>=",
    "->", "++", "--", "<<", ">>", "<=", ">=", "==", "!=", "&&", "||",
    "*=", "/=", "%=", "+=", "-=", "&=", "^=", "|=", "##",
)
_SINGLE_PUNCT = set("[]{}.&*+-~!/%<>^|?:;=#")
_STRING_PREFIXES = ("u8", "u", "U", "L")
_CHAR_PREFIXES = ("u", "U", "L")


@dataclass(slots=True)
class _Cursor:
    file: str
    src: str
    i: int = 0
    line: int = 1
    col: int = 1

    def eof(self) -> bool:
        return self.i >= len(self.src)

    def peek(self, n: int = 0) -> str:
        j = self.i + n
        if j >= len(self.src):
            return ""
        return self.src[j]

    def advance(self, n: int = 1) -> None:
        for _ in range(n):
            if self.eof():
                return
            ch = self.src[self.i]
            self.i += 1
            if ch == "\n":
                self.line += 1
                self.col = 1
            else:
                self.col += 1

    def pos(self) -> Position:
        return Position(offset=self.i, line=self.line, column=self.col)


def tokenize(src: str, *, file: str = "<memory>") -> list[Token]:
    """Split C source into tokens.

    Whitespace is dropped; comments, string and char literals are kept as
    single tokens whose lexeme is the exact source text. Raises `LexError`
    for an unterminated block comment or literal.
    """
    cur = _Cursor(file=file, src=src)
    tokens: list[Token] = []

    def make_span(start: Position, end: Position) -> Span:
        return Span(file=file, start=start, end=end)

    def emit(kind: TokenKind, start: Position) -> None:
        end = cur.pos()
        tokens.append(Token(kind, src[start.offset : end.offset], make_span(start, end)))

    def error_at(start: Position, msg: str, hint: str | None = None) -> LexError:
        end = cur.pos()
        if end.offset < start.offset:
            end = start
        return LexError(span=make_span(start, end), message=msg, hint=hint)

    def literal(start: Position, quote: str, what: str) -> None:
        # Cursor sits on the opening quote.
        cur.advance()
        while not cur.eof():
            c = cur.peek()
            if c == quote:
                cur.advance()
                emit(TokenKind.STRING if quote == '"' else TokenKind.CHAR, start)
                return
            if c == "\n":
                raise error_at(start, f"unterminated {what} literal", hint=f"close the {quote} quote")
            if c == "\\":
                # The escaped character is consumed as-is, including a newline continuation.
                cur.advance(2)
                continue
            cur.advance()
        raise error_at(start, f"unterminated {what} literal", hint=f"close the {quote} quote")

    while not cur.eof():
        ch = cur.peek()

        # whitespace
        if ch in " \t\r\n\v\f":
            cur.advance()
            continue

        start = cur.pos()

        # line comment //, a trailing backslash continues it
        if ch == "/" and cur.peek(1) == "/":
            cur.advance(2)
            while not cur.eof() and cur.peek() != "\n":
                if cur.peek() == "\\" and cur.peek(1) == "\n":
                    cur.advance()
                cur.advance()
            emit(TokenKind.COMMENT, start)
            continue

        # block comment /* ... */
        if ch == "/" and cur.peek(1) == "*":
            cur.advance(2)
            while not cur.eof():
                if cur.peek() == "*" and cur.peek(1) == "/":
                    cur.advance(2)
                    break
                cur.advance()
            else:
                raise error_at(start, "unterminated block comment", hint="add closing */")
            emit(TokenKind.COMMENT, start)
            continue

        if ch == '"':
            literal(start, '"', "string")
            continue
        if ch == "'":
            literal(start, "'", "character")
            continue

        # identifiers, or encoding prefixes of literals (L"..", u8"..", U'.')
        m = _IDENT_RE.match(src, cur.i)
        if m:
            lex = m.group(0)
            nxt = src[m.end() : m.end() + 1]
            if nxt == '"' and lex in _STRING_PREFIXES:
                cur.advance(len(lex))
                literal(start, '"', "string")
                continue
            if nxt == "'" and lex in _CHAR_PREFIXES:
                cur.advance(len(lex))
                literal(start, "'", "character")
                continue
            cur.advance(len(lex))
            emit(TokenKind.IDENT, start)
            continue

        m = _NUMBER_RE.match(src, cur.i)
        if m:
            cur.advance(len(m.group(0)))
            emit(TokenKind.OTHER, start)
            continue

        single = {
            "(": TokenKind.LPAREN,
            ")": TokenKind.RPAREN,
            ",": TokenKind.COMMA,
        }
        k = single.get(ch)
        if k is not None:
            cur.advance()
            emit(k, start)
            continue

        for p in _PUNCTUATORS:
            if src.startswith(p, cur.i):
                cur.advance(len(p))
                emit(TokenKind.PUNCT, start)
                break
        else:
            cur.advance()
            emit(TokenKind.PUNCT if ch in _SINGLE_PUNCT else TokenKind.OTHER, start)

    eof_pos = cur.pos()
    tokens.append(Token(TokenKind.EOF, "", Span(file=file, start=eof_pos, end=eof_pos)))
    return tokens
