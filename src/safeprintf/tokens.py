from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .spans import Span


class TokenKind(str, Enum):
    IDENT = "IDENT"
    PUNCT = "PUNCT"
    LPAREN = "("
    RPAREN = ")"
    COMMA = ","
    STRING = "STRING"
    CHAR = "CHAR"
    COMMENT = "COMMENT"
    OTHER = "OTHER"

    EOF = "EOF"


@dataclass(frozen=True, slots=True)
class Token:
    kind: TokenKind
    lexeme: str
    span: Span

    @property
    def is_trivia(self) -> bool:
        return self.kind is TokenKind.COMMENT

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.lexeme!r}, {self.span.format()})"
