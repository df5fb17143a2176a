"""Type families shared by format specifiers and casts.

Everything here is a fixed table: a cast's family is looked up by its
normalized spelling and never guessed from context.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping


class TypeFamily(str, Enum):
    INTEGER = "integer"
    UNSIGNED = "unsigned"
    FLOATING = "floating"
    CHAR = "char"
    STRING = "string"
    POINTER = "pointer"

    @property
    def specifier(self) -> str:
        return _SPECIFIER_CHARS[self]

    @property
    def c_type(self) -> str:
        return _CANONICAL_TYPES[self]

    @property
    def runtime_tag(self) -> str:
        return "fmt_" + _TAG_NAMES[self]


_SPECIFIER_CHARS = {
    TypeFamily.INTEGER: "d",
    TypeFamily.UNSIGNED: "u",
    TypeFamily.FLOATING: "f",
    TypeFamily.CHAR: "c",
    TypeFamily.STRING: "s",
    TypeFamily.POINTER: "p",
}

_CANONICAL_TYPES = {
    TypeFamily.INTEGER: "int",
    TypeFamily.UNSIGNED: "unsigned int",
    TypeFamily.FLOATING: "double",
    TypeFamily.CHAR: "char",
    TypeFamily.STRING: "char*",
    TypeFamily.POINTER: "void*",
}

_TAG_NAMES = {
    TypeFamily.INTEGER: "int",
    TypeFamily.UNSIGNED: "unsigned",
    TypeFamily.FLOATING: "float",
    TypeFamily.CHAR: "char",
    TypeFamily.STRING: "string",
    TypeFamily.POINTER: "pointer",
}

# C type for a (family, length modifier) pair, used when inserting casts.
_SIZED_TYPES = {
    (TypeFamily.INTEGER, "hh"): "signed char",
    (TypeFamily.INTEGER, "h"): "short",
    (TypeFamily.INTEGER, "l"): "long",
    (TypeFamily.INTEGER, "ll"): "long long",
    (TypeFamily.INTEGER, "q"): "long long",
    (TypeFamily.INTEGER, "j"): "intmax_t",
    (TypeFamily.INTEGER, "z"): "ssize_t",
    (TypeFamily.INTEGER, "t"): "ptrdiff_t",
    (TypeFamily.UNSIGNED, "hh"): "unsigned char",
    (TypeFamily.UNSIGNED, "h"): "unsigned short",
    (TypeFamily.UNSIGNED, "l"): "unsigned long",
    (TypeFamily.UNSIGNED, "ll"): "unsigned long long",
    (TypeFamily.UNSIGNED, "q"): "unsigned long long",
    (TypeFamily.UNSIGNED, "j"): "uintmax_t",
    (TypeFamily.UNSIGNED, "z"): "size_t",
    (TypeFamily.UNSIGNED, "t"): "size_t",
    (TypeFamily.FLOATING, "L"): "long double",
    (TypeFamily.CHAR, "l"): "wint_t",
    (TypeFamily.STRING, "l"): "wchar_t*",
}


def c_type_for(family: TypeFamily, length: str = "") -> str:
    return _SIZED_TYPES.get((family, length), family.c_type)


def _vocab(entries: dict[TypeFamily, tuple[str, ...]]) -> Mapping[str, TypeFamily]:
    out: dict[str, TypeFamily] = {}
    for family, spellings in entries.items():
        for s in spellings:
            out[normalize_type(s)] = family
    return MappingProxyType(out)


def normalize_type(spelling: str) -> str:
    """Canonical spelling of a cast type: single spaces, `*` glued, no qualifiers."""
    words = [w for w in spelling.replace("*", " * ").split() if w not in _QUALIFIERS]
    base = " ".join(w for w in words if w != "*")
    return base + "*" * words.count("*")


_QUALIFIERS = frozenset({"const", "volatile", "restrict", "__restrict", "__restrict__"})


CAST_FAMILIES: Mapping[str, TypeFamily] = _vocab(
    {
        TypeFamily.INTEGER: (
            "int", "signed", "signed int", "short", "short int", "signed short",
            "long", "long int", "signed long", "long long", "long long int",
            "signed char", "intmax_t", "ssize_t", "ptrdiff_t", "intptr_t",
            "int8_t", "int16_t", "int32_t", "int64_t", "_Bool", "bool",
        ),
        TypeFamily.UNSIGNED: (
            "unsigned", "unsigned int", "unsigned short", "unsigned short int",
            "unsigned long", "unsigned long int", "unsigned long long",
            "unsigned long long int", "unsigned char", "size_t", "uintmax_t",
            "uintptr_t", "uint8_t", "uint16_t", "uint32_t", "uint64_t",
        ),
        TypeFamily.FLOATING: ("float", "double", "long double"),
        TypeFamily.CHAR: ("char", "wint_t", "wchar_t"),
        TypeFamily.STRING: ("char*", "unsigned char*", "wchar_t*"),
        TypeFamily.POINTER: (
            "void*", "int*", "signed char*", "short*", "long*", "long long*", "size_t*",
            "intmax_t*", "ptrdiff_t*", "FILE*", "char**", "void**",
        ),
    }
)
