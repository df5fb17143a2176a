from __future__ import annotations

import pytest

from safeprintf.families import CAST_FAMILIES, TypeFamily, c_type_for, normalize_type
from safeprintf.format_string import _COUNT_TYPES, _LENGTHS


@pytest.mark.parametrize("family", list(TypeFamily))
@pytest.mark.parametrize("length", ["", *_LENGTHS])
def test_every_cast_type_belongs_to_its_family(family: TypeFamily, length: str) -> None:
    c_type = c_type_for(family, length)
    assert CAST_FAMILIES[normalize_type(c_type)] is family


@pytest.mark.parametrize("length", sorted(_COUNT_TYPES))
def test_count_pointers_are_pointers(length: str) -> None:
    assert CAST_FAMILIES[_COUNT_TYPES[length]] is TypeFamily.POINTER


def test_normalize_type() -> None:
    assert normalize_type("const  char *") == "char*"
    assert normalize_type("char * restrict") == "char*"
    assert normalize_type("unsigned   long long") == "unsigned long long"
    assert normalize_type("void **") == "void**"


def test_spellings_map_to_one_family() -> None:
    assert CAST_FAMILIES["ptrdiff_t"] is TypeFamily.INTEGER
    assert CAST_FAMILIES["size_t"] is TypeFamily.UNSIGNED
    assert CAST_FAMILIES["signed char*"] is TypeFamily.POINTER
    assert CAST_FAMILIES["unsigned char*"] is TypeFamily.STRING
