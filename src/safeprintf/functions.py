from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True, slots=True)
class FormatFunction:
    """A printf-family function: its fixed parameters precede the format string.

    `fixed_params` holds the declared C type of each fixed parameter, used by
    the typecast rewrite. Non-variadic functions (the `v*` variants) take a
    `va_list` after the format, so their arguments are not matched.
    """

    name: str
    fixed_params: tuple[str, ...] = ()
    variadic: bool = True

    @property
    def format_index(self) -> int:
        return len(self.fixed_params)

    @property
    def safe_name(self) -> str:
        return "safe_" + self.name


def _table(*fns: FormatFunction) -> Mapping[str, FormatFunction]:
    return MappingProxyType({f.name: f for f in fns})


DEFAULT_FUNCTIONS: Mapping[str, FormatFunction] = _table(
    FormatFunction("printf"),
    FormatFunction("fprintf", ("FILE*",)),
    FormatFunction("dprintf", ("int",)),
    FormatFunction("sprintf", ("char* restrict",)),
    FormatFunction("snprintf", ("char* restrict", "size_t")),
    FormatFunction("asprintf", ("char**",)),
    FormatFunction("vprintf", variadic=False),
    FormatFunction("vfprintf", ("FILE*",), variadic=False),
    FormatFunction("vdprintf", ("int",), variadic=False),
    FormatFunction("vsprintf", ("char* restrict",), variadic=False),
    FormatFunction("vsnprintf", ("char* restrict", "size_t"), variadic=False),
    FormatFunction("vasprintf", ("char**",), variadic=False),
)
