from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from . import diagnostics as D
from .calls import extract_calls
from .errors import LexError
from .functions import DEFAULT_FUNCTIONS, FormatFunction
from .lexer import tokenize
from .matcher import CheckedCall, check_call
from .render import render_diagnostics
from .rewrite import apply_edits, optimize_edits, typecast_edits
from .spans import SourceFile
from .tokens import Token


log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Analysis:
    """Everything known about one file after a run; fresh per call."""

    source: SourceFile
    tokens: tuple[Token, ...]
    calls: tuple[CheckedCall, ...]
    diagnostics: tuple[D.Diagnostic, ...]
    fatal: bool = False

    @property
    def file(self) -> str:
        return self.source.name

    @property
    def has_errors(self) -> bool:
        return D.has_errors(self.diagnostics)

    @property
    def errors(self) -> tuple[D.Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.is_error)

    @property
    def warnings(self) -> tuple[D.Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if not d.is_error)


def analyze_source(
    src: str,
    *,
    file: str = "<memory>",
    functions: Mapping[str, FormatFunction] = DEFAULT_FUNCTIONS,
) -> Analysis:
    source = SourceFile(file, src)
    try:
        toks = tokenize(src, file=file)
    except LexError as e:
        log.debug("%s: lexing failed: %s", file, e.message)
        diag = D.unterminated(e.span, e.message, e.hint)
        return Analysis(source, (), (), (diag,), fatal=True)

    calls, diags = extract_calls(toks, functions)
    checked = tuple(check_call(c, source) for c in calls)
    for cc in checked:
        diags.extend(cc.diagnostics)
    log.debug("%s: %d call(s), %d diagnostic(s)", file, len(checked), len(diags))
    return Analysis(source, tuple(toks), checked, D.sort_diagnostics(diags))


def analyze_file(
    path: str | Path,
    *,
    functions: Mapping[str, FormatFunction] = DEFAULT_FUNCTIONS,
) -> Analysis:
    p = Path(path)
    # newline="" keeps \r\n line endings as they are
    with p.open(encoding="utf-8", errors="surrogateescape", newline="") as fh:
        src = fh.read()
    return analyze_source(src, file=str(p), functions=functions)


def typecast_source(analysis: Analysis) -> str:
    """Source text with explicit casts on every formatted argument."""
    if analysis.fatal:
        return analysis.source.text
    return apply_edits(analysis.source.text, typecast_edits(analysis.calls))


def optimize_source(analysis: Analysis) -> str:
    """Source text with eligible calls rewritten to the `safe_*` calling convention."""
    if analysis.fatal:
        return analysis.source.text
    return apply_edits(analysis.source.text, optimize_edits(analysis.calls))


def render_report(analysis: Analysis) -> str:
    """All diagnostics of a file as code frames, followed by a one-line summary."""
    n_err, n_warn = len(analysis.errors), len(analysis.warnings)
    if not analysis.diagnostics:
        return f"{analysis.file}: ok"
    body = render_diagnostics(analysis.diagnostics, analysis.source)
    summary = f"{analysis.file}: {n_err} error{'s' if n_err != 1 else ''}, {n_warn} warning{'s' if n_warn != 1 else ''}"
    return body + "\n\n" + summary
