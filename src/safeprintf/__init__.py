from __future__ import annotations

from .api import Analysis, analyze_file, analyze_source, optimize_source, render_report, typecast_source
from .diagnostics import Diagnostic, DiagnosticKind, Severity
from .errors import InternalError, LexError

__all__ = [
    "Analysis",
    "Diagnostic",
    "DiagnosticKind",
    "InternalError",
    "LexError",
    "Severity",
    "analyze_file",
    "analyze_source",
    "optimize_source",
    "render_report",
    "typecast_source",
]
