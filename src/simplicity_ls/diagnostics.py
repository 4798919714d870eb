from __future__ import annotations

from lsprotocol import types

from .spans import span_to_utf16_range
from .syntax import LINE_BREAK_RE, FrontendError


def error_to_diagnostic(error: FrontendError, source: str) -> types.Diagnostic:
    """Convert a frontend error into an editor diagnostic.

    Raises :class:`~simplicity_ls.errors.ConversionFailed` when the error
    span cannot be expressed in editor coordinates.
    """
    lines = LINE_BREAK_RE.split(error.source) if error.source is not None else []
    return types.Diagnostic(
        range=span_to_utf16_range(error.span, lines),
        message=str(error),
        severity=types.DiagnosticSeverity.Error,
        source=source,
    )
