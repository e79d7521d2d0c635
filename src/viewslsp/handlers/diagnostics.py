"""Convert parser warnings into LSP Diagnostic objects."""
from __future__ import annotations

from lsprotocol import types as lsp

DIAGNOSTIC_SOURCE = 'ex'


def _position(point) -> lsp.Position:
    # Parser lines are 1-based, LSP lines 0-based; columns are passed through.
    return lsp.Position(line=point.line - 1, character=point.column)


def get_diagnostics(warnings) -> list[lsp.Diagnostic]:
    """Return one Warning-severity ``Diagnostic`` per parser warning, in order."""
    return [
        lsp.Diagnostic(
            range=lsp.Range(
                start=_position(warning.loc.start),
                end=_position(warning.loc.end),
            ),
            message=warning.type,
            severity=lsp.DiagnosticSeverity.Warning,
            source=DIAGNOSTIC_SOURCE,
        )
        for warning in warnings
    ]
