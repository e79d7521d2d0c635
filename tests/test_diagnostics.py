"""Tests for viewslsp.handlers.diagnostics — warning to Diagnostic translation."""
from __future__ import annotations

from lsprotocol import types as lsp

from viewslsp.handlers.diagnostics import get_diagnostics
from viewslsp.views import Loc, LocPoint, WarningRecord


def _warning(kind, start, end, text=''):
    return WarningRecord(
        loc=Loc(start=LocPoint(*start), end=LocPoint(*end)),
        type=kind,
        line=text,
    )


class TestGetDiagnostics:
    def test_no_diagnostics_for_no_warnings(self):
        assert get_diagnostics([]) == []

    def test_unknown_prop_scenario(self):
        diags = get_diagnostics([_warning('UnknownProp', (3, 2), (3, 10))])
        assert diags == [
            lsp.Diagnostic(
                range=lsp.Range(
                    start=lsp.Position(line=2, character=2),
                    end=lsp.Position(line=2, character=10),
                ),
                message='UnknownProp',
                severity=lsp.DiagnosticSeverity.Warning,
                source='ex',
            )
        ]

    def test_lines_shift_to_zero_based(self):
        for line in (1, 2, 17, 4096):
            diag, = get_diagnostics([_warning('X', (line, 0), (line + 1, 0))])
            assert diag.range.start.line == line - 1
            assert diag.range.end.line == line

    def test_columns_passed_through(self):
        diag, = get_diagnostics([_warning('X', (1, 7), (1, 42))])
        assert diag.range.start.character == 7
        assert diag.range.end.character == 42

    def test_order_preserved_without_dedup(self):
        warnings = [
            _warning('B', (5, 0), (5, 1)),
            _warning('A', (1, 0), (1, 1)),
            _warning('B', (5, 0), (5, 1)),
        ]
        assert [d.message for d in get_diagnostics(warnings)] == ['B', 'A', 'B']

    def test_all_warnings(self):
        warnings = [_warning('A', (1, 0), (1, 1)), _warning('B', (2, 0), (2, 1))]
        diags = get_diagnostics(warnings)
        assert all(d.severity == lsp.DiagnosticSeverity.Warning for d in diags)
        assert all(d.source == 'ex' for d in diags)

    def test_translation_is_repeatable(self):
        warnings = [_warning('A', (4, 3), (4, 9)), _warning('B', (2, 0), (6, 1))]
        assert get_diagnostics(warnings) == get_diagnostics(warnings)
