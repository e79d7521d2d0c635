"""Tests for viewslsp.cli — argument parsing and startup."""
from __future__ import annotations

import logging
import unittest.mock as mock

import pytest

from viewslsp.cli import _build_parser, main


class TestCli:
    def test_defaults(self):
        args = _build_parser().parse_args([])
        assert args.tcp is False
        assert (args.host, args.port) == ('127.0.0.1', 2087)
        assert args.log_level == 'warning'

    def test_log_level_is_case_insensitive(self):
        assert _build_parser().parse_args(['--log-level', 'DEBUG']).log_level == 'debug'

    def test_unknown_log_level_rejected(self):
        with pytest.raises(SystemExit):
            _build_parser().parse_args(['--log-level', 'loud'])

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(['--version'])
        assert exc.value.code == 0
        assert capsys.readouterr().out.startswith('viewslsp ')

    def test_stdio_by_default(self):
        root = logging.getLogger()
        previous = root.level
        try:
            with mock.patch('viewslsp.server.server.start_io') as start_io, \
                    mock.patch('viewslsp.server.server.start_tcp') as start_tcp:
                main(['--log-level', 'info'])
            start_io.assert_called_once_with()
            start_tcp.assert_not_called()
            assert root.level == logging.INFO
        finally:
            root.setLevel(previous)

    def test_tcp(self):
        with mock.patch('viewslsp.server.server.start_tcp') as start_tcp:
            main(['--tcp', '--port', '9000'])
        start_tcp.assert_called_once_with('127.0.0.1', 9000)
