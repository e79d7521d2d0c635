"""Command line entry point: start the server on stdio or TCP."""
from __future__ import annotations

import argparse
import logging
import sys

from viewslsp import __version__

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog='viewslsp', description='Views language server.')
    p.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    p.add_argument(
        '--tcp',
        action='store_true',
        help='serve over TCP instead of stdin/stdout',
    )
    p.add_argument('--host', default='127.0.0.1', help='TCP host (with --tcp)')
    p.add_argument('--port', type=int, default=2087, help='TCP port (with --tcp)')
    p.add_argument(
        '--log-level',
        type=str.lower,
        default='warning',
        choices=['debug', 'info', 'warning', 'error', 'critical'],
        help='initial level of the stderr log; the client can change it later '
             'through initializationOptions or the languageServerViews.logLevel setting',
    )
    return p


def main(argv: list[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)

    # stdout carries the protocol, so logs always go to stderr.
    logging.basicConfig(format=LOG_FORMAT, stream=sys.stderr)

    from viewslsp.server import apply_log_level, server
    apply_log_level(args.log_level)

    if args.tcp:
        server.start_tcp(args.host, args.port)
    else:
        server.start_io()


if __name__ == '__main__':
    main()
