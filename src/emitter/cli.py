"""Command-line entry point: ``logdrop-bench HOST PORT [COUNT]``."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import NoReturn, Optional, Sequence

from .client import EmitterConfig, parse_count, parse_port, parse_source, parse_timeout, run
from .encoders import ENCODERS
from .errors import EmitterError, UsageError
from .record import DEFAULT_SOURCE

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_FAILURE = 2


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"{self.prog}: error: {message}\n")


def _build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="logdrop-bench",
        description="Send a fixed echo record COUNT times over one TCP connection",
    )
    parser.add_argument("host", help="Target host name or address")
    parser.add_argument("port", help="Target TCP port")
    parser.add_argument("count", nargs="?", default="1", help="Number of records to send (default: 1)")
    parser.add_argument(
        "--encoding",
        default="text",
        choices=sorted(ENCODERS),
        help="Wire encoding: compact JSON text or a MessagePack map (default: text)",
    )
    parser.add_argument("--source", default=DEFAULT_SOURCE, help="Value of the record's source field")
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Socket timeout in seconds (default: fully blocking)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        help="Logging verbosity",
    )
    return parser


def _config_from_args(args: argparse.Namespace) -> EmitterConfig:
    return EmitterConfig(
        host=args.host,
        port=parse_port(args.port),
        count=parse_count(args.count),
        encoding=args.encoding,
        source=parse_source(args.source),
        timeout=parse_timeout(args.timeout),
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_USAGE

    logging.basicConfig(level=getattr(logging, args.log_level.upper()), format="%(levelname)s %(message)s")

    try:
        config = _config_from_args(args)
    except UsageError as exc:
        parser.print_usage(sys.stderr)
        print(f"{parser.prog}: error: {exc}", file=sys.stderr)
        return EXIT_USAGE

    try:
        run(config)
    except EmitterError as exc:
        logging.error("%s", exc)
        return EXIT_FAILURE
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
