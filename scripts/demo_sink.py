#!/usr/bin/env python3
"""Small TCP sink that prints received echo records for local testing.

Usage: python scripts/demo_sink.py [host] [port] [--encoding text|msgpack] [--limit N]
"""
import argparse
import json
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.emitter.encoders import ENCODERS  # noqa: E402
from src.io.sink import serve  # noqa: E402


def run(host: str = "127.0.0.1", port: int = 9999, encoding: str = "text", limit=None):
    return serve(
        host,
        port,
        encoding=encoding,
        limit=limit,
        timeout=None,
        on_ready=lambda addr: print(f"demo sink listening on {addr[0]}:{addr[1]}", flush=True),
        on_record=lambda record: print(json.dumps(record, ensure_ascii=False), flush=True),
    )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Print echo records received on one TCP connection")
    parser.add_argument("host", nargs="?", default="127.0.0.1")
    parser.add_argument("port", nargs="?", type=int, default=9999)
    parser.add_argument("--encoding", default="text", choices=sorted(ENCODERS))
    parser.add_argument("--limit", type=int, default=None, help="Stop after N records")
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    records = run(args.host, args.port, args.encoding, args.limit)
    print(f"received {len(records)} record(s)")
