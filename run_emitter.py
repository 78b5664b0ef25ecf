#!/usr/bin/env python3
"""Send echo records to a TCP endpoint.

Usage: python run_emitter.py HOST PORT [COUNT] [--encoding text|msgpack]
"""
from __future__ import annotations

import sys

from src.emitter.cli import main

if __name__ == "__main__":
    sys.exit(main())
