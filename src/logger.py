#!/usr/bin/env python3
"""
Console logging with a fixed line prefix
"""

import sys

from constants import LOG_PREFIX


def info(message: str) -> None:
    print(f"{LOG_PREFIX} {message}", flush=True)


def success(message: str) -> None:
    print(f"{LOG_PREFIX} ✓ {message}", flush=True)


def warning(message: str) -> None:
    print(f"{LOG_PREFIX} WARNING: {message}", file=sys.stderr, flush=True)


def error(message: str) -> None:
    print(f"{LOG_PREFIX} ERROR: {message}", file=sys.stderr, flush=True)
