#!/usr/bin/env python3
"""
Inflight command line.

Usage:
    python -m inflight write payload.bin          # prints the reference JSON
    cat payload.bin | python -m inflight write
    python -m inflight read <name> -o out.bin

    # Configuration comes from the environment
    INFLIGHT_CONTAINER=my-bucket INFLIGHT_PATH=jobs/inputs python -m inflight write payload.bin
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import BinaryIO, Optional, Sequence, TextIO

from botocore.exceptions import BotoCoreError

from inflight.core.config import InflightConfig
from inflight.observability.logging import LogLevel, setup_logging
from inflight.storage.inflight import Inflight

logger = logging.getLogger("inflight")

EXIT_OK = 0
EXIT_STORAGE_ERROR = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="inflight",
        description="Write bytes to object storage by content address, or read them back.",
    )
    parser.add_argument("--log-level", choices=[level.name for level in LogLevel], default=None)
    parser.add_argument("--json-logs", action="store_true", default=None,
                        help="Emit JSON log lines (default from INFLIGHT_LOG_JSON)")

    sub = parser.add_subparsers(dest="command", required=True)

    write = sub.add_parser("write", help="Store a payload and print its reference")
    write.add_argument("file", nargs="?", type=Path, help="Payload file (default: stdin)")

    read = sub.add_parser("read", help="Fetch an object by name")
    read.add_argument("name", help="Object name returned by write")
    read.add_argument("-o", "--output", type=Path, help="Destination file (default: stdout)")

    return parser


def main(
    argv: Optional[Sequence[str]] = None,
    stdin: Optional[BinaryIO] = None,
    stdout: Optional[BinaryIO] = None,
    stderr: Optional[TextIO] = None,
) -> int:
    args = build_parser().parse_args(argv)
    stdin = sys.stdin.buffer if stdin is None else stdin
    stdout = sys.stdout.buffer if stdout is None else stdout
    stderr = sys.stderr if stderr is None else stderr

    config_result = InflightConfig.from_env()
    if config_result.is_err():
        print(config_result.error, file=stderr)
        return EXIT_CONFIG_ERROR

    config = config_result.unwrap()
    validation = config.validate()
    if validation.is_err():
        print(f"Configuration error: {validation.error}", file=stderr)
        return EXIT_CONFIG_ERROR

    level = LogLevel[args.log_level or config.observability.log_level]
    json_logs = config.observability.log_json if args.json_logs is None else args.json_logs
    setup_logging(level, json_output=json_logs, stream=stderr)

    try:
        inflight = Inflight.from_config(config)
    except (BotoCoreError, OSError, ValueError) as e:
        print(f"Configuration error: cannot create storage client: {e}", file=stderr)
        return EXIT_CONFIG_ERROR

    if args.command == "write":
        payload = args.file.read_bytes() if args.file else stdin.read()
        result = inflight.write(payload)
        if result.is_err():
            logger.error("Write failed: %s", result.error)
            return EXIT_STORAGE_ERROR
        stdout.write(result.unwrap().to_json().encode() + b"\n")
        stdout.flush()
        return EXIT_OK

    result = inflight.read(args.name)
    if result.is_err():
        logger.error("Read failed: %s", result.error)
        return EXIT_STORAGE_ERROR

    data = result.unwrap()
    if args.output:
        args.output.write_bytes(data)
    else:
        stdout.write(data)
        stdout.flush()
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
