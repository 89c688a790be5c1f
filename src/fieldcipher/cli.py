"""
Command-line host for fieldcipher.

Reads one JSON object per line, encrypts or decrypts its fields with a
FieldTransformer, and writes one JSON object per line.
"""

import argparse
import json
import logging
import sys
from collections.abc import Callable, Iterable
from contextlib import ExitStack
from typing import IO

from .config import FieldCipherConfig
from .encryption import FieldTransformer
from .errors import ConfigurationError
from .models import CipherMode


logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        prog="fieldcipher",
        description="Encrypt or decrypt fields of JSON-lines records",
    )

    parser.add_argument(
        "--config",
        help="Path to a YAML configuration file",
    )

    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in CipherMode],
        help="Override the configured cipher mode",
    )

    parser.add_argument(
        "--input",
        help="Read records from this file instead of stdin",
    )

    parser.add_argument(
        "--output",
        help="Write records to this file instead of stdout",
    )

    parser.add_argument(
        "--tag",
        action="append",
        default=[],
        help="Tag added to the 'tags' list of every fully transformed record (repeatable)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override the configured log level",
    )

    return parser.parse_args(argv)


def tag_record(tags: list[str]) -> Callable[[dict], None]:
    """Build a callback that appends tags to a record's 'tags' list."""

    def add_tags(record: dict) -> None:
        current = record.get("tags")
        if current is None:
            current = []
        elif not isinstance(current, list):
            current = [current]
        for tag in tags:
            if tag not in current:
                current.append(tag)
        record["tags"] = current

    return add_tags


def process_lines(transformer: FieldTransformer, lines: Iterable[str], out: IO[str]) -> tuple[int, int]:
    """
    Transform JSON-lines records and write them to out.

    Args:
        transformer: The configured field transformer
        lines: Input lines, one JSON object each
        out: Output stream

    Returns:
        Tuple of (records written, records that failed to transform)
    """
    written = 0
    failed = 0
    for line_number, line in enumerate(lines, start=1):
        if not line.strip():
            continue

        try:
            record = json.loads(line)
        except json.JSONDecodeError as e:
            logger.error("Skipping line %d: invalid JSON (%s)", line_number, e)
            continue
        if not isinstance(record, dict):
            logger.error("Skipping line %d: expected a JSON object", line_number)
            continue

        if not transformer.transform(record):
            failed += 1

        out.write(json.dumps(record) + "\n")
        written += 1

    return written, failed


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the fieldcipher command."""
    args = parse_args(argv)

    try:
        FieldCipherConfig.initialize(args.config)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    if args.mode:
        FieldCipherConfig.set_cipher_option("mode", args.mode)

    logging.basicConfig(
        level=args.log_level or FieldCipherConfig.get_log_level(),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = FieldCipherConfig.cipher_config()
        if config.mode is CipherMode.ENCRYPT and not config.use_base64:
            raise ConfigurationError("JSON-lines output requires base64 when encrypting")
        transformer = FieldTransformer(
            config,
            on_matched=tag_record(args.tag) if args.tag else None,
        )
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    with ExitStack() as stack:
        try:
            source = stack.enter_context(open(args.input, encoding="utf-8")) if args.input else sys.stdin
            sink = stack.enter_context(open(args.output, "w", encoding="utf-8")) if args.output else sys.stdout
        except OSError as e:
            print(f"Cannot open file: {e}", file=sys.stderr)
            return 1
        written, failed = process_lines(transformer, source, sink)

    logger.info("Processed %d records, %d failed", written, failed)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
