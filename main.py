#!/usr/bin/env python3
"""
fieldcipher entry point.

Runs the JSON-lines field cipher over stdin/stdout or the files given on
the command line. See ``python main.py --help``.
"""

from fieldcipher.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
