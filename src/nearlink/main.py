#!/usr/bin/env python3
"""NEARLINK - key store and transaction bridge for ledger nodes.

Entry point for the ``nearlink`` command.
"""

import sys

from nearlink.cli import create_parser, run_cli


def parse_args(argv: list[str] | None = None):
    """Parse command line arguments."""
    return create_parser().parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Main entry point for NEARLINK."""
    args = parse_args(argv)

    exit_code = run_cli(args)
    if exit_code >= 0:
        sys.exit(exit_code)
    # exit_code < 0 means no command was given
    create_parser().print_help()
    sys.exit(0)


if __name__ == "__main__":
    main()
