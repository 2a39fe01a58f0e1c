#!/usr/bin/env python3
"""
DCPU-16 Assembler - Command Line Interface

Usage:
    python3 -m dcpu16_asm program.s                 # writes program.s.o
    python3 -m dcpu16_asm program.s -o program.bin
    python3 -m dcpu16_asm < program.s               # writes out.s.o
    python3 -m dcpu16_asm program.s -q -v
"""

import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .assembler import Assembler
from .errors import AssemblerError

STDIN_NAME = "-"
DEFAULT_BASE_NAME = "out.s"
OUTPUT_SUFFIX = ".o"


def default_output_path(input_name: str) -> str:
    """Binary file name: the input name (or out.s for stdin) plus '.o'."""
    base = DEFAULT_BASE_NAME if input_name in (None, STDIN_NAME) else input_name
    return f"{base}{OUTPUT_SUFFIX}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dcpu16-asm",
        description="DCPU-16 Assembler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s programs/loop.s                 # listing to stdout, binary to programs/loop.s.o
  %(prog)s programs/loop.s -o loop.bin -q
  cat programs/loop.s | %(prog)s
        """,
    )

    parser.add_argument(
        "input",
        nargs="?",
        default=STDIN_NAME,
        help="Input assembly file. Reads standard input if omitted or '-'.",
    )

    parser.add_argument(
        "-o",
        "--output",
        type=str,
        help="Output binary file. Defaults to the input name plus '.o' (out.s.o for stdin).",
    )

    parser.add_argument(
        "--no-output",
        action="store_true",
        help="Do not write the binary file",
    )

    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Do not print the assembly listing",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(message)s",
        stream=sys.stderr,
    )

    # Validate input file
    if args.input != STDIN_NAME and not Path(args.input).exists():
        print(f"Error: Input file not found: {args.input}", file=sys.stderr)
        sys.exit(1)

    output_path = None
    if not args.no_output:
        output_path = args.output or default_output_path(args.input)

    try:
        asm = Assembler(verbose=args.verbose)
        if args.input == STDIN_NAME:
            asm.assemble_stream(sys.stdin)
            if output_path:
                asm.write_binary(output_path)
        else:
            asm.assemble_file(args.input, output_path)

        if not args.quiet:
            print(asm.get_listing())

        if args.verbose:
            print(
                f"\nAssembly successful: {len(asm.program)} instructions, "
                f"{asm.program.size} words",
                file=sys.stderr,
            )

    except AssemblerError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
