#!/usr/bin/env python3
"""
acslasmc -- ACSL Assembly to C compiler
========================================
Command-line front end for the acslasm translator.

Reads an ACSL assembly source file, translates it line by line and writes
a self-contained C program that can be built with any C compiler.

Usage:
  python cli.py SOURCE [OUTPUT] [--listing] [--quiet]

OUTPUT defaults to SOURCE + "_output.c".  The suffix can be changed with
the ACSLASMC_OUTPUT_SUFFIX environment variable.

Exit status:
  0  success
  1  translation error (reported as "line N: error: ...")
  2  no source file given
  3  source or output file could not be opened
"""

from __future__ import annotations
import argparse
import os
import sys
from typing import Optional

from acslasm import (
    PROG_NAME_LINE, TranslateError, Translation,
    split_lines, translate, emit_program,
)

EXIT_OK = 0
EXIT_TRANSLATE = 1
EXIT_USAGE = 2
EXIT_IO = 3

DEFAULT_OUTPUT_SUFFIX = "_output.c"


def default_output_path(src_path: str) -> str:
    suffix = os.environ.get("ACSLASMC_OUTPUT_SUFFIX", DEFAULT_OUTPUT_SUFFIX)
    return f"{src_path}{suffix}"


def print_listing(lines: list[str], result: Translation):
    """Print each source line beside the C it produced."""
    for lineno, (src, stmt) in enumerate(zip(lines, result.statements), 1):
        c_lines = stmt.split("\n") if stmt else [""]
        print(f"  {lineno:4d}  {src.strip():<24s}  {c_lines[0].strip()}")
        for extra in c_lines[1:]:
            print(f"  {'':4s}  {'':24s}  {extra.strip()}")
    print(f"  ({result.mem_size} memory slot(s))")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="acslasmc",
        description=PROG_NAME_LINE,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Examples:\n"
               "  python cli.py prog.acsl\n"
               "  python cli.py prog.acsl prog.c\n"
               "  python cli.py prog.acsl --listing\n"
    )
    parser.add_argument("source", nargs="?", default=None,
                        help="ACSL assembly source file")
    parser.add_argument("output", nargs="?", default=None,
                        help="Generated C file (default: SOURCE"
                             f"{DEFAULT_OUTPUT_SUFFIX})")
    parser.add_argument("--listing", "-l", action="store_true",
                        help="Print a source/C listing after translation")
    parser.add_argument("--quiet", "-q", action="store_true",
                        help="Only print the banner and errors")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    def say(msg: str):
        if not args.quiet:
            print(msg)

    print(PROG_NAME_LINE)

    if args.source is None:
        print("Please pass a source file with ACSL assembly code and a "
              "target file for generated C code as arguments.")
        return EXIT_USAGE

    src_path = args.source
    out_path = args.output or default_output_path(src_path)

    try:
        with open(src_path, "r", encoding="utf-8", newline="") as f:
            source = f.read()
    except (OSError, UnicodeDecodeError):
        print(f"Failed to open source file '{src_path}'.")
        return EXIT_IO
    say(f"Source file: '{src_path}'.")

    lines = split_lines(source)
    try:
        result = translate(lines)
    except TranslateError as e:
        print(e)
        print("Compilation failed.")
        return EXIT_TRANSLATE

    try:
        with open(out_path, "w") as f:
            f.write(emit_program(result, src_path))
    except OSError:
        print(f"Failed to open output file '{out_path}'.")
        return EXIT_IO
    say(f"Output file: '{out_path}'.")

    if args.listing:
        print_listing(lines, result)

    say("You may pass the generated C source to a C compiler to run it: e.g.")
    say(f"gcc {out_path} -o {out_path}.out && ./{out_path}.out")
    say("Compilation complete.")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
