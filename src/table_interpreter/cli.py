import argparse
import logging
import sys

from table_interpreter import config
from table_interpreter.errors import ReadError
from table_interpreter.printer import render_table
from table_interpreter.reader import read_table_file
from table_interpreter.writer import save_table_workbook


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="table-interpreter",
        description="Evaluate a plain text table of numbers and formulas",
    )
    parser.add_argument("input", help="Path to the table to evaluate")
    parser.add_argument(
        "output",
        nargs="?",
        help="Where to write the result (stdout if omitted, .xlsx for a workbook)",
    )
    parser.add_argument(
        "--precision",
        type=int,
        default=None,
        help="Significant digits of printed numbers (shortest exact form by default)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=config.max_evaluation_depth,
        help=(
            "Nested evaluations followed recursively before a long chain of "
            "references is resumed from its far end (about three Python frames "
            "each, so keep it well below the interpreter's recursion limit)"
        ),
    )
    parser.add_argument("--verbose", action="store_true", help="Log evaluation details")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )
    try:
        config.set_number_precision(args.precision)
        config.set_max_evaluation_depth(args.max_depth)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        table = read_table_file(args.input)
    except FileNotFoundError:
        print(f"Error: File '{args.input}' not found", file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError, ReadError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    table.evaluate()

    if args.output is None:
        sys.stdout.write(render_table(table))
    elif args.output.lower().endswith(".xlsx"):
        save_table_workbook(table, args.output)
    else:
        with open(args.output, "w", encoding="utf-8") as file:
            file.write(render_table(table))
    return 0
