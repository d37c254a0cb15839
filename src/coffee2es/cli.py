"""Command line entry point."""

from __future__ import annotations

import logging
import sys

from .compiler import compile
from .errors import IllegalSourceError, TranslationError
from .frontend import ParseError, TokenizeError, parse
from .frontend.ast import Literal, Op, SwitchCase, children, node_type
from .options import QUOTES, Options

PHASES: list[str] = ["parse"]

USAGE: str = """\
coffee2es [OPTIONS] [INPUT] [-o OUTPUT]

Options:
  --tab-width N       Spaces per indentation level (default 2)
  --quote STYLE       Quote style for strings: double, single (default double)
  --stop-at PHASE     Stop after phase: parse
  -o, --output FILE   Write output to FILE instead of stdout
  -v, --verbose       Log compiler phases to stderr
  -h, --help          Show this help message
"""


class Args:
    """Parsed command-line arguments."""

    def __init__(self) -> None:
        self.tab_width: int = 2
        self.quote: str = "double"
        self.stop_at: str | None = None
        self.verbose: bool = False
        self.input_file: str | None = None
        self.output_file: str | None = None


def usage_error(msg: str) -> None:
    print("error: " + msg, file=sys.stderr)
    sys.exit(2)


def parse_args(argv: list[str]) -> Args:
    args = Args()
    seen_input = False
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            sys.exit(0)
        elif arg in ("--tab-width", "--quote", "--stop-at", "-o", "--output"):
            if i + 1 >= len(argv):
                usage_error(arg + " requires an argument")
            value = argv[i + 1]
            if arg == "--tab-width":
                if not value.isdigit() or int(value) < 1:
                    usage_error("--tab-width must be a positive integer")
                args.tab_width = int(value)
            elif arg == "--quote":
                if value not in QUOTES:
                    usage_error("unknown quote style '" + value + "'")
                args.quote = value
            elif arg == "--stop-at":
                if value not in PHASES:
                    usage_error("unknown phase '" + value + "'")
                args.stop_at = value
            else:
                args.output_file = value
            i += 2
        elif arg == "-v" or arg == "--verbose":
            args.verbose = True
            i += 1
        elif arg.startswith("-") and arg != "-":
            usage_error("unknown flag '" + arg + "'")
        else:
            if seen_input:
                usage_error("unexpected argument '" + arg + "'")
            seen_input = True
            args.input_file = None if arg == "-" else arg
            i += 1
    return args


def read_source(input_file: str | None) -> tuple[str, int]:
    """Read source from file or stdin. Returns (source, exit_code) where exit_code 0 means OK."""
    if input_file is not None:
        try:
            with open(input_file, "rb") as f:
                raw = f.read()
        except OSError:
            print("error: cannot open '" + input_file + "'", file=sys.stderr)
            return ("", 1)
    else:
        raw = sys.stdin.buffer.read()
    try:
        return (raw.decode("utf-8"), 0)
    except ValueError:
        print("error: invalid utf-8 in input", file=sys.stderr)
        return ("", 1)


def write_output(output: str, output_file: str | None) -> int:
    """Write output to file or stdout. Returns 0 on success, 1 on error."""
    if output_file is not None:
        try:
            with open(output_file, "w") as f:
                f.write(output + "\n")
        except OSError:
            print("error: cannot write '" + output_file + "'", file=sys.stderr)
            return 1
        return 0
    print(output)
    return 0


def outline(node: object, depth: int = 0) -> list[str]:
    """Node-type outline of a parsed tree, one node per line."""
    label = "SwitchCase" if isinstance(node, SwitchCase) else node_type(node)
    if isinstance(node, Literal):
        label += " " + node.value
    elif isinstance(node, Op):
        label += " " + node.operator
    lines = ["  " * depth + label]
    for child in children(node):
        lines.extend(outline(child, depth + 1))
    return lines


def run(source: str, args: Args) -> tuple[int, str]:
    """Compile or outline source. Returns (exit_code, output)."""
    try:
        if args.stop_at == "parse":
            return (0, "\n".join(outline(parse(source))))
        return (0, compile(source, Options(tab_width=args.tab_width, quote=args.quote)))
    except (TokenizeError, ParseError, IllegalSourceError) as e:
        print("error: " + str(e.line) + ":" + str(e.col) + ": " + e.msg, file=sys.stderr)
    except TranslationError as e:
        print("error: " + e.msg, file=sys.stderr)
    return (1, "")


def main() -> int:
    """Main entry point."""
    args = parse_args(sys.argv[1:])
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    source, err = read_source(args.input_file)
    if err != 0:
        return err
    exit_code, output = run(source, args)
    if exit_code != 0:
        return exit_code
    return write_output(output, args.output_file)


if __name__ == "__main__":
    sys.exit(main())
