import argparse
import io
import logging
import sys
from typing import List, Optional

from lox.parser.visitor import ASTPrinter
from lox.runner import (
    Lox, RunResult, STACK_OVERFLOW,
    EXIT_OK, EXIT_USAGE, EXIT_STATIC_ERROR, EXIT_NO_INPUT, EXIT_RUNTIME_ERROR,
)
from lox.utils import Config

logger = logging.getLogger("lox")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lox", description="Run a Lox script, or start a REPL when no source is given.")
    parser.add_argument('-c', '--config', type=str, help='Path to the configuration file')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log pipeline stages to stderr')

    input_type = parser.add_mutually_exclusive_group()
    input_type.add_argument('-f', '--file', type=str, help='Path to the input source code file')
    input_type.add_argument('-s', '--string', type=str, help='Source code string passed directly')

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument('-l', '--lex', action='store_true', help='Only lex the source and display tokens')
    mode.add_argument('-p', '--parse', action='store_true', help='Only parse the source and display AST tree')
    mode.add_argument('-t', '--check', action='store_true', help='Only run static checks (parse and resolve)')
    return parser


def lex_only(lox: Lox, source: str) -> int:
    lexer = lox.lexer_for(io.StringIO(source))
    for token in lexer:
        print(token)
    for error in lexer.errors:
        print(str(error), file=sys.stderr)
    return EXIT_STATIC_ERROR if lexer.errors else EXIT_OK


def parse_only(lox: Lox, source: str) -> int:
    result = RunResult()
    statements = lox.on_deep_stack(lox.parse, source, result)
    if result.had_error:
        for error in result.static_errors:
            print(str(error), file=sys.stderr)
        return EXIT_STATIC_ERROR

    printer = ASTPrinter(indent_char="| ")
    printer.print_program(statements)
    return EXIT_OK


def run_source(lox: Lox, source: str, args: argparse.Namespace) -> int:
    if args.lex:
        return lex_only(lox, source)
    if args.parse:
        return parse_only(lox, source)
    if args.check:
        return lox.check(source).exit_code
    return lox.run(source).exit_code


def run_prompt(lox: Lox) -> int:
    """Reads and runs one line at a time. Errors are reported and the session goes on."""
    while True:
        print(lox.config.prompt, end="", flush=True)
        line = sys.stdin.readline()
        if not line:
            print()
            return EXIT_OK
        lox.run(line)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(name)s: %(message)s")

    if args.config:
        logger.debug("Using config file: %s", args.config)
        try:
            config = Config.from_json_file(args.config)
        except (OSError, ValueError, TypeError) as e:
            print(f"Failed to load config: {e}", file=sys.stderr)
            return EXIT_USAGE
    else:
        config = Config()

    lox = Lox(config)

    if args.file:
        logger.debug("Using source file: %s", args.file)
        try:
            with open(args.file, "r", encoding="utf-8") as code_file:
                source = code_file.read()
        except OSError as e:
            print(f"Error reading file: {e}", file=sys.stderr)
            return EXIT_NO_INPUT
    elif args.string is not None:
        source = args.string
    else:
        return run_prompt(lox)

    try:
        return run_source(lox, source, args)
    except RecursionError:
        print(STACK_OVERFLOW, file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
