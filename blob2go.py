#!/usr/bin/env python3

from dataclasses import dataclass
from typing import Optional
import argparse
import sys


WIDTH = 78
INDENT = "\t"
TAB_WIDTH = 8
TOKEN_WIDTH = len("0x00, ")

USAGE = "%(prog)s [-in=<path>] [-out=<path>] [-pkg=<name>] [-width=<n>] [-trailing-comma] <varname>"


class Blob2GoError(Exception):
    exit_code = 1


class UsageError(Blob2GoError):
    exit_code = 1


class InputError(Blob2GoError):
    exit_code = 2


class OutputError(Blob2GoError):
    exit_code = 3


@dataclass(frozen=True)
class Config:
    varname: str
    input_path: Optional[str] = None
    output_path: Optional[str] = None
    package: Optional[str] = None
    width: int = WIDTH
    indent: str = INDENT
    trailing_comma: bool = False


def format_blob(data, varname, width=WIDTH, indent=INDENT, trailing_comma=False):
    """
    Render `data` as a Go byte slice literal bound to `varname`.

    Lines are wrapped once the running column reaches `width`; the check
    happens after a token is written, so a line may overshoot by one token.
    """
    start = len(indent.expandtabs(TAB_WIDTH))
    parts = [f"var {varname} = []byte{{\n", indent]

    last = len(data) - 1
    column = start
    for i, byte in enumerate(data):
        if i == last:
            parts.append(f"0x{byte:02x}," if trailing_comma else f"0x{byte:02x}")
            break

        parts.append(f"0x{byte:02x},")
        column += TOKEN_WIDTH
        if column >= width:
            parts.append("\n" + indent)
            column = start
        else:
            parts.append(" ")

    parts.append("\n}\n")
    return "".join(parts)


def package_clause(name):
    return f"package {name}\n\n" if name else ""


def render(data, config):
    return package_clause(config.package) + format_blob(
        data,
        config.varname,
        width=config.width,
        indent=config.indent,
        trailing_comma=config.trailing_comma)


class ArgumentParser(argparse.ArgumentParser):
    "argparse exits with status 2 on bad usage; report it as a UsageError instead"

    def error(self, message):
        raise UsageError(message)

    def parse_args(self, args=None, namespace=None):
        # Flags must be spelled in full; older argparse releases match
        # single-dash prefixes even with allow_abbrev off.
        args = sys.argv[1:] if args is None else list(args)
        for arg in args:
            if arg == "--":
                break
            flag = arg.split("=", 1)[0]
            if flag.startswith("-") and flag != "-" and flag not in self._option_string_actions:
                self.error(f"flag provided but not defined: {flag}")
        return super().parse_args(args, namespace)


def positive_int(value):
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than zero: {value!r}")
    return number


def build_parser():
    parser = ArgumentParser(
        usage=USAGE,
        allow_abbrev=False,
        description="Emit a binary blob as a Go []byte literal.")
    parser.add_argument("-in", dest="input_path", metavar="<path>",
                        help="use this file instead of the stdin for input")
    parser.add_argument("-out", dest="output_path", metavar="<path>",
                        help="use this file instead of the stdout for output")
    parser.add_argument("-pkg", dest="package", metavar="<name>",
                        help="prepend package clause specifying this package")
    parser.add_argument("-width", type=positive_int, default=WIDTH, metavar="<n>",
                        help=f"break lines once they reach this many columns (default {WIDTH})")
    parser.add_argument("-trailing-comma", dest="trailing_comma", action="store_true",
                        help="keep the comma after the last byte, as gofmt expects")
    parser.add_argument("varname", help="name of the generated variable")
    return parser


def parse_args(argv=None, parser=None):
    if parser is None:
        parser = build_parser()
    args = parser.parse_args(argv)
    return Config(
        varname=args.varname,
        input_path=args.input_path,
        output_path=args.output_path,
        package=args.package,
        width=args.width,
        trailing_comma=args.trailing_comma)


def read_input(config):
    try:
        if config.input_path:
            with open(config.input_path, "rb") as source:
                return source.read()
        return sys.stdin.buffer.read()
    except OSError as err:
        raise InputError(f"Failed to read input: {err}") from err


def write_output(text, config):
    # Partial output is left behind if a write fails halfway.
    try:
        # Undecodable argv bytes come back out as the raw bytes they were.
        payload = text.encode("utf-8", "surrogateescape")
        if config.output_path:
            with open(config.output_path, "wb") as sink:
                sink.write(payload)
        else:
            sys.stdout.flush()
            sys.stdout.buffer.write(payload)
            sys.stdout.buffer.flush()
    except (OSError, UnicodeError) as err:
        raise OutputError(f"Failed to write output: {err}") from err


def main(argv=None):
    parser = build_parser()
    try:
        config = parse_args(argv, parser)
        # Input is read in full before the output is opened, so a bad
        # source never truncates the destination.
        data = read_input(config)
        write_output(render(data, config), config)
    except UsageError as err:
        parser.print_help(sys.stderr)
        print(f"{parser.prog}: error: {err}", file=sys.stderr)
        return err.exit_code
    except Blob2GoError as err:
        print(err, file=sys.stderr)
        return err.exit_code
    return 0


if __name__ == "__main__":
    sys.exit(main())
