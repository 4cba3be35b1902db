#! /usr/bin/env python3

import argparse
import sys

from pledger.check import setup_logging
from pledger.parser import ParseError
from pledger.printing import element2str
from pledger.util import FileError, read_journal

def parse_args(argv: list[str] | None = None):
    argparser = argparse.ArgumentParser(
        description="Show every element parsed from a journal file.")
    argparser.add_argument("database", type=str,
                           help="journal file")
    argparser.add_argument("--log-file", type=str,
                           default="",
                           help="log file")
    return argparser.parse_args(argv)

def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_file, verbose=True)

    try:
        elements = read_journal(args.database)
    except FileError as e:
        print(e, file=sys.stderr)
        return 2
    except ParseError as e:
        print(e, file=sys.stderr)
        return 1

    for element in elements:
        text = element2str(element).replace("\n", "\n  ")
        print(f"> {text}")
    return 0

if __name__ == "__main__":
    sys.exit(main())
