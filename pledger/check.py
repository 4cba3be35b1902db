#! /usr/bin/env python3

import argparse
import logging
import sys

from pledger.journal import CheckError, check_journal
from pledger.printing import check_error2str
from pledger.util import FileError, read_content

logger = logging.getLogger(__name__)

def parse_args(argv: list[str] | None = None):
    argparser = argparse.ArgumentParser(
        description="Check that a journal file is valid and balanced.")
    argparser.add_argument("database", type=str,
                           help="journal file")
    argparser.add_argument("--base-currency", type=str,
                           default="EUR",
                           help="currency postings are compared in")
    argparser.add_argument("--log-file", type=str,
                           default="",
                           help="log file")
    argparser.add_argument("--verbose", action="store_true",
                           default=False,
                           help="Log every parsed element")
    return argparser.parse_args(argv)

def setup_logging(log_file: str, verbose: bool = False):
    if log_file:
        logging.basicConfig(filename=log_file,
                            filemode="w",
                            format='[%(name)s:%(levelname)s] %(message)s',
                            datefmt='%m/%d/%Y %I:%M:%S %p',
                            level=logging.DEBUG if verbose else logging.INFO)

def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)

    try:
        content = read_content(args.database)
    except FileError as e:
        print(e, file=sys.stderr)
        return 2

    try:
        check_journal(content, args.base_currency)
    except CheckError as e:
        logger.info(f"Check of {args.database} failed: {e}")
        print(check_error2str(e), file=sys.stderr)
        return 1

    print("The given journal is a valid file")
    return 0

if __name__ == "__main__":
    sys.exit(main())
