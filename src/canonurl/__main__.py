"""Normalize URIs from the command line.

    python -m canonurl "https://foo.com/bar?nums[]=1"
    some-command | python -m canonurl --reference
"""

import argparse
import logging
import sys

from typing import Iterable, TextIO

from .canonical import normalize
from .errors import ParseError

logger = logging.getLogger("canonurl")


def _inputs(args: list[str], stdin: TextIO) -> Iterable[str]:
    if len(args) > 0:
        return args
    return (line.rstrip("\r\n") for line in stdin)


def run(argv: list[str] | None = None, stdin: TextIO | None = None, stdout: TextIO | None = None) -> int:
    parser = argparse.ArgumentParser(prog="canonurl", description="Print the canonical form of each URI.")
    parser.add_argument("uris", nargs="*", metavar="URI", help="URIs to normalize (default: one per line on stdin)")
    parser.add_argument(
        "-r",
        "--reference",
        action="store_true",
        help="accept relative references, as used for link and image destinations",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug output to stderr")
    args = parser.parse_args(argv)
    stdin = sys.stdin if stdin is None else stdin
    stdout = sys.stdout if stdout is None else stdout

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(name)s: %(message)s")

    status: int = 0
    for uri in _inputs(args.uris, stdin):
        try:
            stdout.write(f"{normalize(uri, lenient=args.reference)}\n")
        except ParseError as e:
            logger.error("%r: %s", uri, e)
            status = 1
    return status


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
