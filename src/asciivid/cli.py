import argparse
import sys

from loguru import logger

from asciivid.config import DEFAULT_MAX_HEIGHT, DEFAULT_MAX_WIDTH, DEFAULT_OUTPUT_FILE, RenderSettings
from asciivid.errors import AsciiVidError, UsageError
from asciivid.session import run


class _Parser(argparse.ArgumentParser):
    def error(self, message):
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    # -h is taken by --height, so help only has a long form
    parser = _Parser(
        prog="asciivid", description="Render an image or video as coloured ASCII art", add_help=False
    )
    parser.add_argument("-i", dest="input", metavar="<file>", required=True, help="Input file (image or video)")
    parser.add_argument(
        "-w", dest="width", type=int, default=DEFAULT_MAX_WIDTH, help=f"Maximum width (default {DEFAULT_MAX_WIDTH})"
    )
    parser.add_argument(
        "-h",
        dest="height",
        type=int,
        default=DEFAULT_MAX_HEIGHT,
        help=f"Maximum height (default {DEFAULT_MAX_HEIGHT})",
    )
    parser.add_argument(
        "--output", action="store_true", help=f"Write monochrome ASCII art to {DEFAULT_OUTPUT_FILE} instead"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log diagnostics to stderr")
    parser.add_argument("--help", action="help", help="Show this message and exit")
    return parser


def configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


def main(argv=None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except UsageError as exc:
        parser.print_usage(sys.stderr)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    for name in ("width", "height"):
        if getattr(args, name) <= 0:
            print(f"Error: {name} must be a positive number", file=sys.stderr)
            return 1

    settings = RenderSettings.from_args(args)
    configure_logging(settings.verbose)
    try:
        run(settings)
    except AsciiVidError as exc:
        logger.debug("Aborted: {!r}", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
