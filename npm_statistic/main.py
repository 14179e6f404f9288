import argparse
import logging
import sys
from typing import List, Optional

from npm_statistic import __version__
from npm_statistic.commands import CommandKind, dispatch
from npm_statistic.core.dependencies import Dependencies
from npm_statistic.domain.errors import NpmStatisticError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def build_parser() -> argparse.ArgumentParser:
    commands = ", ".join(kind.value for kind in CommandKind)
    parser = argparse.ArgumentParser(
        prog="npm-statistic",
        description="Update monthly npm package statistics, get/set config params.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("command", nargs="?", help=f"One of: {commands} (default: update).")
    parser.add_argument("args", nargs=argparse.REMAINDER, help="Command arguments.")
    return parser


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def run(argv: Optional[List[str]] = None, deps: Optional[Dependencies] = None) -> int:
    """
    Execute one invocation and return the process exit code.
    Every failure is reported as a log line on stderr, never raised.
    """
    options = build_parser().parse_args(argv)
    configure_logging(options.verbose)

    command_line = ([options.command] if options.command else []) + options.args
    try:
        dispatch(command_line, deps)
    except NpmStatisticError as e:
        logger.error(str(e))
        return 1
    except Exception as e:
        # Unexpected error.
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return 1
    return 0


def main() -> None:
    try:
        sys.exit(run(sys.argv[1:]))
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    main()
