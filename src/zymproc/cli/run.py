"""Run a command to completion and relay its output."""

import argparse
import logging
import sys

from zymproc import __version__
from zymproc.api import execute
from zymproc.config import load_config
from zymproc.errors import ProcessError
from zymproc.models import SpawnFailure, StdioMode

# Shells use 127 for "command not found".
SPAWN_FAILURE_EXIT_CODE = 127

MODES = [mode.value for mode in StdioMode]


def build_parser() -> argparse.ArgumentParser:
    """Build parser for run mode."""
    parser = argparse.ArgumentParser(
        prog="zymproc",
        description="Run a command, capture its output and exit with its status",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--cwd", help="Working directory for the command")
    for stream in ("stdin", "stdout", "stderr"):
        parser.add_argument(
            f"--{stream}",
            choices=MODES,
            default=None,
            help=f"How the command's {stream} is connected (default: pipe)",
        )
    parser.add_argument("command", help="Program to run")
    parser.add_argument("args", nargs=argparse.REMAINDER, help="Arguments for the program")
    return parser


def _relay(stream, data: bytes) -> None:
    if not data:
        return
    stream.flush()
    stream.buffer.write(data)
    stream.buffer.flush()


def run(argv: list[str]) -> int:
    """Execute run mode."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(name)s %(levelname)s: %(message)s",
    )

    options = {
        "cwd": args.cwd,
        "stdin": args.stdin,
        "stdout": args.stdout,
        "stderr": args.stderr,
    }
    try:
        result = execute(args.command, args.args, options, settings=load_config())
    except ProcessError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if isinstance(result, SpawnFailure):
        print(f"Error: {result.error}", file=sys.stderr)
        return SPAWN_FAILURE_EXIT_CODE

    _relay(sys.stdout, result.stdout)
    _relay(sys.stderr, result.stderr)
    return result.exit_code
