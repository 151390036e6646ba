"""Top-level CLI router."""

import sys

from . import info as info_cmd
from . import run as run_cmd


def main(argv: list[str] | None = None) -> int:
    """Route to the info command or run mode (the default)."""
    args = list(sys.argv[1:] if argv is None else argv)
    if args and args[0] == "info":
        return info_cmd.run(args[1:])
    if args and args[0] == "run":
        args = args[1:]
    return run_cmd.run(args)


def entrypoint() -> None:
    """Console script entrypoint."""
    raise SystemExit(main())
