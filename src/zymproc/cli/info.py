"""Print information about the current process."""

import argparse

from zymproc import system


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zymproc info",
        description="Show the pid, parent pid and working directory of this process",
    )
    parser.add_argument("--env", action="store_true", help="Also print the environment")
    return parser


def run(argv: list[str]) -> int:
    """Execute info mode."""
    args = build_parser().parse_args(argv)

    print(f"pid: {system.get_pid()}")
    print(f"ppid: {system.get_parent_pid()}")
    print(f"cwd: {system.get_cwd()}")
    if args.env:
        print("env:")
        for key, value in sorted(system.get_env_all().items()):
            print(f"  {key}={value}")
    return 0
