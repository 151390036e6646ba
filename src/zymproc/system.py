"""Process-global accessors: working directory, environment, ids, exit.

The environment and working directory are shared by the whole process.
Changing them from more than one thread at a time is undefined.
"""

import os

from zymproc.errors import ProcessConfigError, ProcessOperationError


def _require_str(name: str, value: object) -> str:
    if not isinstance(value, str):
        raise ProcessConfigError(f"{name} must be a string, got {type(value).__name__}")
    return value


def get_cwd() -> str:
    try:
        return os.getcwd()
    except OSError as e:
        raise ProcessOperationError(f"Failed to get working directory: {e}") from e


def set_cwd(path: str | os.PathLike) -> None:
    if isinstance(path, os.PathLike):
        path = os.fspath(path)
    _require_str("path", path)
    try:
        os.chdir(path)
    except OSError as e:
        raise ProcessOperationError(f"Failed to change directory to {path}: {e}") from e


def get_env(name: str) -> str | None:
    """Return the value of an environment variable, or None when unset."""
    return os.environ.get(_require_str("name", name))


def set_env(name: str, value: str) -> None:
    _require_str("name", name)
    _require_str("value", value)
    if not name or "=" in name or "\0" in name or "\0" in value:
        raise ProcessOperationError(f"Failed to set environment variable {name!r}: invalid name or value")
    try:
        os.environ[name] = value
    except (OSError, ValueError) as e:
        raise ProcessOperationError(f"Failed to set environment variable {name!r}: {e}") from e


def get_env_all() -> dict[str, str]:
    return dict(os.environ)


def get_pid() -> int:
    return os.getpid()


def get_parent_pid() -> int:
    return os.getppid()


def exit(code: int = 0) -> None:
    """Exit the interpreter with code by raising SystemExit."""
    if isinstance(code, bool) or not isinstance(code, int):
        raise ProcessConfigError(f"exit code must be an integer, got {type(code).__name__}")
    raise SystemExit(code)
