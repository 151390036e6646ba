"""Script-facing entry points.

These take loosely typed arguments the way an embedding runtime hands them
over (a command string, an argument list, an options mapping), validate them,
and delegate to the launcher and executor.
"""

from collections.abc import Mapping, Sequence

from pydantic import ValidationError

from zymproc import executor, launcher
from zymproc.config import default_settings
from zymproc.errors import ProcessConfigError
from zymproc.handle import ProcessHandle
from zymproc.models import ExecResult, Settings, SpawnConfig, SpawnFailure

OPTION_KEYS = ("cwd", "env", "stdin", "stdout", "stderr")


def _validation_message(error: ValidationError) -> str:
    details = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "value"
        details.append(f"{location}: {item['msg']}")
    return "; ".join(details)


def build_config(
    command: str,
    args: Sequence[str] | None = None,
    options: Mapping[str, object] | None = None,
) -> SpawnConfig:
    """Validate spawn arguments and return a SpawnConfig.

    Raises ProcessConfigError for a non-string command, non-string
    arguments, unknown option keys or invalid option values.
    """
    if not isinstance(command, str):
        raise ProcessConfigError(f"command must be a string, got {type(command).__name__}")
    if args is None:
        args = ()
    elif isinstance(args, (str, bytes)) or not isinstance(args, Sequence):
        raise ProcessConfigError("args must be a list of strings")
    for arg in args:
        if not isinstance(arg, str):
            raise ProcessConfigError(f"args must be strings, got {type(arg).__name__}")

    if options is None:
        options = {}
    elif not isinstance(options, Mapping):
        raise ProcessConfigError("options must be a mapping")
    unknown = sorted(str(key) for key in options if key not in OPTION_KEYS)
    if unknown:
        raise ProcessConfigError(f"Unknown spawn option(s): {', '.join(unknown)}")

    fields = {key: value for key, value in options.items() if value is not None}
    try:
        return SpawnConfig(command=command, args=tuple(args), **fields)
    except ValidationError as e:
        raise ProcessConfigError(f"Invalid spawn configuration: {_validation_message(e)}") from None


def spawn(
    command: str,
    args: Sequence[str] | None = None,
    options: Mapping[str, object] | None = None,
    *,
    settings: Settings | None = None,
) -> ProcessHandle | SpawnFailure:
    """Start command and return a handle, or a SpawnFailure if it could not start."""
    config = build_config(command, args, options)
    return launcher.spawn(config, settings or default_settings())


def execute(
    command: str,
    args: Sequence[str] | None = None,
    options: Mapping[str, object] | None = None,
    *,
    settings: Settings | None = None,
) -> ExecResult | SpawnFailure:
    """Run command to completion and return its captured output and exit code."""
    config = build_config(command, args, options)
    return executor.execute(config, settings or default_settings())
