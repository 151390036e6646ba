"""Signal name parsing and wait-status to exit-code mapping."""

import os
import signal

from zymproc.errors import ProcessConfigError

DEFAULT_SIGNAL = signal.SIGTERM

# Repeating one of these after delivery is a no-op in ProcessHandle.kill.
TERMINATING_SIGNALS = frozenset(
    int(getattr(signal, name)) for name in ("SIGTERM", "SIGKILL") if hasattr(signal, name)
)

# Shells report a child killed by signal N as exit status 128 + N.
SIGNAL_EXIT_BASE = 128
UNKNOWN_EXIT_CODE = -1


def parse_signal(value: "int | str | signal.Signals | None") -> int:
    """Return the signal number for a number, Signals member or name like "SIGTERM"/"term"."""
    if value is None:
        return int(DEFAULT_SIGNAL)
    if isinstance(value, bool):
        raise ProcessConfigError("kill() signal must be a number or a signal name")
    if isinstance(value, int):
        return int(value)
    if isinstance(value, str):
        name = value.strip().upper()
        if not name.startswith("SIG"):
            name = f"SIG{name}"
        try:
            return int(signal.Signals[name])
        except KeyError:
            raise ProcessConfigError(f"Unknown signal: {value}") from None
    raise ProcessConfigError("kill() signal must be a number or a signal name")


def exit_code_from_status(status: int) -> int:
    """Map a POSIX wait status to an exit code: status, 128 + signal, or -1."""
    if os.WIFEXITED(status):
        return os.WEXITSTATUS(status)
    if os.WIFSIGNALED(status):
        return SIGNAL_EXIT_BASE + os.WTERMSIG(status)
    return UNKNOWN_EXIT_CODE
