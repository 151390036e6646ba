"""Exception types raised by zymproc.

Launch failures are not exceptions: ``spawn`` and ``execute`` return a
``SpawnFailure`` value for those so callers can branch on a missing command
without a try block.
"""


class ProcessError(Exception):
    """Base class for faults reported by the process subsystem."""


class ProcessConfigError(ProcessError, ValueError):
    """Invalid argument types or values passed by the caller."""


class ProcessOperationError(ProcessError, OSError):
    """An operation on a live process failed (closed stream, bad buffer, OS error)."""
