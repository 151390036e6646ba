"""Platform launcher interface.

Exactly one launcher implementation is active per platform. The rest of the
package only sees a ``ChildProcess`` and the channel endpoints.
"""

from abc import ABC, abstractmethod

from zymproc.channels import ChannelSet
from zymproc.models import Settings, SpawnConfig


class LaunchError(Exception):
    """Process creation failed; reported to callers as a SpawnFailure."""


class ChildProcess(ABC):
    """A created OS process plus its cached exit code."""

    supports_signals = True

    def __init__(self, pid: int) -> None:
        self.pid = pid
        self.returncode: int | None = None

    @abstractmethod
    def poll(self) -> int | None:
        """Reap without blocking; return the exit code or None while running."""

    @abstractmethod
    def wait(self) -> int:
        """Block until the process exits and return its exit code."""

    @abstractmethod
    def send_signal(self, signum: int) -> None: ...

    @abstractmethod
    def terminate(self) -> None: ...

    @abstractmethod
    def kill(self) -> None: ...

    def release(self) -> None:
        """Free platform handles once the process has been reaped."""


class Launcher(ABC):
    """Creates OS processes bound to resolved stdio channels."""

    #: Whether the channel resolver should open the pty pair itself.
    allocates_pty = True

    @abstractmethod
    def launch(self, config: SpawnConfig, channels: ChannelSet, settings: Settings) -> ChildProcess:
        """Create the process; raise LaunchError or OSError on failure.

        A launcher that builds its own pseudo-console stores the parent
        endpoint for it in ``channels.parent``.
        """
