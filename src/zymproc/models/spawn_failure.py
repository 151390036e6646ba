"""Launch failure result model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SpawnFailure:
    """Returned instead of a handle when the OS process could not be created."""

    error: str

    def __bool__(self) -> bool:
        return False

    def to_dict(self) -> dict[str, str]:
        return {"error": self.error}
