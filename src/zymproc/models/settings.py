"""Runtime tunables for process control."""

from pydantic import BaseModel, Field

DEFAULT_READ_CHUNK_SIZE = 4096
DEFAULT_DRAIN_INTERVAL = 0.01
DEFAULT_TERMINATE_GRACE_PERIOD = 0.1
DEFAULT_PTY_ROWS = 25
DEFAULT_PTY_COLS = 80


class Settings(BaseModel):
    """Runtime configuration for zymproc."""

    read_chunk_size: int = Field(default=DEFAULT_READ_CHUNK_SIZE, gt=0)
    drain_interval: float = Field(default=DEFAULT_DRAIN_INTERVAL, ge=0)
    terminate_grace_period: float = Field(default=DEFAULT_TERMINATE_GRACE_PERIOD, ge=0)
    pty_rows: int = Field(default=DEFAULT_PTY_ROWS, gt=0)
    pty_cols: int = Field(default=DEFAULT_PTY_COLS, gt=0)
