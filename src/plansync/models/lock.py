"""Lock model for serialising plan updates per workflow directory."""

from datetime import datetime

from pydantic import BaseModel, Field


class Lock(BaseModel):
    """Contents of `<workflow dir>/.plansync.lock`.

    Attributes:
        pid: Process ID of the lock holder.
        command: Command that took the lock.
        acquired_at: When the lock was taken.
    """

    pid: int
    command: str
    acquired_at: datetime = Field(default_factory=datetime.now)
