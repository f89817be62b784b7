"""Per-workflow-directory lock around plan updates.

Commands that read plan.json, reconcile and write it back run inside
``plan_lock`` so two of them never interleave on the same workflow directory.
The lock file is created with O_CREAT | O_EXCL; a lock left behind by a
process that has exited is taken over.
"""

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from ..models import Lock

logger = logging.getLogger(__name__)

LOCK_FILE = ".plansync.lock"
_CREATE_ATTEMPTS = 3


class LockError(Exception):
    """Raised when the plan lock cannot be taken."""


def _process_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except OSError:
        return False
    return True


def read_lock(workflow_dir: Path) -> Lock | None:
    """Read the lock file of a workflow directory.

    A missing, unreadable or corrupted lock file reads as None.
    """
    try:
        return Lock.model_validate_json((workflow_dir / LOCK_FILE).read_text())
    except (ValueError, OSError):
        return None


def is_stale_lock(lock: Lock) -> bool:
    """A lock is stale once the process that wrote it has exited."""
    return not _process_alive(lock.pid)


def _create_exclusive(path: Path, lock: Lock) -> bool:
    try:
        fd = os.open(str(path), os.O_CREAT | os.O_EXCL | os.O_WRONLY)
    except FileExistsError:
        return False
    with os.fdopen(fd, "w") as f:
        f.write(lock.model_dump_json(indent=2))
    return True


def acquire_lock(workflow_dir: Path, command: str) -> Lock:
    """Take the plan lock for a workflow directory.

    Stale and corrupted lock files are removed and creation is retried.

    Raises:
        LockError: If a live process, this one included, already holds the lock
    """
    path = workflow_dir / LOCK_FILE
    lock = Lock(pid=os.getpid(), command=command)

    for _ in range(_CREATE_ATTEMPTS):
        if _create_exclusive(path, lock):
            return lock

        holder = read_lock(workflow_dir)
        if holder is not None and not is_stale_lock(holder):
            raise LockError(
                f"Plan update already in progress ({holder.command}, PID {holder.pid}, "
                f"since {holder.acquired_at:%Y-%m-%d %H:%M:%S})"
            )
        if holder is None:
            logger.debug("Removing unreadable lock file %s", path)
        else:
            logger.debug("Taking over lock of exited process %d", holder.pid)
        path.unlink(missing_ok=True)

    raise LockError(f"Could not create {path}")


def release_lock(workflow_dir: Path, lock: Lock) -> None:
    """Remove the lock file if it still records ``lock``."""
    if read_lock(workflow_dir) == lock:
        (workflow_dir / LOCK_FILE).unlink(missing_ok=True)


@contextmanager
def plan_lock(workflow_dir: Path, command: str) -> Iterator[Lock]:
    """Hold the plan lock for the duration of a ``with`` block."""
    lock = acquire_lock(workflow_dir, command)
    try:
        yield lock
    finally:
        release_lock(workflow_dir, lock)
