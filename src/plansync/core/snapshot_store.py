"""Whole-plan snapshots for detecting edits made during a review stage.

Before a stage that lets the agent edit the plan freely, the caller saves
a snapshot of the plan hash; afterwards it asks whether the plan changed.
Every call takes the workflow instance's storage directory explicitly.

A missing or corrupt snapshot is reported as None, never raised: "no
snapshot" is a normal outcome (first run, or cleaned up).
"""

import logging
from pathlib import Path

from pydantic import ValidationError

from ..models import Plan, PlanChange, PlanSnapshot
from .content_hash import compute_plan_hash
from .files import write_text_atomic

logger = logging.getLogger(__name__)

SNAPSHOT_FILE = ".plan-snapshot.json"


def get_snapshot_path(storage_dir: Path) -> Path:
    """Get path to the snapshot file for a workflow instance."""
    return storage_dir / SNAPSHOT_FILE


def save_plan_snapshot(storage_dir: Path, plan_hash: str, plan_version: int) -> PlanSnapshot:
    """Save a plan snapshot, overwriting any previous one.

    Args:
        storage_dir: Workflow instance directory (created if missing)
        plan_hash: Whole-plan hash from compute_plan_hash
        plan_version: Plan revision being captured

    Returns:
        The snapshot that was written

    Raises:
        OSError: If the snapshot cannot be written
    """
    snapshot = PlanSnapshot(hash=plan_hash, plan_version=plan_version)
    write_text_atomic(
        get_snapshot_path(storage_dir), snapshot.model_dump_json(by_alias=True, indent=2)
    )
    logger.debug("Saved plan snapshot %s (v%d) in %s", plan_hash, plan_version, storage_dir)
    return snapshot


def snapshot_plan(storage_dir: Path, plan: Plan) -> PlanSnapshot:
    """Hash a plan and save it as the current snapshot."""
    return save_plan_snapshot(storage_dir, compute_plan_hash(plan), plan.plan_version)


def load_plan_snapshot(storage_dir: Path) -> PlanSnapshot | None:
    """Load the snapshot for a workflow instance.

    Returns:
        The snapshot, or None if it is missing, unreadable or corrupt
    """
    path = get_snapshot_path(storage_dir)
    if not path.exists():
        return None

    try:
        return PlanSnapshot.model_validate_json(path.read_text(encoding="utf-8"))
    except (ValidationError, OSError, UnicodeDecodeError) as e:
        logger.warning("Ignoring unreadable plan snapshot %s: %s", path, e)
        return None


def delete_plan_snapshot(storage_dir: Path) -> None:
    """Delete the snapshot. Does nothing if there is none."""
    get_snapshot_path(storage_dir).unlink(missing_ok=True)


def has_plan_changed_since_snapshot(storage_dir: Path, plan: Plan) -> PlanChange | None:
    """Compare a plan against the stored snapshot.

    Args:
        storage_dir: Workflow instance directory
        plan: Plan as it is now

    Returns:
        PlanChange with both hashes, or None if no usable snapshot exists
    """
    snapshot = load_plan_snapshot(storage_dir)
    if snapshot is None:
        return None

    after_hash = compute_plan_hash(plan)
    return PlanChange(
        before_hash=snapshot.hash,
        after_hash=after_hash,
        changed=after_hash != snapshot.hash,
    )
