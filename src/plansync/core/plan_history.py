"""Plan version history.

Archives plan.json after each changing sync, with automatic pruning to
max_versions (5 by default). Each entry is stored in history/v<N>/ with
plan.json and meta.json.

History numbering:
- 0 means no entries exist yet
- First archive creates v1
- Second archive creates v2, etc.

History slots are independent of the plan's own plan_version counter,
which is recorded in each entry's metadata.
"""

import logging
import shutil
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from ..models import MAX_VERSIONS, Plan, PlanHistoryEntry, SyncResult
from .files import write_text_atomic

logger = logging.getLogger(__name__)

HISTORY_DIR = "history"
ARCHIVED_PLAN_FILE = "plan.json"
ENTRY_META_FILE = "meta.json"


def _version_dirs(history_dir: Path) -> list[Path]:
    return [
        d
        for d in history_dir.iterdir()
        if d.is_dir() and d.name.startswith("v") and d.name[1:].isdigit()
    ]


def get_current_history_version(plan_dir: Path) -> int:
    """Get the newest history slot number.

    Args:
        plan_dir: Directory holding plan.json

    Returns:
        Newest slot number (0 if no history exists)
    """
    history_dir = plan_dir / HISTORY_DIR
    if not history_dir.exists():
        return 0

    versions = [int(d.name[1:]) for d in _version_dirs(history_dir)]
    return max(versions) if versions else 0


def record_plan_version(
    plan_dir: Path,
    plan: Plan,
    trigger_reason: str,
    sync_result: SyncResult | None = None,
    max_versions: int = MAX_VERSIONS,
) -> int:
    """Archive a plan as a new history entry.

    Args:
        plan_dir: Directory holding plan.json
        plan: Plan to archive
        trigger_reason: Why this entry was created (sync, restore, ...)
        sync_result: Diff that produced the plan, recorded as counts
        max_versions: Entries to keep after pruning

    Returns:
        The new history slot number
    """
    history_dir = plan_dir / HISTORY_DIR
    history_dir.mkdir(parents=True, exist_ok=True)

    current = get_current_history_version(plan_dir)
    new_version = current + 1

    version_dir = history_dir / f"v{new_version}"
    version_dir.mkdir(exist_ok=True)
    write_text_atomic(
        version_dir / ARCHIVED_PLAN_FILE, plan.model_dump_json(by_alias=True, indent=2)
    )

    entry = PlanHistoryEntry(
        version=new_version,
        plan_version=plan.plan_version,
        trigger_reason=trigger_reason,
    )
    if sync_result is not None:
        entry.added_count = sync_result.added_count
        entry.updated_count = sync_result.updated_count
        entry.removed_count = sync_result.removed_count
        entry.renamed_count = sync_result.renamed_count
    write_text_atomic(version_dir / ENTRY_META_FILE, entry.model_dump_json(by_alias=True, indent=2))

    # Mark previous entry as superseded (only if a previous entry exists)
    if current >= 1:
        prev_meta_path = history_dir / f"v{current}" / ENTRY_META_FILE
        if prev_meta_path.exists():
            try:
                prev_entry = PlanHistoryEntry.model_validate_json(prev_meta_path.read_text())
                prev_entry.superseded_at = datetime.now()
                prev_meta_path.write_text(prev_entry.model_dump_json(by_alias=True, indent=2))
            except (ValidationError, OSError) as e:
                logger.warning("Failed to update superseded_at for v%d: %s", current, e)

    _prune_old_versions(history_dir, max_versions)

    return new_version


def _prune_old_versions(history_dir: Path, max_versions: int) -> None:
    """Remove entries beyond max_versions, keeping newest."""
    version_dirs = sorted(
        _version_dirs(history_dir),
        key=lambda d: int(d.name[1:]),
        reverse=True,  # Newest first
    )

    for old_dir in version_dirs[max_versions:]:
        shutil.rmtree(old_dir)


def get_plan_history(plan_dir: Path) -> list[PlanHistoryEntry]:
    """Get plan history entries.

    Returns:
        List of PlanHistoryEntry, newest first. Corrupt entries are skipped.
    """
    history_dir = plan_dir / HISTORY_DIR
    if not history_dir.exists():
        return []

    entries = []
    for version_dir in _version_dirs(history_dir):
        meta_path = version_dir / ENTRY_META_FILE
        if meta_path.exists():
            try:
                entries.append(PlanHistoryEntry.model_validate_json(meta_path.read_text()))
            except (ValidationError, OSError) as e:
                logger.warning("Skipping corrupt history entry %s: %s", version_dir.name, e)

    return sorted(entries, key=lambda e: e.version, reverse=True)


def restore_plan_version(
    plan_dir: Path,
    version: int,
    plan_file: str,
    max_versions: int = MAX_VERSIONS,
) -> bool:
    """Restore an archived plan as the current plan.json.

    The current plan is archived first so the restore can itself be undone.

    Args:
        plan_dir: Directory holding plan.json
        version: History slot to restore
        plan_file: Name of the current plan file
        max_versions: Entries to keep after pruning

    Returns:
        True if restored successfully
    """
    archived = plan_dir / HISTORY_DIR / f"v{version}" / ARCHIVED_PLAN_FILE
    if not archived.exists():
        return False

    # Read first: archiving the current plan may prune the requested entry
    content = archived.read_text(encoding="utf-8")
    current_path = plan_dir / plan_file
    if current_path.exists():
        try:
            current = Plan.model_validate_json(current_path.read_text(encoding="utf-8"))
        except (ValidationError, OSError) as e:
            logger.warning("Current plan not archived before restore: %s", e)
        else:
            record_plan_version(
                plan_dir, current, f"pre-restore from v{version}", max_versions=max_versions
            )

    write_text_atomic(current_path, content)
    return True
