"""Core plan reconciliation logic for plansync.

This package contains the change-detection engine and its small file stores:
- canonical: Whitespace normalisation for comparisons
- content_hash: Step and whole-plan fingerprints
- plan_parser: PLAN_STEP block parsing of plan documents
- reconciler: Diffing an edited document against the stored plan
- cascade: Transitive removal through parent links
- modification_parser: STEP_MODIFICATIONS / REMOVE_STEPS directives
- snapshot_store: Whole-plan snapshots across a review stage
- plan_store: plan.json load/save
- plan_history: Archived plan versions
- lock_manager: One plan update per workflow directory
"""

from .canonical import normalize_whitespace
from .cascade import MAX_CASCADE_DEPTH, cascade_descendants, walk_descendants
from .content_hash import (
    STEP_HASH_LENGTH,
    compute_plan_hash,
    compute_step_content_hash,
    compute_step_hash,
    is_step_content_unchanged,
    mark_step_completed,
    set_step_content_hash,
)
from .lock_manager import LockError, plan_lock, read_lock
from .modification_parser import (
    detect_modified,
    has_step_modification_markers,
    merge_directives,
    parse_directives,
    parse_modification_directives,
    validate_modifications,
)
from .plan_history import (
    get_current_history_version,
    get_plan_history,
    record_plan_version,
    restore_plan_version,
)
from .plan_parser import (
    get_plan_md_path,
    get_valid_plan_md_path,
    parse_plan_markdown,
    parse_plan_steps,
)
from .plan_store import PlanStoreError, load_plan, save_plan
from .reconciler import ReconcileOutcome, reconcile, sync_plan_from_markdown
from .snapshot_store import (
    SNAPSHOT_FILE,
    delete_plan_snapshot,
    has_plan_changed_since_snapshot,
    load_plan_snapshot,
    save_plan_snapshot,
    snapshot_plan,
)

__all__ = [
    "MAX_CASCADE_DEPTH",
    "SNAPSHOT_FILE",
    "STEP_HASH_LENGTH",
    "LockError",
    "PlanStoreError",
    "ReconcileOutcome",
    "cascade_descendants",
    "compute_plan_hash",
    "compute_step_content_hash",
    "compute_step_hash",
    "delete_plan_snapshot",
    "detect_modified",
    "get_current_history_version",
    "get_plan_history",
    "get_plan_md_path",
    "get_valid_plan_md_path",
    "has_plan_changed_since_snapshot",
    "has_step_modification_markers",
    "is_step_content_unchanged",
    "load_plan",
    "load_plan_snapshot",
    "mark_step_completed",
    "merge_directives",
    "normalize_whitespace",
    "parse_directives",
    "parse_modification_directives",
    "parse_plan_markdown",
    "parse_plan_steps",
    "plan_lock",
    "read_lock",
    "reconcile",
    "record_plan_version",
    "restore_plan_version",
    "save_plan",
    "save_plan_snapshot",
    "set_step_content_hash",
    "snapshot_plan",
    "sync_plan_from_markdown",
    "validate_modifications",
    "walk_descendants",
]
