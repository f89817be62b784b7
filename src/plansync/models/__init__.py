"""Pydantic data models for plansync.

This package defines the data structures used throughout plansync for:
- Stored and parsed plan steps (PlanStep, ParsedStep)
- Plans and reconciliation results (Plan, SyncResult)
- Whole-plan snapshots (PlanSnapshot, PlanChange)
- Modification directives (StepModifications, StepModificationResult)
- Plan history and locking (PlanHistoryEntry, Lock)

Persisted models use camelCase aliases so plan files stay compatible with
the tools that write them:

Example:
    >>> from plansync.models import PlanStep
    >>> PlanStep(id="s1", title="Setup").model_dump_json(by_alias=True)
"""

from .history import MAX_VERSIONS, PlanHistoryEntry
from .lock import Lock
from .modifications import (
    DetectedSteps,
    ModificationDirective,
    RemoveStepsDirective,
    StepModificationResult,
    StepModifications,
    StepModificationsDirective,
)
from .plan import Plan
from .snapshot import PlanChange, PlanSnapshot
from .step import DONE_STATUSES, ParsedStep, PlanStep, StepComplexity, StepStatus
from .sync import RenamedStep, SyncResult

__all__ = [
    "DONE_STATUSES",
    "MAX_VERSIONS",
    "DetectedSteps",
    "Lock",
    "ModificationDirective",
    "ParsedStep",
    "Plan",
    "PlanChange",
    "PlanHistoryEntry",
    "PlanSnapshot",
    "PlanStep",
    "RemoveStepsDirective",
    "RenamedStep",
    "StepComplexity",
    "StepModificationResult",
    "StepModifications",
    "StepModificationsDirective",
    "StepStatus",
    "SyncResult",
]
