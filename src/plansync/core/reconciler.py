"""Step reconciliation between an edited plan document and the stored plan.

The editing agent may rewrite the plan document freely: edit steps in
place, renumber them, add new ones or drop old ones. Reconciliation works
out which of these happened without any cooperation from the agent.

Each parsed step is matched by exactly one mechanism, tried in order:

1. Identifier match: the id exists in the stored plan. Content is compared
   after whitespace normalisation; an edit resets completion.
2. Hash match: the parsed content equals the recorded content hash of a
   completed step that has not been claimed yet. The step keeps its
   completion state under the new id and is reported as a rename.
3. New: anything else is a fresh pending step.

Stored steps that no parsed step claimed are removals.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from ..models import (
    DONE_STATUSES,
    ParsedStep,
    Plan,
    PlanStep,
    RenamedStep,
    StepStatus,
    SyncResult,
)
from .canonical import normalize_whitespace
from .content_hash import compute_step_hash
from .plan_parser import parse_plan_markdown

logger = logging.getLogger(__name__)

DEFAULT_RENAME_STATUSES: frozenset[StepStatus] = frozenset({StepStatus.COMPLETED})


@dataclass
class ReconcileOutcome:
    """Result of one reconciliation pass.

    Attributes:
        sync_result: Structured diff of what changed.
        updated_plan: New plan in document order. The input plan is untouched.
    """

    sync_result: SyncResult
    updated_plan: Plan


def _content_differs(existing: PlanStep, parsed: ParsedStep) -> bool:
    return normalize_whitespace(existing.title) != normalize_whitespace(
        parsed.title
    ) or normalize_whitespace(existing.description) != normalize_whitespace(parsed.description)


def _build_hash_pool(
    steps: Iterable[PlanStep],
    rename_statuses: frozenset[StepStatus],
    kept_ids: set[str],
) -> dict[str, PlanStep]:
    pool: dict[str, PlanStep] = {}
    for step in steps:
        # Steps whose id survives in the document are claimed by identifier
        if step.id in kept_ids:
            continue
        if step.status in rename_statuses and step.content_hash:
            # First step with a given hash owns the slot
            pool.setdefault(step.content_hash, step)
    return pool


def _updated_step(existing: PlanStep, parsed: ParsedStep, index: int) -> PlanStep:
    status = StepStatus.PENDING if existing.status in DONE_STATUSES else existing.status
    return existing.model_copy(
        update={
            "title": parsed.title,
            "description": parsed.description,
            "parent_id": parsed.parent_id,
            "order_index": index,
            "status": status,
            "content_hash": None,
            "complexity": parsed.complexity or existing.complexity,
            "acceptance_criteria_ids": (
                parsed.acceptance_criteria_ids
                if parsed.acceptance_criteria_ids is not None
                else existing.acceptance_criteria_ids
            ),
            "estimated_files": (
                parsed.estimated_files
                if parsed.estimated_files is not None
                else existing.estimated_files
            ),
        }
    )


def _renamed_step(source: PlanStep, parsed: ParsedStep, index: int) -> PlanStep:
    return PlanStep(
        id=parsed.id,
        parent_id=parsed.parent_id,
        order_index=index,
        title=parsed.title,
        description=parsed.description,
        status=source.status,
        metadata=dict(source.metadata),
        content_hash=source.content_hash,
        complexity=parsed.complexity or source.complexity,
        acceptance_criteria_ids=parsed.acceptance_criteria_ids,
        estimated_files=parsed.estimated_files,
    )


def _new_step(parsed: ParsedStep, index: int) -> PlanStep:
    return PlanStep(
        id=parsed.id,
        parent_id=parsed.parent_id,
        order_index=index,
        title=parsed.title,
        description=parsed.description,
        status=StepStatus.PENDING,
        complexity=parsed.complexity,
        acceptance_criteria_ids=parsed.acceptance_criteria_ids,
        estimated_files=parsed.estimated_files,
    )


def reconcile(
    parsed_steps: Sequence[ParsedStep],
    current_plan: Plan,
    *,
    rename_statuses: Iterable[StepStatus] = DEFAULT_RENAME_STATUSES,
) -> ReconcileOutcome:
    """Diff a freshly parsed step list against the stored plan.

    Identifier matching always pre-empts hash matching: if the editor kept
    an id, that step is an in-place edit even when its content coincides
    with some other completed step.

    Args:
        parsed_steps: Steps from the edited document, in document order
        current_plan: Plan as stored before the edit
        rename_statuses: Statuses eligible as rename sources (completed by default)

    Returns:
        ReconcileOutcome with the diff and the new plan. plan_version is
        incremented by one if and only if something changed.
    """
    result = SyncResult()
    existing_by_id = {step.id: step for step in current_plan.steps}
    parsed_ids = {parsed.id for parsed in parsed_steps}
    hash_pool = _build_hash_pool(current_plan.steps, frozenset(rename_statuses), parsed_ids)
    consumed: set[str] = set()
    seen_ids: set[str] = set()
    updated_steps: list[PlanStep] = []

    for parsed in parsed_steps:
        if parsed.id in seen_ids:
            result.errors.append(f"Duplicate step id {parsed.id!r} in document; ignored")
            logger.warning("Duplicate step id %s in plan document", parsed.id)
            continue
        seen_ids.add(parsed.id)
        index = len(updated_steps)
        existing = existing_by_id.get(parsed.id)

        if existing is not None:
            consumed.add(existing.id)
            if _content_differs(existing, parsed):
                updated_steps.append(_updated_step(existing, parsed, index))
                result.updated_step_ids.append(parsed.id)
                logger.debug("Step %s updated", parsed.id)
            else:
                updated_steps.append(
                    existing.model_copy(
                        update={"order_index": index, "parent_id": parsed.parent_id}
                    )
                )
            continue

        source = hash_pool.get(compute_step_hash(parsed))
        if source is not None and source.id not in consumed:
            consumed.add(source.id)
            updated_steps.append(_renamed_step(source, parsed, index))
            result.renamed_steps.append(RenamedStep(old_id=source.id, new_id=parsed.id))
            logger.debug("Step %s renamed to %s", source.id, parsed.id)
            continue

        updated_steps.append(_new_step(parsed, index))
        result.added_step_ids.append(parsed.id)
        logger.debug("Step %s added", parsed.id)

    for step in current_plan.steps:
        if step.id not in consumed:
            result.removed_step_ids.append(step.id)
            logger.debug("Step %s removed", step.id)

    plan_version = current_plan.plan_version
    if result.changed:
        plan_version += 1
        logger.info(
            "Plan changed (v%d): %d added, %d updated, %d removed, %d renamed",
            plan_version,
            result.added_count,
            result.updated_count,
            result.removed_count,
            result.renamed_count,
        )

    updated_plan = current_plan.model_copy(
        update={"steps": updated_steps, "plan_version": plan_version}
    )
    return ReconcileOutcome(sync_result=result, updated_plan=updated_plan)


def sync_plan_from_markdown(
    plan_md_path: Path,
    current_plan: Plan,
    *,
    rename_statuses: Iterable[StepStatus] = DEFAULT_RENAME_STATUSES,
) -> ReconcileOutcome | None:
    """Reconcile the stored plan against the plan document on disk.

    Args:
        plan_md_path: Path to the edited plan.md
        current_plan: Plan as stored before the edit
        rename_statuses: Statuses eligible as rename sources

    Returns:
        ReconcileOutcome, or None if the document is missing or unreadable.
        The caller is responsible for persisting the updated plan.
    """
    parsed_steps = parse_plan_markdown(plan_md_path)
    if parsed_steps is None:
        logger.debug("No readable plan document at %s", plan_md_path)
        return None
    return reconcile(parsed_steps, current_plan, rename_statuses=rename_statuses)
