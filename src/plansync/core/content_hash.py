"""Content fingerprints for steps and whole plans.

Step hashes decide whether completed work can be kept across an edit;
plan hashes decide whether a review stage altered the plan. Both are
16-character sha256 prefixes, stable across processes and safe to persist.
"""

import hashlib
from collections.abc import Iterable
from typing import Protocol

from ..models import Plan, PlanStep, StepStatus
from .canonical import normalize_whitespace

STEP_HASH_LENGTH = 16
FIELD_SEPARATOR = "|"


class HashableStep(Protocol):
    """Anything with a title and an optional description."""

    title: str
    description: str | None


def _escape_field(value: str) -> str:
    # Escaping keeps "A|" + "B" distinct from "A" + "|B"
    return value.replace("\\", "\\\\").replace(FIELD_SEPARATOR, "\\" + FIELD_SEPARATOR)


def _digest(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()[:STEP_HASH_LENGTH]


def compute_step_content_hash(title: str | None, description: str | None = None) -> str:
    """Compute the content hash of a step's title and description.

    Both fields are whitespace-normalized first, so formatting-only edits
    produce the same hash.

    Args:
        title: Step title
        description: Optional step description

    Returns:
        16-character lowercase hex string
    """
    fields = (normalize_whitespace(title), normalize_whitespace(description))
    return _digest(FIELD_SEPARATOR.join(_escape_field(f) for f in fields))


def compute_step_hash(step: HashableStep) -> str:
    """Compute the content hash for a step-like object."""
    return compute_step_content_hash(step.title, step.description)


def compute_plan_hash(plan: Plan | Iterable[PlanStep]) -> str:
    """Compute an order-independent hash of a whole plan.

    Each step contributes `<id>:<content hash>`; the fingerprints are sorted
    before hashing so reordering steps does not change the result, while any
    edit to a step's id, title or description does.

    Args:
        plan: A Plan or any iterable of its steps

    Returns:
        16-character lowercase hex string
    """
    steps = plan.steps if isinstance(plan, Plan) else plan
    fingerprints = sorted(f"{step.id}:{compute_step_hash(step)}" for step in steps)
    return _digest("\n".join(fingerprints))


def is_step_content_unchanged(step: PlanStep) -> bool:
    """Check whether a step still matches the hash recorded at completion.

    Returns:
        False if no hash is stored, otherwise whether the stored hash equals
        the hash of the current title and description
    """
    if not step.content_hash:
        return False
    return step.content_hash == compute_step_hash(step)


def set_step_content_hash(step: PlanStep) -> PlanStep:
    """Return a copy of the step with its content hash recorded.

    Call only when the step is marked completed.
    """
    return step.model_copy(update={"content_hash": compute_step_hash(step)})


def mark_step_completed(step: PlanStep) -> PlanStep:
    """Return a copy of the step marked completed with its content hash set."""
    return step.model_copy(
        update={"status": StepStatus.COMPLETED, "content_hash": compute_step_hash(step)}
    )
