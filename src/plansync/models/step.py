"""Step models for plan documents.

A `PlanStep` is one unit of planned work as stored in plan.json. A
`ParsedStep` is what the document parser extracts from plan.md before
reconciliation decides how it relates to the stored steps.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class StepStatus(str, Enum):
    """Lifecycle status of a plan step."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"
    SKIPPED = "skipped"
    NEEDS_REVIEW = "needs_review"


class StepComplexity(str, Enum):
    """Complexity rating attached to a step."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Statuses that regress to pending when a step's content is edited
DONE_STATUSES = frozenset({StepStatus.COMPLETED, StepStatus.SKIPPED})


class ParsedStep(BaseModel):
    """Step as extracted from a plan document.

    Attributes:
        id: Identifier written by the editor. Not guaranteed stable across edits.
        parent_id: Identifier of the parent step, or None for a top-level step.
        title: First line of the step body.
        description: Remaining lines of the step body.
        complexity: Optional complexity rating from the step attributes.
        acceptance_criteria_ids: Acceptance criteria the step covers, if listed.
        estimated_files: Files the step expects to touch, if listed.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(description="Step identifier from the document")
    parent_id: str | None = Field(default=None, description="Parent step identifier")
    title: str = Field(default="", description="Step title")
    description: str | None = Field(default=None, description="Step description")
    complexity: StepComplexity | None = Field(default=None, description="Complexity rating")
    acceptance_criteria_ids: list[str] | None = Field(
        default=None, description="Acceptance criteria covered by the step"
    )
    estimated_files: list[str] | None = Field(
        default=None, description="Files the step is expected to touch"
    )


class PlanStep(BaseModel):
    """Stored plan step.

    `content_hash` is only trustworthy while the step is completed: it is
    written when the step completes and cleared whenever the title or
    description changes. Its presence makes a step eligible for rename
    matching during reconciliation.

    Example:
        >>> step = PlanStep(id="step-1", title="Add parser", description="Parse markers")
        >>> step.model_dump(by_alias=True)["orderIndex"]
        0
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(description="Step identifier, unique within a plan")
    parent_id: str | None = Field(default=None, description="Parent step identifier")
    order_index: int = Field(default=0, description="Position in document order")
    title: str = Field(description="Step title")
    description: str | None = Field(default=None, description="Step description")
    status: StepStatus = Field(default=StepStatus.PENDING, description="Lifecycle status")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Opaque caller data")
    content_hash: str | None = Field(
        default=None, description="Content fingerprint recorded at completion"
    )
    complexity: StepComplexity | None = Field(default=None, description="Complexity rating")
    acceptance_criteria_ids: list[str] | None = Field(
        default=None, description="Acceptance criteria covered by the step"
    )
    estimated_files: list[str] | None = Field(
        default=None, description="Files the step is expected to touch"
    )
