"""Plan model: the ordered collection of steps for one workflow instance."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .step import PlanStep


class Plan(BaseModel):
    """Stored plan as persisted in plan.json.

    Keys this model does not know about are kept and written back unchanged,
    so plan files produced by other tools survive a sync round-trip.

    Attributes:
        version: Schema version of the plan file.
        plan_version: Monotonic counter bumped once per changing sync.
        session_id: Workflow instance the plan belongs to.
        is_approved: Whether the plan has been approved.
        review_count: Number of review rounds the plan has been through.
        created_at: When the plan was first created.
        steps: Steps in document order.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    version: str = Field(default="1.0.0", description="Plan file schema version")
    plan_version: int = Field(default=0, ge=0, description="Monotonic plan revision")
    session_id: str = Field(default="", description="Owning workflow instance")
    is_approved: bool = Field(default=False, description="Plan approval flag")
    review_count: int = Field(default=0, ge=0, description="Completed review rounds")
    created_at: datetime = Field(default_factory=datetime.now, description="Creation time")
    steps: list[PlanStep] = Field(default_factory=list, description="Steps in document order")

    def step_ids(self) -> set[str]:
        """Return the identifiers of all steps in the plan."""
        return {step.id for step in self.steps}

    def get_step(self, step_id: str) -> PlanStep | None:
        """Return the step with the given id, or None."""
        for step in self.steps:
            if step.id == step_id:
                return step
        return None
