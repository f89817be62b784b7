"""Snapshot models for whole-plan change detection across a review stage."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PlanSnapshot(BaseModel):
    """Whole-plan fingerprint captured right before a free-edit stage begins.

    Attributes:
        hash: Order-independent plan hash at capture time.
        plan_version: Plan revision at capture time.
        saved_at: When the snapshot was written.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    hash: str = Field(description="Whole-plan hash")
    plan_version: int = Field(ge=0, description="Plan revision when captured")
    saved_at: datetime = Field(default_factory=datetime.now, description="Capture time")


class PlanChange(BaseModel):
    """Outcome of comparing a plan against the stored snapshot."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    before_hash: str = Field(description="Hash stored in the snapshot")
    after_hash: str = Field(description="Hash of the plan now")
    changed: bool = Field(description="True if the hashes differ")
