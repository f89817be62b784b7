"""Models for explicit step modification directives.

Agents may describe plan edits with directive blocks instead of rewriting
the whole document. Two block shapes exist and are modelled as tagged
variants of a single directive union, parsed independently and merged.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class StepModificationsDirective(BaseModel):
    """A `[STEP_MODIFICATIONS]` block with modified/added/removed lists."""

    kind: Literal["step_modifications"] = "step_modifications"
    modified_ids: list[str] = Field(default_factory=list)
    added_ids: list[str] = Field(default_factory=list)
    removed_ids: list[str] = Field(default_factory=list)


class RemoveStepsDirective(BaseModel):
    """A `[REMOVE_STEPS]` block carrying a single list of removed ids."""

    kind: Literal["remove_steps"] = "remove_steps"
    removed_ids: list[str] = Field(default_factory=list)


ModificationDirective = Annotated[
    StepModificationsDirective | RemoveStepsDirective,
    Field(discriminator="kind"),
]


class StepModifications(BaseModel):
    """Merged, deduplicated modification request."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    modified_ids: list[str] = Field(default_factory=list)
    added_ids: list[str] = Field(default_factory=list)
    removed_ids: list[str] = Field(default_factory=list)


class StepModificationResult(BaseModel):
    """Resolved modification request with cascade deletions and validation.

    Attributes:
        modifications: Ids named directly by the directives.
        cascade_deleted_ids: Descendants of removed steps not named directly.
        all_removed_ids: Directly removed ids followed by cascade-deleted ids.
        is_valid: False if any validation error was found.
        errors: Human-readable validation errors, each naming the offending id.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    modifications: StepModifications = Field(default_factory=StepModifications)
    cascade_deleted_ids: list[str] = Field(default_factory=list)
    all_removed_ids: list[str] = Field(default_factory=list)
    is_valid: bool = True
    errors: list[str] = Field(default_factory=list)


class DetectedSteps(BaseModel):
    """Step ids referenced by PLAN_STEP blocks, split by whether they exist."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    modified_ids: list[str] = Field(default_factory=list)
    new_ids: list[str] = Field(default_factory=list)
