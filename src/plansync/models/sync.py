"""Result model for a single reconciliation pass."""

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel


class RenamedStep(BaseModel):
    """A step matched by content under a new identifier."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    old_id: str = Field(description="Identifier in the previous plan")
    new_id: str = Field(description="Identifier in the edited document")


class SyncResult(BaseModel):
    """Structured diff produced by reconciling a document against a plan.

    Counts and `changed` are derived from the id lists so they can never
    disagree with them.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    added_step_ids: list[str] = Field(default_factory=list)
    updated_step_ids: list[str] = Field(default_factory=list)
    removed_step_ids: list[str] = Field(default_factory=list)
    renamed_steps: list[RenamedStep] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def added_count(self) -> int:
        return len(self.added_step_ids)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def updated_count(self) -> int:
        return len(self.updated_step_ids)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def removed_count(self) -> int:
        return len(self.removed_step_ids)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def renamed_count(self) -> int:
        return len(self.renamed_steps)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def changed(self) -> bool:
        """True if any step was added, updated, removed or renamed."""
        return (
            self.added_count + self.updated_count + self.removed_count + self.renamed_count
        ) > 0
