"""Version history models for archived plans.

Each changing sync can archive the resulting plan so earlier revisions
can be inspected or restored.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PlanHistoryEntry(BaseModel):
    """Metadata for a single archived plan version.

    Attributes:
        version: History slot number (1-indexed, independent of plan_version)
        plan_version: The plan's own revision counter when archived
        created_at: When this entry was archived
        trigger_reason: Why this entry was created (sync, restore, manual)
        added_count: Steps added by the sync that produced this version
        updated_count: Steps updated by that sync
        removed_count: Steps removed by that sync
        renamed_count: Steps renamed by that sync
        superseded_at: When a newer entry replaced this one (None if current)
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    version: int = Field(ge=1, description="History slot number")
    plan_version: int = Field(ge=0, description="Plan revision archived")
    created_at: datetime = Field(default_factory=datetime.now)
    trigger_reason: str | None = Field(default=None, description="Reason for archiving")
    added_count: int = 0
    updated_count: int = 0
    removed_count: int = 0
    renamed_count: int = 0
    superseded_at: datetime | None = Field(default=None, description="When superseded")


# Maximum history entries to retain by default
MAX_VERSIONS = 5
