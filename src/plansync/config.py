"""Configuration management for plansync."""

import tomllib
from pathlib import Path

import tomli_w
from pydantic import BaseModel, Field, ValidationError, field_validator

from .core.cascade import MAX_CASCADE_DEPTH
from .core.plan_parser import PLAN_MD_FILE
from .core.plan_store import PLAN_JSON_FILE
from .models import MAX_VERSIONS, StepStatus

CONFIG_FILE = "plansync.toml"


class ConfigError(Exception):
    """Error loading configuration."""


class FilesConfig(BaseModel):
    """Names of the plan files inside a workflow directory."""

    plan_json: str = PLAN_JSON_FILE
    plan_markdown: str = PLAN_MD_FILE


class ReconcileConfig(BaseModel):
    """Configuration for step reconciliation."""

    rename_match_statuses: list[StepStatus] = Field(
        default_factory=lambda: [StepStatus.COMPLETED],
        description="Statuses whose steps may be matched by content under a new id",
    )

    @field_validator("rename_match_statuses")
    @classmethod
    def _require_status(cls, value: list[StepStatus]) -> list[StepStatus]:
        if not value:
            raise ValueError("rename_match_statuses must name at least one status")
        return value


class CascadeConfig(BaseModel):
    """Configuration for cascade deletion."""

    max_depth: int = Field(default=MAX_CASCADE_DEPTH, ge=1)


class HistoryConfig(BaseModel):
    """Configuration for plan history archiving."""

    enabled: bool = True
    max_versions: int = Field(default=MAX_VERSIONS, ge=1)


class PlanSyncConfig(BaseModel):
    """Root configuration for plansync."""

    files: FilesConfig = Field(default_factory=FilesConfig)
    reconcile: ReconcileConfig = Field(default_factory=ReconcileConfig)
    cascade: CascadeConfig = Field(default_factory=CascadeConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)

    def plan_json_path(self, workflow_dir: Path) -> Path:
        """Get the plan.json path for a workflow directory."""
        return workflow_dir / self.files.plan_json

    def plan_markdown_path(self, workflow_dir: Path) -> Path:
        """Get the plan document path for a workflow directory."""
        return workflow_dir / self.files.plan_markdown


def load_config(workflow_dir: Path) -> PlanSyncConfig:
    """Load config from plansync.toml.

    Args:
        workflow_dir: Workflow instance directory

    Returns:
        Loaded configuration, or defaults if plansync.toml doesn't exist

    Raises:
        ConfigError: If the file is not valid TOML or fails validation
    """
    config_path = workflow_dir / CONFIG_FILE
    if not config_path.exists():
        return PlanSyncConfig()
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
        return PlanSyncConfig.model_validate(data)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e


def write_config_template(workflow_dir: Path) -> Path:
    """Write default plansync.toml template.

    Args:
        workflow_dir: Workflow instance directory

    Returns:
        Path to the written config file
    """
    config_path = workflow_dir / CONFIG_FILE
    template = {
        "files": {"plan_json": PLAN_JSON_FILE, "plan_markdown": PLAN_MD_FILE},
        # Add "skipped" to let skipped steps keep their state across renumbering
        "reconcile": {"rename_match_statuses": [StepStatus.COMPLETED.value]},
        "cascade": {"max_depth": MAX_CASCADE_DEPTH},
        "history": {"enabled": True, "max_versions": MAX_VERSIONS},
    }
    workflow_dir.mkdir(parents=True, exist_ok=True)
    with open(config_path, "wb") as f:
        tomli_w.dump(template, f)
    return config_path
