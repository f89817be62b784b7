"""Shared test fixtures for plansync tests."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from plansync.core import compute_step_content_hash
from plansync.models import Plan, PlanStep, StepStatus


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def sample_plan() -> Plan:
    """Return a stored plan: one completed step with a hash, one child, one pending."""
    return Plan(
        plan_version=3,
        session_id="session-123",
        steps=[
            PlanStep(
                id="step-1",
                order_index=0,
                title="Create config module",
                description="Load settings from TOML",
                status=StepStatus.COMPLETED,
                content_hash=compute_step_content_hash(
                    "Create config module", "Load settings from TOML"
                ),
                metadata={"commit": "abc123"},
            ),
            PlanStep(
                id="step-1a",
                parent_id="step-1",
                order_index=1,
                title="Add defaults",
                description="Sane default values",
            ),
            PlanStep(
                id="step-2",
                order_index=2,
                title="Build CLI",
                description="Create the entry point",
            ),
        ],
    )


@pytest.fixture
def sample_plan_md() -> str:
    """Return the plan document matching sample_plan."""
    return """# Plan

[PLAN_STEP id="step-1" parent="null"]
Create config module
Load settings from TOML
[/PLAN_STEP]

[PLAN_STEP id="step-1a" parent="step-1"]
Add defaults
Sane default values
[/PLAN_STEP]

[PLAN_STEP id="step-2"]
Build CLI
Create the entry point
[/PLAN_STEP]
"""


@pytest.fixture
def workflow_dir(tmp_path: Path, sample_plan: Plan, sample_plan_md: str) -> Path:
    """Create a workflow directory holding plan.json and plan.md."""
    d = tmp_path / "session"
    d.mkdir()
    (d / "plan.json").write_text(sample_plan.model_dump_json(by_alias=True, indent=2))
    (d / "plan.md").write_text(sample_plan_md)
    return d
