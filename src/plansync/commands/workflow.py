"""Helpers shared by commands that operate on a workflow directory."""

from pathlib import Path

import typer

from ..config import ConfigError, PlanSyncConfig, load_config
from ..core import PlanStoreError, load_plan
from ..models import Plan
from ..output import OutputContext

WORKFLOW_DIR_OPTION = typer.Option(
    Path("."), "--dir", "-d", help="Workflow directory holding plan.json and plan.md"
)


def load_config_or_exit(ctx: OutputContext, workflow_dir: Path) -> PlanSyncConfig:
    """Load the workflow config, exiting with code 1 if it is invalid."""
    try:
        return load_config(workflow_dir)
    except ConfigError as e:
        ctx.error(str(e))
        raise typer.Exit(1) from None


def load_plan_or_exit(ctx: OutputContext, config: PlanSyncConfig, workflow_dir: Path) -> Plan:
    """Load the stored plan, exiting with code 1 if it is missing or invalid."""
    try:
        return load_plan(config.plan_json_path(workflow_dir))
    except PlanStoreError as e:
        ctx.error(str(e))
        raise typer.Exit(1) from None


def read_text_or_exit(ctx: OutputContext, path: Path) -> str:
    """Read an input file, exiting with code 1 if it cannot be read."""
    if not path.exists():
        ctx.error(f"File not found: {path}")
        raise typer.Exit(1)
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        ctx.error(f"Cannot read {path}: {e}")
        raise typer.Exit(1) from None


def require_workflow_dir(ctx: OutputContext, workflow_dir: Path) -> None:
    """Exit with code 1 unless the workflow directory exists."""
    if not workflow_dir.is_dir():
        ctx.error(f"Workflow directory not found: {workflow_dir}")
        raise typer.Exit(1)
