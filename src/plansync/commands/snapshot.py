"""Snapshot commands: capture and compare whole-plan hashes around a review stage."""

from pathlib import Path

import typer

from ..core import (
    delete_plan_snapshot,
    has_plan_changed_since_snapshot,
    snapshot_plan,
)
from ..output import get_output_context
from .workflow import (
    WORKFLOW_DIR_OPTION,
    load_config_or_exit,
    load_plan_or_exit,
    require_workflow_dir,
)

snapshot_app = typer.Typer(help="Plan snapshot commands", no_args_is_help=True)


@snapshot_app.command("save")
def snapshot_save(workflow_dir: Path = WORKFLOW_DIR_OPTION) -> None:
    """Record the current plan hash before a free-edit stage."""
    ctx = get_output_context()
    require_workflow_dir(ctx, workflow_dir)
    config = load_config_or_exit(ctx, workflow_dir)
    plan = load_plan_or_exit(ctx, config, workflow_dir)

    snapshot = snapshot_plan(workflow_dir, plan)
    ctx.result(
        snapshot.model_dump(mode="json", by_alias=True),
        f"[green]Snapshot saved:[/green] {snapshot.hash} (plan v{snapshot.plan_version})",
    )


@snapshot_app.command("check")
def snapshot_check(workflow_dir: Path = WORKFLOW_DIR_OPTION) -> None:
    """Report whether the plan changed since the last snapshot."""
    ctx = get_output_context()
    require_workflow_dir(ctx, workflow_dir)
    config = load_config_or_exit(ctx, workflow_dir)
    plan = load_plan_or_exit(ctx, config, workflow_dir)

    change = has_plan_changed_since_snapshot(workflow_dir, plan)
    if change is None:
        ctx.error("No plan snapshot found")
        raise typer.Exit(1)

    if change.changed:
        message = f"[yellow]Plan changed:[/yellow] {change.before_hash} -> {change.after_hash}"
    else:
        message = f"[green]Plan unchanged:[/green] {change.after_hash}"
    ctx.result(change.model_dump(by_alias=True), message)


@snapshot_app.command("clear")
def snapshot_clear(workflow_dir: Path = WORKFLOW_DIR_OPTION) -> None:
    """Delete the plan snapshot."""
    ctx = get_output_context()
    delete_plan_snapshot(workflow_dir)
    ctx.success("Snapshot cleared")
