"""Sync command: reconcile the edited plan document into plan.json."""

import logging
from contextlib import nullcontext
from pathlib import Path

import typer
from rich.markup import escape

from ..config import PlanSyncConfig
from ..core import (
    LockError,
    PlanStoreError,
    ReconcileOutcome,
    plan_lock,
    record_plan_version,
    save_plan,
    sync_plan_from_markdown,
)
from ..output import OutputContext, get_output_context
from .workflow import (
    WORKFLOW_DIR_OPTION,
    load_config_or_exit,
    load_plan_or_exit,
    require_workflow_dir,
)

logger = logging.getLogger(__name__)


def _render(ctx: OutputContext, outcome: ReconcileOutcome, dry_run: bool) -> None:
    result = outcome.sync_result
    if ctx.json_mode:
        ctx.print_json(
            {
                "syncResult": result.model_dump(by_alias=True),
                "planVersion": outcome.updated_plan.plan_version,
                "dryRun": dry_run,
            }
        )
        return

    if not result.changed:
        ctx.console.print("[green]Plan unchanged[/green]")
    else:
        prefix = "[cyan][DRY RUN][/cyan] " if dry_run else ""
        ctx.console.print(
            f"{prefix}[bold]Plan v{outcome.updated_plan.plan_version}:[/bold] "
            f"{result.added_count} added, {result.updated_count} updated, "
            f"{result.removed_count} removed, {result.renamed_count} renamed"
        )
        for step_id in result.added_step_ids:
            ctx.console.print(f"  [green]+[/green] {escape(step_id)}")
        for step_id in result.updated_step_ids:
            ctx.console.print(f"  [yellow]~[/yellow] {escape(step_id)}")
        for step_id in result.removed_step_ids:
            ctx.console.print(f"  [red]-[/red] {escape(step_id)}")
        for renamed in result.renamed_steps:
            old_id, new_id = escape(renamed.old_id), escape(renamed.new_id)
            ctx.console.print(f"  [cyan]>[/cyan] {old_id} -> {new_id}")

    for error in result.errors:
        ctx.console.print(f"[yellow]Warning:[/yellow] {escape(error)}")


def _reconcile_and_save(
    ctx: OutputContext, config: PlanSyncConfig, workflow_dir: Path, dry_run: bool
) -> ReconcileOutcome:
    plan = load_plan_or_exit(ctx, config, workflow_dir)
    plan_md_path = config.plan_markdown_path(workflow_dir)
    outcome = sync_plan_from_markdown(
        plan_md_path, plan, rename_statuses=config.reconcile.rename_match_statuses
    )
    if outcome is None:
        ctx.error(f"Plan document not found: {plan_md_path}")
        raise typer.Exit(1)

    if not outcome.sync_result.changed or dry_run:
        return outcome

    try:
        save_plan(config.plan_json_path(workflow_dir), outcome.updated_plan)
    except PlanStoreError as e:
        ctx.error(str(e))
        raise typer.Exit(1) from None
    if config.history.enabled:
        slot = record_plan_version(
            workflow_dir,
            outcome.updated_plan,
            "sync",
            outcome.sync_result,
            max_versions=config.history.max_versions,
        )
        logger.debug("Archived plan v%d as history v%d", outcome.updated_plan.plan_version, slot)
    return outcome


def sync(
    workflow_dir: Path = WORKFLOW_DIR_OPTION,
    dry_run: bool = typer.Option(False, "--dry-run", help="Report changes without writing"),
) -> None:
    """Reconcile plan.md into plan.json and report what changed."""
    ctx = get_output_context()
    require_workflow_dir(ctx, workflow_dir)
    config = load_config_or_exit(ctx, workflow_dir)

    # A dry run writes nothing, so it does not wait on the lock
    guard = nullcontext() if dry_run else plan_lock(workflow_dir, "sync")
    try:
        with guard:
            outcome = _reconcile_and_save(ctx, config, workflow_dir, dry_run)
    except LockError as e:
        ctx.error(str(e))
        raise typer.Exit(2) from None

    _render(ctx, outcome, dry_run)
