"""History commands for archived plan versions."""

from pathlib import Path

import typer

from ..core import LockError, get_plan_history, plan_lock, restore_plan_version
from ..output import get_output_context
from .workflow import WORKFLOW_DIR_OPTION, load_config_or_exit, require_workflow_dir

history_app = typer.Typer(help="Plan history commands", no_args_is_help=True)


@history_app.command("list")
def history_list(workflow_dir: Path = WORKFLOW_DIR_OPTION) -> None:
    """List archived plan versions, newest first."""
    ctx = get_output_context()
    require_workflow_dir(ctx, workflow_dir)
    entries = get_plan_history(workflow_dir)

    if ctx.json_mode:
        ctx.print_json({"history": [e.model_dump(mode="json", by_alias=True) for e in entries]})
        return

    if not entries:
        ctx.console.print("No plan history")
        return

    for entry in entries:
        marker = "" if entry.superseded_at else " [green](current)[/green]"
        ctx.console.print(
            f"v{entry.version}: plan v{entry.plan_version}, {entry.trigger_reason or '-'}, "
            f"{entry.created_at.strftime('%Y-%m-%d %H:%M')}{marker}"
        )


@history_app.command("restore")
def history_restore(
    version: int = typer.Argument(..., help="History version to restore"),
    workflow_dir: Path = WORKFLOW_DIR_OPTION,
) -> None:
    """Restore an archived plan as the current plan.json."""
    ctx = get_output_context()
    require_workflow_dir(ctx, workflow_dir)
    config = load_config_or_exit(ctx, workflow_dir)

    try:
        with plan_lock(workflow_dir, "history restore"):
            restored = restore_plan_version(
                workflow_dir,
                version,
                config.files.plan_json,
                max_versions=config.history.max_versions,
            )
    except LockError as e:
        ctx.error(str(e))
        raise typer.Exit(2) from None

    if not restored:
        ctx.error(f"History version not found: v{version}")
        raise typer.Exit(1)

    ctx.success(f"Restored plan from history v{version}")
