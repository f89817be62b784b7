"""Commands for explicit modification directives and cascade previews."""

from pathlib import Path

import typer
from rich.markup import escape

from ..core import detect_modified, parse_modification_directives, walk_descendants
from ..output import format_ids, get_output_context
from .workflow import (
    WORKFLOW_DIR_OPTION,
    load_config_or_exit,
    load_plan_or_exit,
    read_text_or_exit,
    require_workflow_dir,
)


def modifications(
    file: Path = typer.Option(..., "--file", "-f", help="Agent output with directive blocks"),
    new_ids: list[str] = typer.Option(
        [], "--new-id", help="Step id introduced elsewhere in the same output (repeatable)"
    ),
    workflow_dir: Path = WORKFLOW_DIR_OPTION,
) -> None:
    """Resolve STEP_MODIFICATIONS / REMOVE_STEPS directives against the plan."""
    ctx = get_output_context()
    require_workflow_dir(ctx, workflow_dir)
    config = load_config_or_exit(ctx, workflow_dir)
    plan = load_plan_or_exit(ctx, config, workflow_dir)
    text = read_text_or_exit(ctx, file)

    result = parse_modification_directives(
        text, plan.steps, new_ids, max_depth=config.cascade.max_depth
    )

    if ctx.json_mode:
        ctx.print_json(result.model_dump(by_alias=True))
    else:
        mods = result.modifications
        ctx.console.print(f"[bold]Modified:[/bold] {format_ids(mods.modified_ids)}")
        ctx.console.print(f"[bold]Added:[/bold] {format_ids(mods.added_ids)}")
        ctx.console.print(f"[bold]Removed:[/bold] {format_ids(mods.removed_ids)}")
        ctx.console.print(
            f"[bold]Cascade-deleted:[/bold] {format_ids(result.cascade_deleted_ids)}"
        )
        for error in result.errors:
            ctx.console.print(f"[red]Error:[/red] {escape(error)}")

    if not result.is_valid:
        raise typer.Exit(2)


def detect(
    file: Path = typer.Option(..., "--file", "-f", help="Agent output with PLAN_STEP blocks"),
    workflow_dir: Path = WORKFLOW_DIR_OPTION,
) -> None:
    """Classify PLAN_STEP ids in agent output as modified or new."""
    ctx = get_output_context()
    require_workflow_dir(ctx, workflow_dir)
    config = load_config_or_exit(ctx, workflow_dir)
    plan = load_plan_or_exit(ctx, config, workflow_dir)
    text = read_text_or_exit(ctx, file)

    detected = detect_modified(text, plan.step_ids())
    ctx.result(
        detected.model_dump(by_alias=True),
        f"[bold]Modified:[/bold] {format_ids(detected.modified_ids)}\n"
        f"[bold]New:[/bold] {format_ids(detected.new_ids)}",
    )


def cascade(
    step_ids: list[str] = typer.Argument(..., help="Ids of the steps to remove"),
    workflow_dir: Path = WORKFLOW_DIR_OPTION,
) -> None:
    """Show which descendant steps removing the given steps would delete."""
    ctx = get_output_context()
    require_workflow_dir(ctx, workflow_dir)
    config = load_config_or_exit(ctx, workflow_dir)
    plan = load_plan_or_exit(ctx, config, workflow_dir)

    unknown = [step_id for step_id in step_ids if plan.get_step(step_id) is None]
    if unknown:
        ctx.error(f"Unknown step id(s): {', '.join(unknown)}")
        raise typer.Exit(1)

    descendants = walk_descendants(step_ids, plan.steps, max_depth=config.cascade.max_depth)
    ctx.result(
        {"rootIds": step_ids, "cascadeDeletedIds": descendants},
        f"[bold]Cascade-deleted:[/bold] {format_ids(descendants)}",
    )
