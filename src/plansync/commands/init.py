"""Init command implementation."""

from pathlib import Path

from rich.markup import escape

from ..config import CONFIG_FILE, write_config_template
from ..output import get_output_context
from .workflow import WORKFLOW_DIR_OPTION


def init(workflow_dir: Path = WORKFLOW_DIR_OPTION) -> None:
    """Write a plansync.toml template into the workflow directory."""
    ctx = get_output_context()

    config_path = workflow_dir / CONFIG_FILE
    if config_path.exists():
        ctx.result(
            {"config": str(config_path), "created": False},
            f"[yellow]Config already exists:[/yellow] {escape(str(config_path))}",
        )
        return

    write_config_template(workflow_dir)
    ctx.result(
        {"config": str(config_path), "created": True},
        f"[green]Created config template:[/green] {escape(str(config_path))}",
    )
