"""Loading and saving plan.json."""

import logging
from pathlib import Path

from pydantic import ValidationError

from ..models import Plan
from .files import write_text_atomic

logger = logging.getLogger(__name__)

PLAN_JSON_FILE = "plan.json"


class PlanStoreError(Exception):
    """Error reading or writing a stored plan."""


def load_plan(plan_path: Path) -> Plan:
    """Load a plan from a JSON file.

    Args:
        plan_path: Path to plan.json

    Returns:
        The loaded plan

    Raises:
        PlanStoreError: If the file is missing, unreadable or not a valid plan
    """
    if not plan_path.exists():
        raise PlanStoreError(f"Plan file not found: {plan_path}")

    try:
        return Plan.model_validate_json(plan_path.read_text(encoding="utf-8"))
    except ValidationError as e:
        raise PlanStoreError(f"Invalid plan file {plan_path}: {e.error_count()} error(s)") from e
    except (OSError, UnicodeDecodeError) as e:
        raise PlanStoreError(f"Cannot read plan file {plan_path}: {e}") from e


def save_plan(plan_path: Path, plan: Plan) -> None:
    """Write a plan to a JSON file using camelCase keys.

    Raises:
        PlanStoreError: If the file cannot be written
    """
    try:
        write_text_atomic(plan_path, plan.model_dump_json(by_alias=True, indent=2))
    except OSError as e:
        raise PlanStoreError(f"Cannot write plan file {plan_path}: {e}") from e
    logger.debug("Saved plan v%d to %s", plan.plan_version, plan_path)
