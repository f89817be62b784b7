"""Plan document parsing for plansync.

Plan documents mark each step with a `[PLAN_STEP ...]` block:

    [PLAN_STEP id="step-2" parent="step-1" complexity="medium"]
    Add the parser
    Parse PLAN_STEP blocks into records.
    [/PLAN_STEP]

The first body line is the title; the remaining lines form the description.
"""

import logging
import re
from pathlib import Path

from ..models import ParsedStep, StepComplexity

logger = logging.getLogger(__name__)

PLAN_MD_FILE = "plan.md"

_STEP_BLOCK = re.compile(r"\[\s*PLAN_STEP\b([^\]]*)\]([\s\S]*?)\[\s*/\s*PLAN_STEP\s*\]")
_ATTRIBUTE = re.compile(r'(\w+)\s*=\s*"([^"]*)"')


def parse_attributes(attr_string: str) -> dict[str, str]:
    """Parse `key="value"` pairs from a block opener.

    Args:
        attr_string: Text between the block name and the closing bracket

    Returns:
        Mapping of attribute names to values (last occurrence wins)
    """
    return {m.group(1): m.group(2) for m in _ATTRIBUTE.finditer(attr_string)}


def _parse_complexity(value: str | None) -> StepComplexity | None:
    if not value:
        return None
    try:
        return StepComplexity(value.strip().lower())
    except ValueError:
        return None


def _parse_list(value: str | None) -> list[str] | None:
    if not value:
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_parent(attrs: dict[str, str]) -> str | None:
    parent = attrs.get("parent", attrs.get("parentId"))
    if not parent or parent == "null":
        return None
    return parent


def parse_plan_steps(plan_content: str) -> list[ParsedStep]:
    """Parse every PLAN_STEP block in document order.

    Args:
        plan_content: Plan document text

    Returns:
        List of parsed steps, empty if the document has no blocks
    """
    steps: list[ParsedStep] = []

    for match in _STEP_BLOCK.finditer(plan_content):
        attrs = parse_attributes(match.group(1))
        lines = match.group(2).strip().split("\n")

        steps.append(
            ParsedStep(
                id=attrs.get("id", ""),
                parent_id=_parse_parent(attrs),
                title=lines[0].strip(),
                description="\n".join(lines[1:]).strip(),
                complexity=_parse_complexity(attrs.get("complexity")),
                acceptance_criteria_ids=_parse_list(attrs.get("acceptanceCriteria")),
                estimated_files=_parse_list(attrs.get("estimatedFiles")),
            )
        )

    return steps


def parse_plan_markdown(plan_md_path: Path) -> list[ParsedStep] | None:
    """Read and parse a plan document from disk.

    Args:
        plan_md_path: Path to plan.md

    Returns:
        Parsed steps, or None if the file is missing or cannot be read
    """
    if not plan_md_path.exists():
        return None

    try:
        content = plan_md_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read plan document %s: %s", plan_md_path, e)
        return None

    return parse_plan_steps(content)


def get_plan_md_path(plan_json_path: Path) -> Path:
    """Return the plan.md path that sits next to plan.json."""
    return plan_json_path.parent / PLAN_MD_FILE


def get_valid_plan_md_path(plan_file_path: str | Path | None) -> Path | None:
    """Validate a caller-supplied plan document location.

    Args:
        plan_file_path: Either the plan.md path itself or its directory

    Returns:
        The plan.md path, or None if the value cannot name a plan document
    """
    if not plan_file_path:
        return None

    path = Path(plan_file_path)
    if path.name == PLAN_MD_FILE:
        return path

    # A bare directory name (no extension) is taken to contain plan.md
    if not path.suffix:
        return path / PLAN_MD_FILE

    return None
