"""Parsing of explicit step modification directives.

Instead of rewriting the plan document, an agent may describe its edits
with directive blocks:

    [STEP_MODIFICATIONS]
    modified: ["step-1", "step-2"]
    added: ["step-new-1"]
    removed: ["step-3"]
    [/STEP_MODIFICATIONS]

    [REMOVE_STEPS]
    ["step-3", "step-4"]
    [/REMOVE_STEPS]

Every occurrence of either shape is parsed into a directive, the
directives are merged, and the merged request is validated against the
current steps in one place. Removing a step also removes its descendants.
"""

import json
import logging
import re
from collections.abc import Iterable, Sequence

from ..models import (
    DetectedSteps,
    ModificationDirective,
    PlanStep,
    RemoveStepsDirective,
    StepModificationResult,
    StepModifications,
    StepModificationsDirective,
)
from .cascade import MAX_CASCADE_DEPTH, walk_descendants
from .plan_parser import parse_attributes

logger = logging.getLogger(__name__)

_STEP_MODIFICATIONS_BLOCK = re.compile(
    r"\[\s*STEP_MODIFICATIONS\s*\]([\s\S]*?)\[\s*/\s*STEP_MODIFICATIONS\s*\]"
)
_REMOVE_STEPS_BLOCK = re.compile(r"\[\s*REMOVE_STEPS\s*\]([\s\S]*?)\[\s*/\s*REMOVE_STEPS\s*\]")
_PLAN_STEP_OPENER = re.compile(r"\[\s*PLAN_STEP\b([^\]]*)\]")
_MARKERS = ("STEP_MODIFICATIONS", "REMOVE_STEPS")


def _unique(ids: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(ids))


def _json_string_list(text: str) -> list[str] | None:
    """Decode a JSON array, keeping only its string items. None if not an array."""
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        return None
    if not isinstance(parsed, list):
        return None
    return [item for item in parsed if isinstance(item, str)]


def _parse_array_field(content: str, field_name: str) -> list[str]:
    """Parse `field: [..]` or the fallback `field: a, b` from a block body."""
    json_match = re.search(rf"{field_name}\s*:\s*(\[[^\]]*\])", content, re.IGNORECASE)
    if json_match:
        ids = _json_string_list(json_match.group(1))
        if ids is not None:
            return ids

    simple_match = re.search(rf"{field_name}\s*:\s*([^\n]+)", content, re.IGNORECASE)
    if simple_match:
        value = simple_match.group(1).strip()
        if not value.startswith("["):
            ids = [s.replace('"', "").replace("'", "").strip() for s in value.split(",")]
            return [s for s in ids if s]

    return []


def _parse_removed_list(content: str) -> list[str]:
    """Parse a REMOVE_STEPS body: a JSON array, or bullet/comma separated ids."""
    ids = _json_string_list(content)
    if ids is not None:
        return ids

    ids = []
    for line in re.split(r"[\n,]", content):
        item = re.sub(r"^[-*\s]+", "", line).replace('"', "").replace("'", "").strip()
        if item and not item.startswith(("[", "]")):
            ids.append(item)
    return ids


def parse_directives(text: str) -> list[ModificationDirective]:
    """Parse every modification directive block in the text.

    Returns:
        STEP_MODIFICATIONS directives followed by REMOVE_STEPS directives,
        each group in document order
    """
    directives: list[ModificationDirective] = []

    for match in _STEP_MODIFICATIONS_BLOCK.finditer(text):
        content = match.group(1).strip()
        directives.append(
            StepModificationsDirective(
                modified_ids=_parse_array_field(content, "modified"),
                added_ids=_parse_array_field(content, "added"),
                removed_ids=_parse_array_field(content, "removed"),
            )
        )

    for match in _REMOVE_STEPS_BLOCK.finditer(text):
        removed_ids = _parse_removed_list(match.group(1).strip())
        directives.append(RemoveStepsDirective(removed_ids=removed_ids))

    return directives


def merge_directives(directives: Iterable[ModificationDirective]) -> StepModifications:
    """Merge directives into one request, deduplicating ids in first-seen order."""
    modified: list[str] = []
    added: list[str] = []
    removed: list[str] = []

    for directive in directives:
        if isinstance(directive, StepModificationsDirective):
            modified.extend(directive.modified_ids)
            added.extend(directive.added_ids)
        removed.extend(directive.removed_ids)

    return StepModifications(
        modified_ids=_unique(modified),
        added_ids=_unique(added),
        removed_ids=_unique(removed),
    )


def validate_modifications(
    modifications: StepModifications,
    steps: Sequence[PlanStep],
    known_new_ids: Iterable[str] = (),
) -> list[str]:
    """Check a merged modification request against the current steps.

    Args:
        modifications: Merged request
        steps: Current plan steps
        known_new_ids: Ids introduced elsewhere in the same agent output

    Returns:
        Error messages, each naming the offending id. Empty if valid.
    """
    errors: list[str] = []
    existing_ids = {step.id for step in steps}
    new_ids = set(known_new_ids)
    known_ids = existing_ids | new_ids
    removed = set(modifications.removed_ids)

    for step_id in modifications.removed_ids:
        if step_id not in known_ids:
            errors.append(f'Cannot remove step "{step_id}": step does not exist in current plan')

    for step_id in modifications.modified_ids:
        if step_id not in known_ids:
            errors.append(f'Cannot modify step "{step_id}": step does not exist in current plan')

    for step_id in modifications.added_ids:
        if step_id in existing_ids and step_id not in new_ids:
            errors.append(f'Cannot add step "{step_id}": step ID already exists')
        if step_id in removed:
            errors.append(f'Step "{step_id}" cannot be both added and removed')

    for step_id in modifications.modified_ids:
        if step_id in removed:
            errors.append(f'Step "{step_id}" cannot be both modified and removed')

    return errors


def parse_modification_directives(
    text: str,
    steps: Sequence[PlanStep],
    known_new_ids: Iterable[str] | None = None,
    *,
    max_depth: int = MAX_CASCADE_DEPTH,
) -> StepModificationResult:
    """Parse, merge, validate and cascade the modification directives in text.

    Never raises on bad directives: problems are reported through
    `is_valid` and `errors` so the caller can ask the agent to re-emit them.

    Args:
        text: Agent output that may contain directive blocks
        steps: Current plan steps
        known_new_ids: Ids the caller already knows are being introduced
        max_depth: Cascade depth bound

    Returns:
        StepModificationResult; an empty valid result when no directives exist
    """
    new_ids = list(known_new_ids or ())
    modifications = merge_directives(parse_directives(text))
    errors = validate_modifications(modifications, steps, new_ids)
    cascade_ids = walk_descendants(modifications.removed_ids, steps, max_depth=max_depth)

    if errors:
        logger.info("Modification directives rejected: %s", "; ".join(errors))

    return StepModificationResult(
        modifications=modifications,
        cascade_deleted_ids=cascade_ids,
        all_removed_ids=_unique([*modifications.removed_ids, *cascade_ids]),
        is_valid=not errors,
        errors=errors,
    )


def has_step_modification_markers(text: str) -> bool:
    """Return True if the text contains any modification directive block opener."""
    return any(re.search(rf"\[\s*{marker}\s*\]", text) for marker in _MARKERS)


def detect_modified(text: str, existing_ids: Iterable[str]) -> DetectedSteps:
    """Classify the ids of PLAN_STEP blocks as modified or new.

    A referenced id is "modified" when it already exists, "new" otherwise.
    Whitespace inside the block opener is tolerated.

    Args:
        text: Agent output containing PLAN_STEP blocks
        existing_ids: Ids present in the current plan

    Returns:
        DetectedSteps with deduplicated ids in first-seen order
    """
    existing = set(existing_ids)
    modified: list[str] = []
    new: list[str] = []

    for match in _PLAN_STEP_OPENER.finditer(text):
        step_id = parse_attributes(match.group(1)).get("id")
        if not step_id:
            continue
        (modified if step_id in existing else new).append(step_id)

    return DetectedSteps(modified_ids=_unique(modified), new_ids=_unique(new))
