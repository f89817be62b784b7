"""Cascade deletion through parent/child step links.

Parent links come from free text with no schema enforcement, so the
traversal never trusts them to form a tree: it tracks visited ids and
stops at a depth bound.
"""

import logging
from collections import deque
from collections.abc import Iterable

from ..models import PlanStep

logger = logging.getLogger(__name__)

MAX_CASCADE_DEPTH = 100


def build_children_index(steps: Iterable[PlanStep]) -> dict[str, list[str]]:
    """Map each parent id to the ids of its direct children, in step order."""
    children: dict[str, list[str]] = {}
    for step in steps:
        if step.parent_id:
            children.setdefault(step.parent_id, []).append(step.id)
    return children


def walk_descendants(
    root_ids: Iterable[str],
    steps: Iterable[PlanStep],
    *,
    max_depth: int = MAX_CASCADE_DEPTH,
) -> list[str]:
    """Collect descendants of the roots in breadth-first discovery order.

    Args:
        root_ids: Ids of the steps being removed
        steps: All steps of the plan
        max_depth: Levels below a root to follow before giving up

    Returns:
        Descendant ids, excluding the roots themselves
    """
    roots = list(dict.fromkeys(root_ids))
    root_set = set(roots)
    children = build_children_index(steps)

    visited: set[str] = set(roots)
    found: list[str] = []
    queue: deque[tuple[str, int]] = deque((root, 0) for root in roots)

    while queue:
        step_id, depth = queue.popleft()
        if depth >= max_depth:
            logger.warning(
                "Cascade depth limit (%d) reached at step %r; plan structure may be malformed",
                max_depth,
                step_id,
            )
            continue

        for child_id in children.get(step_id, []):
            if child_id in visited:
                if child_id not in root_set:
                    logger.warning("Step %r reached twice; parent links are malformed", child_id)
                continue
            visited.add(child_id)
            found.append(child_id)
            queue.append((child_id, depth + 1))

    return found


def cascade_descendants(
    root_ids: Iterable[str],
    steps: Iterable[PlanStep],
    *,
    max_depth: int = MAX_CASCADE_DEPTH,
) -> set[str]:
    """Return every transitive descendant of the given root steps.

    Roots are never included, even when one root descends from another.
    Cycles in parent links are tolerated and terminate the walk.
    """
    return set(walk_descendants(root_ids, steps, max_depth=max_depth))
