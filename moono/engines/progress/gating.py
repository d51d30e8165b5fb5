"""
Gating Engine - derives LOCKED / ACTIVE / COMPLETED from completion facts.

Pure functions, no I/O. Status is recomputed on every read; nothing here is
cached or persisted.

Rule (single predecessor gate), for item i of an ordered collection:
1. item i is completed            -> COMPLETED
2. i is the first item            -> ACTIVE
3. item i-1 is completed          -> ACTIVE
4. otherwise                      -> LOCKED
"""

from enum import Enum
from typing import Collection, Dict, Hashable, List, Mapping, Sequence, Union

from moono.schemas.progress import Status

CompletionLookup = Union[Mapping[Hashable, bool], Collection[Hashable]]


class UnitGatingPolicy(str, Enum):
    """How unit statuses are derived."""
    ROLLUP = "rollup"          # unit completion rolled up from its lessons
    FIRST_ONLY = "first_only"  # legacy: first unit ACTIVE, all others LOCKED


def is_completed(item_id: Hashable, completion_lookup: CompletionLookup) -> bool:
    """Whether item_id is recorded as completed in a set or id->bool mapping."""
    if isinstance(completion_lookup, Mapping):
        return bool(completion_lookup.get(item_id, False))
    return item_id in completion_lookup


def status(
    item_index: int,
    ordered_items: Sequence[Hashable],
    completion_lookup: CompletionLookup,
) -> Status:
    """
    Status of the item at item_index.

    Args:
        item_index: Position of the item in ordered_items
        ordered_items: Item ids in traversal order
        completion_lookup: Completed ids, as a set or an id -> bool mapping

    Returns:
        The derived Status

    Raises:
        IndexError: If item_index is outside ordered_items
    """
    if item_index < 0 or item_index >= len(ordered_items):
        raise IndexError(f"item index {item_index} out of range for {len(ordered_items)} items")

    if is_completed(ordered_items[item_index], completion_lookup):
        return Status.COMPLETED
    if item_index == 0:
        return Status.ACTIVE
    if is_completed(ordered_items[item_index - 1], completion_lookup):
        return Status.ACTIVE
    return Status.LOCKED


def compute_statuses(
    ordered_items: Sequence[Hashable],
    completion_lookup: CompletionLookup,
) -> List[Status]:
    """Statuses for a whole ordered collection. Empty in, empty out."""
    return [status(i, ordered_items, completion_lookup) for i in range(len(ordered_items))]


def unit_completion(
    lessons_by_unit: Mapping[Hashable, Sequence[Hashable]],
    completed_lessons: CompletionLookup,
) -> Dict[Hashable, bool]:
    """
    Roll lesson completion up to units.

    A unit is completed when it has at least one lesson and every one of its
    lessons is completed. A unit without lessons is never completed.
    """
    return {
        unit_id: bool(lesson_ids) and all(is_completed(lid, completed_lessons) for lid in lesson_ids)
        for unit_id, lesson_ids in lessons_by_unit.items()
    }


def compute_unit_statuses(
    ordered_units: Sequence[Hashable],
    lessons_by_unit: Mapping[Hashable, Sequence[Hashable]],
    completed_lessons: CompletionLookup,
    policy: UnitGatingPolicy = UnitGatingPolicy.ROLLUP,
) -> List[Status]:
    """
    Statuses for the course's units.

    ROLLUP applies the same rule as lessons, using unit completion derived
    from lesson completion. FIRST_ONLY reproduces the legacy home screen:
    the first unit is ACTIVE and every other unit LOCKED.
    """
    if policy == UnitGatingPolicy.FIRST_ONLY:
        return [Status.ACTIVE if i == 0 else Status.LOCKED for i in range(len(ordered_units))]

    rolled_up = unit_completion(
        {unit_id: lessons_by_unit.get(unit_id, []) for unit_id in ordered_units},
        completed_lessons,
    )
    return compute_statuses(ordered_units, rolled_up)
