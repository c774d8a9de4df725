"""
Gap-based fractional ordering of actions inside a list partition.

A partition is the set of active (not done) actions sharing the same list
value, "no list" included. sort_index values are spaced SORT_GAP apart so a
moved item can usually take the integer midpoint of its new neighbours; when
two neighbours are adjacent integers the whole partition is renumbered to
0, GAP, 2*GAP, ...
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Sequence

SORT_GAP = 1000


class ReorderKind(str, Enum):
    NOOP = "noop"
    MIDPOINT = "midpoint"
    HEAD = "head"          # only a next neighbour: after - GAP
    TAIL = "tail"          # only a previous neighbour: before + GAP
    REBALANCE = "rebalance"


@dataclass
class ReorderPlan:
    kind: ReorderKind
    action_id: int | None = None
    list_value: str | None = None
    sort_index: int | None = None
    # REBALANCE: partition ids in their new display order
    ordered_ids: list[int] = field(default_factory=list)


def sort_index_for_new(list_value: str | None, min_index: int | None, max_index: int | None) -> int:
    """
    Real lists append at the tail, the "no list" partition prepends at the head.
    An empty partition starts at 0.
    """
    if list_value is None:
        return 0 if min_index is None else min_index - SORT_GAP
    return 0 if max_index is None else max_index + SORT_GAP


def midpoint(before: int, after: int) -> int:
    return (before + after) // 2


def has_room_between(before: int, after: int) -> bool:
    return abs(after - before) >= 2


def rebalanced(ordered_ids: Sequence[int]) -> list[tuple[int, int]]:
    """[(id, new_sort_index), ...] for 0, GAP, 2*GAP, ..."""
    return [(action_id, index * SORT_GAP) for index, action_id in enumerate(ordered_ids)]


def move_item(items: Sequence[Any], from_index: int, to_index: int) -> list[Any]:
    result = list(items)
    item = result.pop(from_index)
    result.insert(to_index, item)
    return result


def _previous_in_partition(items: Sequence[Any], start: int, list_value: str | None) -> Any | None:
    for index in range(start, -1, -1):
        if items[index].list == list_value:
            return items[index]
    return None


def _next_in_partition(items: Sequence[Any], start: int, list_value: str | None) -> Any | None:
    for index in range(start, len(items)):
        if items[index].list == list_value:
            return items[index]
    return None


def plan_reorder(displayed: Sequence[Any], from_index: int, to_index: int) -> ReorderPlan:
    """
    Decide how to persist a drag from from_index to to_index.

    `displayed` is the sequence the user sees (objects with id, list and
    sort_index), possibly mixing partitions; neighbours are looked up in the
    moved item's partition only.
    """
    size = len(displayed)
    if size < 2 or from_index == to_index:
        return ReorderPlan(ReorderKind.NOOP)
    if not (0 <= from_index < size and 0 <= to_index < size):
        return ReorderPlan(ReorderKind.NOOP)

    reordered = move_item(displayed, from_index, to_index)
    moved = reordered[to_index]
    before = _previous_in_partition(reordered, to_index - 1, moved.list)
    after = _next_in_partition(reordered, to_index + 1, moved.list)

    if before is not None and after is not None:
        if not has_room_between(before.sort_index, after.sort_index):
            ordered_ids = [item.id for item in reordered if item.list == moved.list]
            return ReorderPlan(
                ReorderKind.REBALANCE,
                action_id=moved.id,
                list_value=moved.list,
                ordered_ids=ordered_ids,
            )
        return ReorderPlan(
            ReorderKind.MIDPOINT,
            action_id=moved.id,
            list_value=moved.list,
            sort_index=midpoint(before.sort_index, after.sort_index),
        )

    if after is not None:
        return ReorderPlan(
            ReorderKind.HEAD, action_id=moved.id, list_value=moved.list, sort_index=after.sort_index - SORT_GAP
        )

    if before is not None:
        return ReorderPlan(
            ReorderKind.TAIL, action_id=moved.id, list_value=moved.list, sort_index=before.sort_index + SORT_GAP
        )

    return ReorderPlan(ReorderKind.NOOP, action_id=moved.id, list_value=moved.list)
