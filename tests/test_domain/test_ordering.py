"""
Tests for gap-based ordering math (pure, no database)
"""
from dataclasses import dataclass

from taskapp.domain.ordering import (
    SORT_GAP,
    ReorderKind,
    has_room_between,
    midpoint,
    move_item,
    plan_reorder,
    rebalanced,
    sort_index_for_new,
)


@dataclass
class Item:
    id: int
    list: str | None
    sort_index: int


class TestNewActionPlacement:
    def test_real_list_appends_at_tail(self):
        assert sort_index_for_new("perso", -1000, 2000) == 2000 + SORT_GAP

    def test_no_list_prepends_at_head(self):
        assert sort_index_for_new(None, -1000, 2000) == -1000 - SORT_GAP

    def test_empty_partition_starts_at_zero(self):
        assert sort_index_for_new("pro", None, None) == 0
        assert sort_index_for_new(None, None, None) == 0


class TestGapHelpers:
    def test_midpoint_floors(self):
        assert midpoint(0, 1000) == 500
        assert midpoint(0, 3) == 1
        assert midpoint(-3, 0) == -2

    def test_room_needs_gap_of_two(self):
        assert has_room_between(0, 2)
        assert has_room_between(2, 0)
        assert not has_room_between(5, 6)
        assert not has_room_between(5, 5)

    def test_rebalanced_numbers_by_gap(self):
        assert rebalanced([7, 3, 9]) == [(7, 0), (3, 1000), (9, 2000)]

    def test_move_item_keeps_others_in_order(self):
        assert move_item(["a", "b", "c", "d"], 0, 2) == ["b", "c", "a", "d"]
        assert move_item(["a", "b", "c", "d"], 3, 0) == ["d", "a", "b", "c"]


class TestPlanReorder:
    def test_same_index_is_noop(self):
        items = [Item(1, "pro", 0), Item(2, "pro", 1000)]
        assert plan_reorder(items, 1, 1).kind is ReorderKind.NOOP

    def test_single_item_is_noop(self):
        assert plan_reorder([Item(1, "pro", 0)], 0, 0).kind is ReorderKind.NOOP

    def test_out_of_range_is_noop(self):
        items = [Item(1, "pro", 0), Item(2, "pro", 1000)]
        assert plan_reorder(items, 0, 5).kind is ReorderKind.NOOP
        assert plan_reorder(items, -1, 0).kind is ReorderKind.NOOP

    def test_midpoint_between_neighbours(self):
        items = [Item(1, "pro", 0), Item(2, "pro", 1000), Item(3, "pro", 2000)]
        plan = plan_reorder(items, 2, 1)
        assert plan.kind is ReorderKind.MIDPOINT
        assert plan.action_id == 3
        assert plan.sort_index == 500
        assert plan.list_value == "pro"

    def test_gap_of_two_does_not_rebalance(self):
        items = [Item(1, "pro", 0), Item(2, "pro", 2), Item(3, "pro", 5000)]
        plan = plan_reorder(items, 2, 1)
        assert plan.kind is ReorderKind.MIDPOINT
        assert plan.sort_index == 1

    def test_gap_of_one_rebalances(self):
        items = [Item(1, "pro", 0), Item(2, "pro", 1), Item(3, "pro", 5000)]
        plan = plan_reorder(items, 2, 1)
        assert plan.kind is ReorderKind.REBALANCE
        assert plan.ordered_ids == [1, 3, 2]
        assert plan.sort_index is None

    def test_move_to_head_uses_next_minus_gap(self):
        items = [Item(1, "perso", 0), Item(2, "perso", 1000)]
        plan = plan_reorder(items, 1, 0)
        assert plan.kind is ReorderKind.HEAD
        assert plan.sort_index == -1000

    def test_move_to_tail_uses_previous_plus_gap(self):
        items = [Item(1, "perso", 0), Item(2, "perso", 1000)]
        plan = plan_reorder(items, 0, 1)
        assert plan.kind is ReorderKind.TAIL
        assert plan.sort_index == 2000

    def test_neighbours_come_from_the_moved_items_partition(self):
        """Mixed display: items of other lists are skipped when looking for neighbours."""
        items = [
            Item(1, "perso", 0),
            Item(2, "pro", 0),
            Item(3, "perso", 1000),
            Item(4, "pro", 1000),
            Item(5, "perso", 2000),
        ]
        # perso #5 dropped between pro #2 and perso #3
        plan = plan_reorder(items, 4, 2)
        assert plan.kind is ReorderKind.MIDPOINT
        assert plan.sort_index == 500

    def test_alone_in_partition_is_noop(self):
        items = [Item(1, "perso", 0), Item(2, "pro", 0)]
        plan = plan_reorder(items, 0, 1)
        assert plan.kind is ReorderKind.NOOP
