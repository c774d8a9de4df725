"""Ordering engine - persists sort_index changes for actions"""
import logging
from typing import Sequence

from sqlalchemy.orm import Session

from taskapp.domain.ordering import (
    ReorderKind,
    ReorderPlan,
    plan_reorder,
    rebalanced,
    sort_index_for_new,
)
from taskapp.infrastructure.db.models import ActionModel
from taskapp.infrastructure.db.repositories import ActionRepository
from taskapp.utils.clock import now_ms

logger = logging.getLogger(__name__)


class OrderingService:
    def __init__(self, db: Session):
        self.db = db
        self.actions = ActionRepository(db)

    def compute_sort_index_for_new_action(self, list_value: str | None) -> int:
        return sort_index_for_new(
            list_value,
            self.actions.min_sort_index(list_value),
            self.actions.max_sort_index(list_value),
        )

    def rebalance(
        self,
        list_value: str | None,
        ordered_ids: Sequence[int] | None = None,
        now: int | None = None,
    ) -> list[tuple[int, int]]:
        """
        Renumber the partition's active actions to 0, GAP, 2*GAP, ... in one
        transaction. Order is the current sort order, or ordered_ids when
        given (ids outside the partition are ignored, missing ones keep their
        relative order at the end).
        """
        current = [action.id for action in self.actions.list_active_in_partition(list_value)]
        if ordered_ids is None:
            ids = current
        else:
            members = set(current)
            ids = [action_id for action_id in ordered_ids if action_id in members]
            listed = set(ids)
            ids += [action_id for action_id in current if action_id not in listed]

        if not ids:
            return []

        assignments = rebalanced(ids)
        try:
            self.actions.set_sort_indexes(assignments, now if now is not None else now_ms())
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("Rebalanced partition %s (%d actions)", list_value or "<none>", len(ids))
        return assignments

    def reorder(
        self,
        displayed: Sequence[ActionModel],
        from_index: int,
        to_index: int,
        now: int | None = None,
    ) -> ReorderPlan:
        """Persist a drag of displayed[from_index] to to_index."""
        plan = plan_reorder(displayed, from_index, to_index)

        if plan.kind is ReorderKind.NOOP:
            return plan

        if plan.kind is ReorderKind.REBALANCE:
            self.rebalance(plan.list_value, plan.ordered_ids, now=now)
            return plan

        try:
            self.actions.set_sort_indexes([(plan.action_id, plan.sort_index)], now if now is not None else now_ms())
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return plan
