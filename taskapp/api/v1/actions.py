"""
Action API endpoints
"""
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.orm import Session

from taskapp.api.deps import get_center, get_db
from taskapp.domain.action import ActionValidationError
from taskapp.domain.reminder import ReminderSpecValidationError
from taskapp.infrastructure.notifications.center import NotificationCenter
from taskapp.application.actions_usecases import (
    ActionNotFoundError,
    CompleteActionUseCase,
    CreateActionUseCase,
    DeleteActionUseCase,
    ReorderActionsUseCase,
    UpdateActionUseCase,
    get_action_or_raise,
    list_active_actions,
)
from taskapp.application.ordering_service import OrderingService


router = APIRouter(prefix="/api/v1/actions", tags=["actions"])


# === Request/Response models ===

class ActionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    list_value: Literal["perso", "pro"] | None = Field(default=None, alias="list")
    reminder_type: Literal["none", "once", "daily", "weekly", "monthly"] = "none"
    reminder_date: int | None = None  # epoch ms
    reminder_time: str | None = None  # HH:MM
    reminder_weekday: int | None = None  # 1=Mon..7=Sun
    reminder_monthday: int | None = None

    @field_validator("list_value", mode="before")
    @classmethod
    def empty_list_is_none(cls, v):
        return v or None


class ActionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    list: str | None
    sort_index: int
    is_done: bool
    created_at: int
    updated_at: int
    reminder_type: str
    reminder_date: int | None
    reminder_time: str | None
    reminder_weekday: int | None
    reminder_monthday: int | None


class ReorderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_index: int
    to_index: int
    list_filter: Literal["perso", "pro", "none"] | None = Field(default=None, alias="list")  # None = all lists


class ReorderResponse(BaseModel):
    kind: str
    action_id: int | None
    sort_index: int | None


class RebalanceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    list_filter: Literal["perso", "pro", "none"] = Field(alias="list")
    ordered_ids: list[int] | None = None


class RebalanceResponse(BaseModel):
    assignments: dict[int, int] = Field(default_factory=dict)


# === Helper function ===

def _raise_http(exc: ActionValidationError | ReminderSpecValidationError):
    if isinstance(exc, ActionNotFoundError):
        raise HTTPException(status_code=404, detail=str(exc))
    raise HTTPException(status_code=400, detail=str(exc))


def _reminder_fields(req: ActionRequest) -> dict:
    return dict(
        reminder_type=req.reminder_type,
        reminder_date=req.reminder_date,
        reminder_time=req.reminder_time,
        reminder_weekday=req.reminder_weekday,
        reminder_monthday=req.reminder_monthday,
    )


# === Endpoints ===

@router.get("", response_model=list[ActionResponse])
def list_actions(
    list_filter: Literal["perso", "pro", "none"] | None = Query(default=None, alias="list"),
    db: Session = Depends(get_db),
):
    """Active actions in display order, optionally for one list"""
    return list_active_actions(db, list_filter)


@router.post("", response_model=ActionResponse, status_code=201)
def create_action(
    req: ActionRequest,
    db: Session = Depends(get_db),
    center: NotificationCenter = Depends(get_center),
):
    try:
        return CreateActionUseCase(db, center).execute(
            title=req.title, list_value=req.list_value, **_reminder_fields(req)
        )
    except (ActionValidationError, ReminderSpecValidationError) as exc:
        _raise_http(exc)


@router.post("/reorder", response_model=ReorderResponse)
def reorder_actions(
    req: ReorderRequest,
    db: Session = Depends(get_db),
    center: NotificationCenter = Depends(get_center),
):
    """Drag displayed[from_index] to to_index within the displayed (filtered) list"""
    plan = ReorderActionsUseCase(db, center).execute(req.from_index, req.to_index, list_filter=req.list_filter)
    return ReorderResponse(kind=plan.kind.value, action_id=plan.action_id, sort_index=plan.sort_index)


@router.post("/rebalance", response_model=RebalanceResponse)
def rebalance_actions(req: RebalanceRequest, db: Session = Depends(get_db)):
    list_value = None if req.list_filter == "none" else req.list_filter
    assignments = OrderingService(db).rebalance(list_value, req.ordered_ids)
    return RebalanceResponse(assignments=dict(assignments))


@router.get("/{action_id}", response_model=ActionResponse)
def get_action(action_id: int, db: Session = Depends(get_db)):
    try:
        return get_action_or_raise(db, action_id)
    except ActionNotFoundError as exc:
        _raise_http(exc)


@router.patch("/{action_id}", response_model=ActionResponse)
def update_action(
    action_id: int,
    req: ActionRequest,
    db: Session = Depends(get_db),
    center: NotificationCenter = Depends(get_center),
):
    """Replace title, list and reminder of an active action"""
    try:
        return UpdateActionUseCase(db, center).execute(
            action_id, title=req.title, list_value=req.list_value, **_reminder_fields(req)
        )
    except (ActionValidationError, ReminderSpecValidationError) as exc:
        _raise_http(exc)


@router.post("/{action_id}/complete", response_model=ActionResponse)
def complete_action(
    action_id: int,
    db: Session = Depends(get_db),
    center: NotificationCenter = Depends(get_center),
):
    try:
        return CompleteActionUseCase(db, center).execute(action_id)
    except ActionValidationError as exc:
        _raise_http(exc)


@router.delete("/{action_id}", status_code=204)
def delete_action(
    action_id: int,
    db: Session = Depends(get_db),
    center: NotificationCenter = Depends(get_center),
):
    try:
        DeleteActionUseCase(db, center).execute(action_id)
    except ActionValidationError as exc:
        _raise_http(exc)
