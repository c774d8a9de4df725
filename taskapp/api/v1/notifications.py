"""
Notification API endpoints - the tray, button responses and the "More…" snooze screen
"""
from datetime import datetime
from typing import Any, Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, model_validator
from sqlalchemy.orm import Session

from taskapp.api.deps import get_center, get_db, get_response_handler
from taskapp.infrastructure.notifications.center import (
    NotificationCenter,
    NotificationRequest,
    UnknownNotificationError,
)
from taskapp.application.notification_responses import ResponseHandler
from taskapp.application.reminders import ReminderError
from taskapp.application.snooze import (
    SNOOZE_DURATIONS,
    SnoozeValidationError,
    snooze_notification,
    snooze_notification_to_date,
)
from taskapp.utils.clock import from_ms


router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


# === Request/Response models ===

class NotificationButton(BaseModel):
    identifier: str
    title: str
    opens_app: bool


class NotificationItem(BaseModel):
    id: str
    title: str
    body: str
    data: dict[str, Any]
    category: str | None
    actions: list[NotificationButton]
    presented_at: datetime | None = None


class ResponseRequest(BaseModel):
    action_identifier: str


class SnoozeDraftResponse(BaseModel):
    title: str
    body: str
    data: dict[str, Any]


class ResponseOutcomeResponse(BaseModel):
    status: str
    key: str
    handle: str | None = None
    draft: SnoozeDraftResponse | None = None
    feedback: str | None = None


class SnoozeRequest(BaseModel):
    title: str
    body: str
    data: dict[str, Any] = Field(default_factory=dict)
    duration: Literal["10min", "1h", "1d", "1w"] | None = None
    at: int | None = None  # epoch ms

    @model_validator(mode="after")
    def one_target(self):
        if (self.duration is None) == (self.at is None):
            raise ValueError("Provide either duration or at")
        return self


class SnoozeResponse(BaseModel):
    handle: str


# === Helper function ===

def _item(request: NotificationRequest, presented_at: datetime | None = None) -> NotificationItem:
    content = request.content
    return NotificationItem(
        id=request.identifier,
        title=content.title,
        body=content.body,
        data=content.data,
        category=content.category,
        actions=[
            NotificationButton(identifier=a.identifier, title=a.button_title, opens_app=a.opens_app)
            for a in content.actions
        ],
        presented_at=presented_at,
    )


# === Endpoints ===

@router.get("", response_model=list[NotificationItem])
def list_presented(center: NotificationCenter = Depends(get_center)):
    """Notifications currently shown (the tray)"""
    return [_item(p.request, p.presented_at) for p in center.get_presented_notifications()]


@router.get("/scheduled", response_model=list[NotificationItem])
def list_scheduled(center: NotificationCenter = Depends(get_center)):
    return [_item(request) for request in center.get_scheduled_notifications()]


@router.post("/{notification_id}/response", response_model=ResponseOutcomeResponse)
def respond(
    notification_id: str,
    req: ResponseRequest,
    center: NotificationCenter = Depends(get_center),
    handler: ResponseHandler = Depends(get_response_handler),
):
    """A button (or the body) of a presented notification was pressed"""
    try:
        center.record_response(notification_id, req.action_identifier)
    except UnknownNotificationError as exc:
        raise HTTPException(status_code=404, detail=str(exc))

    outcome = handler.handle_last_response()
    draft = None
    if outcome.draft is not None:
        draft = SnoozeDraftResponse(title=outcome.draft.title, body=outcome.draft.body, data=outcome.draft.data)
    return ResponseOutcomeResponse(
        status=outcome.status.value,
        key=outcome.key,
        handle=outcome.handle,
        draft=draft,
        feedback=outcome.feedback,
    )


@router.post("/snooze", response_model=SnoozeResponse, status_code=201)
def snooze(
    req: SnoozeRequest,
    db: Session = Depends(get_db),
    center: NotificationCenter = Depends(get_center),
):
    """Snooze from the "More…" screen: a quick duration or a date"""
    try:
        if req.duration is not None:
            handle = snooze_notification(
                db, center, req.title, req.body, req.data, SNOOZE_DURATIONS[req.duration]
            )
        else:
            handle = snooze_notification_to_date(
                db, center, req.title, req.body, req.data, from_ms(req.at, center.tz)
            )
    except SnoozeValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except ReminderError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return SnoozeResponse(handle=handle)
