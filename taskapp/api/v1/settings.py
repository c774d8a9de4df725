"""
Settings API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from taskapp.api.deps import get_center, get_db
from taskapp.infrastructure.notifications.center import NotificationCenter
from taskapp.application.settings_service import SettingsService, SettingsValidationError


router = APIRouter(prefix="/api/v1/settings", tags=["settings"])


class ReminderTimeRequest(BaseModel):
    time: str  # HH:MM


class ReminderTimeResponse(BaseModel):
    list: str
    time: str


class DebugFeedbackRequest(BaseModel):
    enabled: bool


class DebugFeedbackResponse(BaseModel):
    enabled: bool


@router.get("", response_model=dict[str, str])
def get_settings_values(
    db: Session = Depends(get_db),
    center: NotificationCenter = Depends(get_center),
):
    return SettingsService(db, center).get_all()


@router.put("/reminder-time/{list_value}", response_model=ReminderTimeResponse)
def set_reminder_time(
    list_value: str,
    req: ReminderTimeRequest,
    db: Session = Depends(get_db),
    center: NotificationCenter = Depends(get_center),
):
    """Change a list's digest time; the digest is rescheduled right away"""
    try:
        time_of_day = SettingsService(db, center).set_reminder_time(list_value, req.time)
    except SettingsValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return ReminderTimeResponse(list=list_value, time=time_of_day)


@router.put("/debug-feedback", response_model=DebugFeedbackResponse)
def set_debug_feedback(
    req: DebugFeedbackRequest,
    db: Session = Depends(get_db),
    center: NotificationCenter = Depends(get_center),
):
    service = SettingsService(db, center)
    service.set_debug_feedback(req.enabled)
    return DebugFeedbackResponse(enabled=service.is_debug_feedback_enabled())
