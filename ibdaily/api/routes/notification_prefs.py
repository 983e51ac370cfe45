from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ibdaily.api.deps import get_current_user, get_db
from ibdaily.models import NotificationPrefs, User
from ibdaily.schemas import NotificationPrefsResponse, NotificationPrefsUpdate
from ibdaily.services.reminders import ReminderPrefs

router = APIRouter(prefix="/notification-prefs", tags=["notifications"])


def serialize_prefs(prefs: ReminderPrefs) -> NotificationPrefsResponse:
    return NotificationPrefsResponse(
        is_enabled=prefs.is_enabled,
        remind_minutes_before_cutoff=prefs.remind_minutes_before_cutoff,
        last_call_minutes_before_cutoff=prefs.last_call_minutes_before_cutoff,
        quiet_hours_start=prefs.quiet_hours_start,
        quiet_hours_end=prefs.quiet_hours_end,
    )


@router.get("", response_model=NotificationPrefsResponse)
def get_prefs(user: User = Depends(get_current_user)) -> NotificationPrefsResponse:
    return serialize_prefs(ReminderPrefs.from_record(user.notification_prefs))


@router.put("", response_model=NotificationPrefsResponse)
def update_prefs(
    payload: NotificationPrefsUpdate, user: User = Depends(get_current_user), db: Session = Depends(get_db)
) -> NotificationPrefsResponse:
    if (payload.quiet_hours_start is None) != (payload.quiet_hours_end is None):
        raise HTTPException(
            status_code=400,
            detail="Both quiet hours start and end must be set, or both must be null",
        )

    prefs = user.notification_prefs
    if prefs is None:
        prefs = NotificationPrefs(user_id=user.id)
        db.add(prefs)

    for field in ("is_enabled", "remind_minutes_before_cutoff", "last_call_minutes_before_cutoff"):
        value = getattr(payload, field)
        if value is not None:
            setattr(prefs, field, value)
    if {"quiet_hours_start", "quiet_hours_end"} & payload.model_fields_set:
        prefs.quiet_hours_start = payload.quiet_hours_start
        prefs.quiet_hours_end = payload.quiet_hours_end

    db.commit()
    db.refresh(prefs)
    return serialize_prefs(ReminderPrefs.from_record(prefs))
