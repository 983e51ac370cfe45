from uuid import UUID

from pydantic import BaseModel, Field


class NotificationPrefsResponse(BaseModel):
    is_enabled: bool
    remind_minutes_before_cutoff: int
    last_call_minutes_before_cutoff: int
    quiet_hours_start: int | None
    quiet_hours_end: int | None


class NotificationPrefsUpdate(BaseModel):
    is_enabled: bool | None = None
    remind_minutes_before_cutoff: int | None = Field(default=None, ge=1, le=720)
    last_call_minutes_before_cutoff: int | None = Field(default=None, ge=1, le=720)
    quiet_hours_start: int | None = Field(default=None, ge=0, le=23)
    quiet_hours_end: int | None = Field(default=None, ge=0, le=23)


class ReminderResult(BaseModel):
    user_id: UUID
    cohort_id: UUID
    type: str
    success: bool


class ReminderRunResponse(BaseModel):
    message: str | None = None
    date_key: str | None = None
    minutes_until_deadline: int | None = None
    candidates_found: int = 0
    sent: int = 0
    results: list[ReminderResult] = []
