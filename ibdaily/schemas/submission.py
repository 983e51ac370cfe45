from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class SubmissionRequest(BaseModel):
    cohort_id: UUID
    subject: str = Field(..., min_length=1, max_length=255)
    bullet1: str = Field(default="", max_length=1000)
    bullet2: str = Field(default="", max_length=1000)
    bullet3: str = Field(default="", max_length=1000)


class SubmissionOut(BaseModel):
    id: UUID
    date_key: str
    subject: str
    bullet1: str
    bullet2: str
    bullet3: str
    quality_status: str
    quality_reasons: list[str]
    created_at: datetime
    on_time: bool


class TodaySubmissionResponse(BaseModel):
    today_key: str
    submission: SubmissionOut | None
    cohort_status: str
    can_submit: bool
    lock_reason: str | None = None


class SubmissionSavedResponse(BaseModel):
    submission: SubmissionOut
    quality_status: str
    quality_reasons: list[str]
