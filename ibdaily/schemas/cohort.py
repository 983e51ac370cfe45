from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class CohortCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class CohortJoinRequest(BaseModel):
    join_code: str = Field(..., min_length=1, max_length=16)


class CohortStatusResponse(BaseModel):
    cohort_id: UUID
    cohort_name: str
    status: str
    trial_ends_at: datetime
    activated_at: datetime | None
    paid_count: int
    member_count: int
    is_trial_expired: bool
    days_until_trial_end: int
    days_remaining_text: str
    show_activation_counter: bool
    activation_counter_text: str | None
    can_submit: bool


class CohortResponse(BaseModel):
    id: UUID
    name: str
    join_code: str
    status: str
    trial_ends_at: datetime
    member_count: int | None = None
    role: str | None = None
    joined_at: datetime | None = None
    is_active: bool = False
    already_member: bool = False


class CohortListResponse(BaseModel):
    cohorts: list[CohortResponse]
    active_cohort_id: UUID | None
    active_cohort_status: CohortStatusResponse | None


class DailyStatsOut(BaseModel):
    date_key: str
    total_members: int
    submitted_count: int
    missed_count: int
    submission_rate: int


class MemberHealthOut(BaseModel):
    user_id: UUID
    user_name: str | None
    user_email: str
    current_streak: int
    submissions_last_7_days: int
    submissions_last_30_days: int
    last_submission_date: str | None
    status: str


class RetentionOut(BaseModel):
    d1: int
    d3: int
    d7: int


class CohortHealthResponse(BaseModel):
    cohort_id: UUID
    cohort_name: str
    total_members: int
    active_members: int
    at_risk_members: int
    inactive_members: int
    today_submission_rate: int
    weekly_average_rate: int
    daily_stats: list[DailyStatsOut]
    member_health: list[MemberHealthOut]
    retention: RetentionOut
