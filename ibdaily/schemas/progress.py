from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from ibdaily.schemas.submission import SubmissionOut


class AtRiskResponse(BaseModel):
    minutes_remaining: int | None
    is_at_risk: bool


class DeadlineResponse(BaseModel):
    today_key: str
    cutoff: datetime
    time_until_deadline_seconds: int
    time_until_deadline: str
    at_risk: AtRiskResponse
    server_time: datetime


class CalendarDayOut(BaseModel):
    date_key: str
    status: str


class CohortRef(BaseModel):
    id: UUID
    name: str


class MeResponse(BaseModel):
    streak: int
    best_streak: int
    best_rank: int | None
    calendar: list[CalendarDayOut]
    today_key: str
    today_submission: SubmissionOut | None
    time_until_deadline_seconds: int
    at_risk: AtRiskResponse
    subscription_active: bool
    cohort: CohortRef


class LeaderboardEntryOut(BaseModel):
    user_id: UUID
    user_name: str | None
    current_streak: int
    on_time_count_30_days: int
    latest_submission_time: datetime | None
    rank: int
    tier: str


class LeaderboardResponse(BaseModel):
    leaderboard: list[LeaderboardEntryOut]
    cohort: CohortRef
    current_user_id: UUID
