import enum
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Mapping

from sqlalchemy.orm import Session

from ibdaily.models import CohortMember, QualityStatus, Submission, User
from ibdaily.utils.time import as_utc, compute_on_time, india_cutoff, india_date, last_n_days, utcnow

LEADERBOARD_WINDOW_DAYS = 30


class DayStatus(str, enum.Enum):
    on_time = "on_time"
    late = "late"
    missed = "missed"


class LeaderboardTier(str, enum.Enum):
    top = "TOP"
    middle = "MIDDLE"
    catching_up = "CATCHING_UP"


@dataclass(frozen=True)
class CalendarDay:
    date_key: str
    status: DayStatus


@dataclass
class LeaderboardEntry:
    user_id: uuid.UUID
    user_name: str | None
    user_email: str
    current_streak: int
    on_time_count_30_days: int
    latest_submission_time: datetime | None
    rank: int = 0
    tier: LeaderboardTier = LeaderboardTier.top


def compute_streak_from(submissions: Mapping[str, Submission], now: datetime | None = None) -> int:
    """Consecutive on-time days counted backward from today (IST).

    Today only counts once submitted; before the cutoff a missing submission
    today does not break the streak yet.
    """
    now = as_utc(now or utcnow())
    today = india_date(now)
    today_key = today.isoformat()

    if today_key not in submissions:
        if now > india_cutoff(today):
            return 0
        day = today - timedelta(days=1)
    else:
        day = today

    streak = 0
    while True:
        key = day.isoformat()
        submission = submissions.get(key)
        if submission is None or not compute_on_time(submission.created_at, key):
            return streak
        streak += 1
        day -= timedelta(days=1)


def compute_calendar_from(
    submissions: Mapping[str, Submission], days: int = 30, now: datetime | None = None
) -> list[CalendarDay]:
    calendar = []
    for key in last_n_days(days, now):
        submission = submissions.get(key)
        if submission is None:
            status = DayStatus.missed
        elif compute_on_time(submission.created_at, key):
            status = DayStatus.on_time
        else:
            status = DayStatus.late
        calendar.append(CalendarDay(date_key=key, status=status))
    return calendar


def calculate_tier(rank: int, total: int) -> LeaderboardTier:
    if total <= 2:
        return LeaderboardTier.top
    percentile = rank / total
    if percentile <= 0.2:
        return LeaderboardTier.top
    if percentile <= 0.8:
        return LeaderboardTier.middle
    return LeaderboardTier.catching_up


def _sort_key(entry: LeaderboardEntry) -> tuple:
    latest = entry.latest_submission_time
    # members who never submitted sort after everyone with a submission time
    return (
        -entry.current_streak,
        -entry.on_time_count_30_days,
        latest is None,
        as_utc(latest).timestamp() if latest else 0.0,
    )


def rank_entries(entries: Iterable[LeaderboardEntry]) -> list[LeaderboardEntry]:
    ranked = sorted(entries, key=_sort_key)
    total = len(ranked)
    for index, entry in enumerate(ranked, start=1):
        entry.rank = index
        entry.tier = calculate_tier(index, total)
    return ranked


def build_leaderboard(
    members: Iterable[tuple[User, list[Submission]]], now: datetime | None = None
) -> list[LeaderboardEntry]:
    now = as_utc(now or utcnow())
    entries = []
    for user, submissions in members:
        by_key = {submission.date_key: submission for submission in submissions}
        on_time_good = sum(
            1
            for submission in submissions
            if compute_on_time(submission.created_at, submission.date_key)
            and submission.quality_status == QualityStatus.good
        )
        latest = max((submission.created_at for submission in submissions), key=as_utc, default=None)
        entries.append(
            LeaderboardEntry(
                user_id=user.id,
                user_name=user.name,
                user_email=user.email,
                current_streak=compute_streak_from(by_key, now),
                on_time_count_30_days=on_time_good,
                latest_submission_time=latest,
            )
        )
    return rank_entries(entries)


def load_submissions(db: Session, user_id: uuid.UUID, cohort_id: uuid.UUID) -> dict[str, Submission]:
    submissions = (
        db.query(Submission)
        .filter(Submission.user_id == user_id, Submission.cohort_id == cohort_id)
        .all()
    )
    return {submission.date_key: submission for submission in submissions}


def compute_leaderboard(db: Session, cohort_id: uuid.UUID, now: datetime | None = None) -> list[LeaderboardEntry]:
    window = last_n_days(LEADERBOARD_WINDOW_DAYS, now)
    members = (
        db.query(CohortMember)
        .filter(CohortMember.cohort_id == cohort_id)
        .all()
    )
    submissions = (
        db.query(Submission)
        .filter(Submission.cohort_id == cohort_id, Submission.date_key.in_(window))
        .all()
    )
    by_user: dict[uuid.UUID, list[Submission]] = {}
    for submission in submissions:
        by_user.setdefault(submission.user_id, []).append(submission)
    return build_leaderboard(((member.user, by_user.get(member.user_id, [])) for member in members), now)


def update_best_streak(db: Session, membership: CohortMember, current_streak: int) -> bool:
    if current_streak <= membership.best_streak:
        return False
    membership.best_streak = current_streak
    db.commit()
    return True


def update_best_rank(db: Session, membership: CohortMember, current_rank: int) -> bool:
    # lower is better
    if membership.best_rank is not None and current_rank >= membership.best_rank:
        return False
    membership.best_rank = current_rank
    db.commit()
    return True
