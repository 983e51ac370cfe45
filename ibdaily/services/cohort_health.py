"""Cohort health metrics for owners.

Submission rates over the last week, per-member activity based on days since
the last submission, and D1/D3/D7 retention counted from each member's first
submission. All day arithmetic runs on IST date keys.
"""
import enum
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable

from sqlalchemy.orm import Session

from ibdaily.models import Cohort, CohortMember, Submission, User
from ibdaily.services.streak import compute_streak_from
from ibdaily.utils.time import as_utc, india_date, last_n_days, utcnow

ACTIVE_WITHIN_DAYS = 2
AT_RISK_WITHIN_DAYS = 6
RETENTION_DAYS = (1, 3, 7)


class MemberActivity(str, enum.Enum):
    active = "active"
    at_risk = "at_risk"
    inactive = "inactive"


# members needing attention first
ACTIVITY_ORDER = {MemberActivity.inactive: 0, MemberActivity.at_risk: 1, MemberActivity.active: 2}


@dataclass(frozen=True)
class DailyStats:
    date_key: str
    total_members: int
    submitted_count: int
    missed_count: int
    submission_rate: int


@dataclass(frozen=True)
class MemberHealth:
    user_id: uuid.UUID
    user_name: str | None
    user_email: str
    current_streak: int
    submissions_last_7_days: int
    submissions_last_30_days: int
    last_submission_date: str | None
    status: MemberActivity


@dataclass(frozen=True)
class CohortHealth:
    total_members: int
    active_members: int
    at_risk_members: int
    inactive_members: int
    today_submission_rate: int
    weekly_average_rate: int
    daily_stats: list[DailyStats]
    member_health: list[MemberHealth]
    retention: dict[int, int]


def round_half_up(numerator: int, denominator: int) -> int:
    return (2 * numerator + denominator) // (2 * denominator)


def percent(part: int, total: int) -> int:
    if total <= 0:
        return 0
    return round_half_up(100 * part, total)


def classify_activity(days_since_last: int | None) -> MemberActivity:
    if days_since_last is None or days_since_last > AT_RISK_WITHIN_DAYS:
        return MemberActivity.inactive
    if days_since_last <= ACTIVE_WITHIN_DAYS:
        return MemberActivity.active
    return MemberActivity.at_risk


def compute_retention(dates_by_user: dict[uuid.UUID, set[str]], today: date) -> dict[int, int]:
    """Share of members who submitted again N days after their first submission.

    A member only counts toward day N once that day has arrived.
    """
    retained = dict.fromkeys(RETENTION_DAYS, 0)
    eligible = dict.fromkeys(RETENTION_DAYS, 0)
    for keys in dates_by_user.values():
        if not keys:
            continue
        first = date.fromisoformat(min(keys))
        for offset in RETENTION_DAYS:
            target = first + timedelta(days=offset)
            if target > today:
                continue
            eligible[offset] += 1
            if target.isoformat() in keys:
                retained[offset] += 1
    return {offset: percent(retained[offset], eligible[offset]) for offset in RETENTION_DAYS}


def build_cohort_health(
    members: Iterable[User], submissions: Iterable[Submission], now: datetime | None = None
) -> CohortHealth:
    now = as_utc(now or utcnow())
    today = india_date(now)
    members = list(members)
    last_7 = last_n_days(7, now)
    last_30 = set(last_n_days(30, now))

    by_user: dict[uuid.UUID, dict[str, Submission]] = {}
    for submission in submissions:
        by_user.setdefault(submission.user_id, {})[submission.date_key] = submission

    daily_stats = []
    for key in last_7:
        submitted = sum(1 for member in members if key in by_user.get(member.id, {}))
        daily_stats.append(
            DailyStats(
                date_key=key,
                total_members=len(members),
                submitted_count=submitted,
                missed_count=len(members) - submitted,
                submission_rate=percent(submitted, len(members)),
            )
        )

    member_health = []
    for member in members:
        own = by_user.get(member.id, {})
        recent = sorted((key for key in own if key in last_30), reverse=True)
        last_key = recent[0] if recent else None
        days_since = (today - date.fromisoformat(last_key)).days if last_key else None
        member_health.append(
            MemberHealth(
                user_id=member.id,
                user_name=member.name,
                user_email=member.email,
                current_streak=compute_streak_from(own, now),
                submissions_last_7_days=sum(1 for key in last_7 if key in own),
                submissions_last_30_days=len(recent),
                last_submission_date=last_key,
                status=classify_activity(days_since),
            )
        )
    member_health.sort(key=lambda entry: ACTIVITY_ORDER[entry.status])

    counts = {activity: 0 for activity in MemberActivity}
    for entry in member_health:
        counts[entry.status] += 1

    retention = compute_retention(
        {member.id: set(by_user.get(member.id, {})) for member in members},
        today,
    )
    rates = [day.submission_rate for day in daily_stats]
    return CohortHealth(
        total_members=len(members),
        active_members=counts[MemberActivity.active],
        at_risk_members=counts[MemberActivity.at_risk],
        inactive_members=counts[MemberActivity.inactive],
        today_submission_rate=daily_stats[-1].submission_rate,
        weekly_average_rate=round_half_up(sum(rates), len(rates)),
        daily_stats=daily_stats,
        member_health=member_health,
        retention=retention,
    )


def compute_cohort_health(db: Session, cohort: Cohort, now: datetime | None = None) -> CohortHealth:
    members = (
        db.query(User)
        .join(CohortMember, CohortMember.user_id == User.id)
        .filter(CohortMember.cohort_id == cohort.id)
        .order_by(CohortMember.joined_at.asc())
        .all()
    )
    submissions = db.query(Submission).filter(Submission.cohort_id == cohort.id).all()
    return build_cohort_health(members, submissions, now)
