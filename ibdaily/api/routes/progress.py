import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ibdaily.api.deps import get_current_user, get_db, require_membership
from ibdaily.api.routes.submission import serialize_submission
from ibdaily.models import User
from ibdaily.schemas import (
    AtRiskResponse,
    CalendarDayOut,
    CohortRef,
    LeaderboardEntryOut,
    LeaderboardResponse,
    MeResponse,
)
from ibdaily.services.deadline import evaluate_at_risk
from ibdaily.services.streak import (
    compute_calendar_from,
    compute_leaderboard,
    compute_streak_from,
    load_submissions,
    update_best_rank,
    update_best_streak,
)
from ibdaily.services.subscription import SubscriptionSnapshot, is_subscription_active
from ibdaily.utils.time import india_date_key, time_until_deadline, utcnow

router = APIRouter(tags=["progress"])


@router.get("/me", response_model=MeResponse)
def me(cohort_id: uuid.UUID, user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> MeResponse:
    membership = require_membership(db, user, cohort_id)
    now = utcnow()
    today_key = india_date_key(now)

    submissions = load_submissions(db, user.id, cohort_id)
    streak = compute_streak_from(submissions, now)
    update_best_streak(db, membership, streak)
    today_submission = submissions.get(today_key)
    evaluation = evaluate_at_risk(now, has_submitted_today=today_submission is not None)

    return MeResponse(
        streak=streak,
        best_streak=membership.best_streak,
        best_rank=membership.best_rank,
        calendar=[
            CalendarDayOut(date_key=day.date_key, status=day.status.value)
            for day in compute_calendar_from(submissions, 30, now)
        ],
        today_key=today_key,
        today_submission=serialize_submission(today_submission) if today_submission else None,
        time_until_deadline_seconds=int(time_until_deadline(now).total_seconds()),
        at_risk=AtRiskResponse(
            minutes_remaining=evaluation.minutes_remaining,
            is_at_risk=evaluation.is_at_risk,
        ),
        subscription_active=is_subscription_active(SubscriptionSnapshot.from_record(user.subscription), now),
        cohort=CohortRef(id=membership.cohort.id, name=membership.cohort.name),
    )


@router.get("/leaderboard", response_model=LeaderboardResponse)
def leaderboard(
    cohort_id: uuid.UUID, user: User = Depends(get_current_user), db: Session = Depends(get_db)
) -> LeaderboardResponse:
    membership = require_membership(db, user, cohort_id)
    entries = compute_leaderboard(db, cohort_id)

    own = next((entry for entry in entries if entry.user_id == user.id), None)
    if own is not None:
        update_best_rank(db, membership, own.rank)

    return LeaderboardResponse(
        leaderboard=[
            LeaderboardEntryOut(
                user_id=entry.user_id,
                user_name=entry.user_name,
                current_streak=entry.current_streak,
                on_time_count_30_days=entry.on_time_count_30_days,
                latest_submission_time=entry.latest_submission_time,
                rank=entry.rank,
                tier=entry.tier.value,
            )
            for entry in entries
        ],
        cohort=CohortRef(id=membership.cohort.id, name=membership.cohort.name),
        current_user_id=user.id,
    )
