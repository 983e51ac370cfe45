from fastapi import APIRouter

from ibdaily.schemas import AtRiskResponse, DeadlineResponse
from ibdaily.services.deadline import evaluate_at_risk
from ibdaily.utils.time import format_time_remaining, india_cutoff, india_date, time_until_deadline, utcnow

router = APIRouter(tags=["deadline"])


@router.get("/deadline", response_model=DeadlineResponse)
def deadline(submitted_today: bool = False) -> DeadlineResponse:
    """Snapshot of today's cutoff; clients poll this about once a minute."""
    now = utcnow()
    today = india_date(now)
    remaining = time_until_deadline(now)
    evaluation = evaluate_at_risk(now, submitted_today)
    return DeadlineResponse(
        today_key=today.isoformat(),
        cutoff=india_cutoff(today),
        time_until_deadline_seconds=int(remaining.total_seconds()),
        time_until_deadline=format_time_remaining(remaining),
        at_risk=AtRiskResponse(
            minutes_remaining=evaluation.minutes_remaining,
            is_at_risk=evaluation.is_at_risk,
        ),
        server_time=now,
    )
