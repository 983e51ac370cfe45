from dataclasses import dataclass
from datetime import datetime, timedelta

from ibdaily.utils.time import as_utc, india_cutoff, india_date, utcnow

WARNING_WINDOW_MINUTES = 60


@dataclass(frozen=True)
class AtRiskEvaluation:
    minutes_remaining: int | None
    is_at_risk: bool


def minutes_remaining_before_cutoff(now: datetime | None = None) -> int | None:
    """Whole minutes left until today's cutoff, or None outside the warning window.

    The difference is floored to whole minutes first, so the window is closed at
    60 minutes and the last partial minute before the cutoff is already outside.
    """
    now = as_utc(now or utcnow())
    try:
        minutes = (india_cutoff(india_date(now)) - now) // timedelta(minutes=1)
    except OverflowError:
        # IST date falls outside the datetime range
        return None
    if minutes <= 0 or minutes > WARNING_WINDOW_MINUTES:
        return None
    return minutes


def evaluate_at_risk(now: datetime | None = None, has_submitted_today: bool = False) -> AtRiskEvaluation:
    minutes_remaining = minutes_remaining_before_cutoff(now)
    return AtRiskEvaluation(
        minutes_remaining=minutes_remaining,
        is_at_risk=not has_submitted_today and minutes_remaining is not None,
    )
