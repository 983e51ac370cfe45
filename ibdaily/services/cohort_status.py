"""Trial / activation state of a cohort.

A cohort starts in a 14 day trial. It activates permanently once enough of its
members hold a paid subscription, and locks when the trial runs out first.
Locked cohorts cannot accept submissions.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from ibdaily.models.cohort import CohortStatus
from ibdaily.utils.time import as_utc, utcnow

ACTIVATION_THRESHOLD = 6
TRIAL_DAYS = 14
COUNTER_VISIBILITY_THRESHOLD = 4


@dataclass(frozen=True)
class CohortStatusInfo:
    status: CohortStatus
    trial_ends_at: datetime
    activated_at: datetime | None
    paid_count: int
    member_count: int
    is_trial_expired: bool
    days_until_trial_end: int
    show_activation_counter: bool
    can_submit: bool


def compute_cohort_status(
    current_status: CohortStatus,
    trial_ends_at: datetime,
    activated_at: datetime | None,
    paid_count: int,
    member_count: int,
    now: datetime | None = None,
) -> CohortStatusInfo:
    now = as_utc(now or utcnow())
    trial_ends_at = as_utc(trial_ends_at)
    is_trial_expired = now > trial_ends_at
    days_left = math.ceil((trial_ends_at - now) / timedelta(days=1))

    if current_status == CohortStatus.active or activated_at is not None:
        status = CohortStatus.active
    elif paid_count >= ACTIVATION_THRESHOLD:
        status = CohortStatus.active
    elif is_trial_expired:
        status = CohortStatus.locked
    else:
        status = CohortStatus.trial

    return CohortStatusInfo(
        status=status,
        trial_ends_at=trial_ends_at,
        activated_at=activated_at,
        paid_count=paid_count,
        member_count=member_count,
        is_trial_expired=is_trial_expired,
        days_until_trial_end=max(0, days_left),
        show_activation_counter=paid_count >= COUNTER_VISIBILITY_THRESHOLD,
        can_submit=status != CohortStatus.locked,
    )


def compute_trial_end_date(created_at: datetime) -> datetime:
    return created_at + timedelta(days=TRIAL_DAYS)


def format_days_remaining(days: int) -> str:
    if days == 0:
        return "Trial ends today"
    if days == 1:
        return "1 day left in trial"
    return f"{days} days left in trial"


def activation_counter_text(paid_count: int) -> str | None:
    if paid_count < COUNTER_VISIBILITY_THRESHOLD:
        return None
    return f"Activation: {paid_count}/{ACTIVATION_THRESHOLD}"
