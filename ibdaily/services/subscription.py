import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ibdaily.utils.time import as_utc, utcnow


class SubscriptionStatus(str, enum.Enum):
    active = "active"
    trialing = "trialing"
    past_due = "past_due"
    canceled = "canceled"
    incomplete = "incomplete"
    incomplete_expired = "incomplete_expired"
    unpaid = "unpaid"
    paused = "paused"


ENTITLED_STATUSES = frozenset({SubscriptionStatus.active, SubscriptionStatus.trialing})


@dataclass(frozen=True)
class SubscriptionSnapshot:
    status: str
    current_period_end: datetime

    @classmethod
    def from_record(cls, record: Any) -> "SubscriptionSnapshot | None":
        if record is None:
            return None
        return cls(status=record.status, current_period_end=record.current_period_end)


def parse_subscription_status(value: Any) -> SubscriptionStatus | None:
    if isinstance(value, SubscriptionStatus):
        return value
    if not isinstance(value, str):
        return None
    try:
        return SubscriptionStatus(value.strip().lower())
    except ValueError:
        return None


def is_subscription_active(snapshot: SubscriptionSnapshot | None, now: datetime | None = None) -> bool:
    if snapshot is None:
        return False

    status = parse_subscription_status(snapshot.status)
    if status not in ENTITLED_STATUSES:
        return False

    period_end = snapshot.current_period_end
    if not isinstance(period_end, datetime):
        return False

    # A stale status from a missed webhook must not outlive the paid period.
    now = as_utc(now or utcnow())
    return as_utc(period_end) > now
