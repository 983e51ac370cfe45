"""Clock and IST calendar helpers.

All deadline math runs against a fixed +05:30 offset so the daily cutoff does
not depend on the host timezone.
"""
from datetime import date, datetime, time, timedelta, timezone

IST = timezone(timedelta(hours=5, minutes=30), "IST")
DEADLINE_HOUR = 21


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Read naive datetimes as UTC; some backends drop tzinfo on the way out."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def india_date(now: datetime | None = None) -> date:
    now = as_utc(now or utcnow())
    return now.astimezone(IST).date()


def india_date_key(now: datetime | None = None) -> str:
    return india_date(now).isoformat()


def yesterday_date_key(now: datetime | None = None) -> str:
    return (india_date(now) - timedelta(days=1)).isoformat()


def india_weekday(now: datetime | None = None) -> int:
    """Day of week in IST, 0=Sunday through 6=Saturday."""
    return (india_date(now).weekday() + 1) % 7


def week_start_date_key(now: datetime | None = None) -> str:
    today = india_date(now)
    return (today - timedelta(days=today.weekday())).isoformat()


def week_end_date_key(now: datetime | None = None) -> str:
    today = india_date(now)
    return (today + timedelta(days=6 - today.weekday())).isoformat()


def is_same_week(first: datetime, second: datetime) -> bool:
    return week_start_date_key(first) == week_start_date_key(second)


def india_cutoff(date_key: str | date) -> datetime:
    day = date.fromisoformat(date_key) if isinstance(date_key, str) else date_key
    return datetime.combine(day, time(DEADLINE_HOUR), tzinfo=IST)


def compute_on_time(created_at: datetime, date_key: str) -> bool:
    return as_utc(created_at) <= india_cutoff(date_key)


def time_until_deadline(now: datetime | None = None) -> timedelta:
    now = as_utc(now or utcnow())
    remaining = india_cutoff(india_date(now)) - now
    return max(remaining, timedelta(0))


def is_deadline_passed(now: datetime | None = None) -> bool:
    return time_until_deadline(now) == timedelta(0)


def format_time_remaining(remaining: timedelta) -> str:
    total_seconds = int(remaining.total_seconds())
    if total_seconds <= 0:
        return "00:00:00"
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def last_n_days(n: int, now: datetime | None = None) -> list[str]:
    today = india_date(now)
    return [(today - timedelta(days=offset)).isoformat() for offset in range(n - 1, -1, -1)]
