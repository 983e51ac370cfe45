from dataclasses import dataclass
from datetime import datetime, timedelta

from ibdaily.models.notification_prefs import DEFAULT_LAST_CALL_MINUTES, DEFAULT_REMIND_MINUTES
from ibdaily.models.reminder_log import ReminderType
from ibdaily.utils.time import IST, as_utc, india_cutoff, india_date, utcnow

WINDOW_TOLERANCE_MINUTES = 5


@dataclass(frozen=True)
class ReminderPrefs:
    is_enabled: bool = True
    remind_minutes_before_cutoff: int = DEFAULT_REMIND_MINUTES
    last_call_minutes_before_cutoff: int = DEFAULT_LAST_CALL_MINUTES
    quiet_hours_start: int | None = None
    quiet_hours_end: int | None = None

    @classmethod
    def from_record(cls, record) -> "ReminderPrefs":
        if record is None:
            return cls()
        return cls(
            is_enabled=record.is_enabled,
            remind_minutes_before_cutoff=record.remind_minutes_before_cutoff,
            last_call_minutes_before_cutoff=record.last_call_minutes_before_cutoff,
            quiet_hours_start=record.quiet_hours_start,
            quiet_hours_end=record.quiet_hours_end,
        )


@dataclass(frozen=True)
class ReminderWindow:
    type: ReminderType
    minutes_until_deadline: int


def minutes_until_deadline(now: datetime | None = None) -> int:
    """Floor minutes until today's cutoff; negative once it has passed."""
    now = as_utc(now or utcnow())
    return (india_cutoff(india_date(now)) - now) // timedelta(minutes=1)


def current_hour_ist(now: datetime | None = None) -> int:
    return as_utc(now or utcnow()).astimezone(IST).hour


def is_in_quiet_hours(quiet_start: int | None, quiet_end: int | None, now: datetime | None = None) -> bool:
    if quiet_start is None or quiet_end is None:
        return False

    hour = current_hour_ist(now)
    if quiet_start > quiet_end:
        # wraps midnight, e.g. 22 -> 7
        return hour >= quiet_start or hour < quiet_end
    return quiet_start <= hour < quiet_end


def _within(minutes_left: int, target: int) -> bool:
    return target - WINDOW_TOLERANCE_MINUTES <= minutes_left <= target + WINDOW_TOLERANCE_MINUTES


def check_reminder_window(
    remind_minutes: int,
    last_call_minutes: int,
    now: datetime | None = None,
) -> ReminderWindow | None:
    minutes_left = minutes_until_deadline(now)
    if minutes_left <= 0:
        return None

    if _within(minutes_left, last_call_minutes):
        return ReminderWindow(type=ReminderType.last_call, minutes_until_deadline=minutes_left)
    if _within(minutes_left, remind_minutes):
        return ReminderWindow(type=ReminderType.remind, minutes_until_deadline=minutes_left)
    return None


def should_send_reminder(
    has_submitted_today: bool,
    prefs: ReminderPrefs,
    already_sent: set[ReminderType] | frozenset[ReminderType] = frozenset(),
    now: datetime | None = None,
) -> ReminderType | None:
    now = as_utc(now or utcnow())

    if has_submitted_today or not prefs.is_enabled:
        return None
    if is_in_quiet_hours(prefs.quiet_hours_start, prefs.quiet_hours_end, now):
        return None

    window = check_reminder_window(
        prefs.remind_minutes_before_cutoff,
        prefs.last_call_minutes_before_cutoff,
        now=now,
    )
    if window is None or window.type in already_sent:
        return None
    return window.type
