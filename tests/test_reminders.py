from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from ibdaily.models import ReminderType
from ibdaily.services.reminders import (
    ReminderPrefs,
    check_reminder_window,
    is_in_quiet_hours,
    minutes_until_deadline,
    should_send_reminder,
)
from ibdaily.utils.time import IST

CUTOFF = datetime(2026, 3, 2, 15, 30, tzinfo=timezone.utc)


def before_cutoff(minutes: int) -> datetime:
    return CUTOFF - timedelta(minutes=minutes)


def test_minutes_until_deadline():
    assert minutes_until_deadline(before_cutoff(90)) == 90
    assert minutes_until_deadline(CUTOFF + timedelta(minutes=10)) == -10


def test_default_prefs():
    prefs = ReminderPrefs.from_record(None)

    assert prefs.is_enabled is True
    assert prefs.remind_minutes_before_cutoff == 90
    assert prefs.last_call_minutes_before_cutoff == 15
    assert prefs.quiet_hours_start is None


def test_prefs_from_record():
    record = SimpleNamespace(
        is_enabled=False,
        remind_minutes_before_cutoff=120,
        last_call_minutes_before_cutoff=10,
        quiet_hours_start=22,
        quiet_hours_end=7,
    )

    assert ReminderPrefs.from_record(record) == ReminderPrefs(False, 120, 10, 22, 7)


def test_window_tolerance():
    assert check_reminder_window(90, 15, before_cutoff(95)).type == ReminderType.remind
    assert check_reminder_window(90, 15, before_cutoff(85)).type == ReminderType.remind
    assert check_reminder_window(90, 15, before_cutoff(96)) is None
    assert check_reminder_window(90, 15, before_cutoff(84)) is None
    assert check_reminder_window(90, 15, before_cutoff(20)).type == ReminderType.last_call
    assert check_reminder_window(90, 15, before_cutoff(10)).type == ReminderType.last_call


def test_last_call_wins_when_windows_overlap():
    window = check_reminder_window(20, 15, before_cutoff(17))

    assert window.type == ReminderType.last_call
    assert window.minutes_until_deadline == 17


def test_no_window_after_cutoff():
    assert check_reminder_window(90, 15, CUTOFF) is None
    assert check_reminder_window(90, 15, CUTOFF + timedelta(minutes=5)) is None


def test_quiet_hours_same_day():
    assert is_in_quiet_hours(13, 17, datetime(2026, 3, 2, 14, 0, tzinfo=IST)) is True
    assert is_in_quiet_hours(13, 17, datetime(2026, 3, 2, 17, 0, tzinfo=IST)) is False


def test_quiet_hours_wrapping_midnight():
    assert is_in_quiet_hours(22, 7, datetime(2026, 3, 2, 23, 0, tzinfo=IST)) is True
    assert is_in_quiet_hours(22, 7, datetime(2026, 3, 2, 3, 0, tzinfo=IST)) is True
    assert is_in_quiet_hours(22, 7, datetime(2026, 3, 2, 19, 0, tzinfo=IST)) is False


def test_quiet_hours_need_both_ends():
    assert is_in_quiet_hours(None, 7, datetime(2026, 3, 2, 3, 0, tzinfo=IST)) is False


def test_should_send_remind():
    assert should_send_reminder(False, ReminderPrefs(), now=before_cutoff(90)) == ReminderType.remind


def test_should_send_skips_submitted_or_disabled():
    now = before_cutoff(90)

    assert should_send_reminder(True, ReminderPrefs(), now=now) is None
    assert should_send_reminder(False, ReminderPrefs(is_enabled=False), now=now) is None


def test_should_send_skips_quiet_hours():
    # 19:30 IST
    prefs = ReminderPrefs(quiet_hours_start=19, quiet_hours_end=20)

    assert should_send_reminder(False, prefs, now=before_cutoff(90)) is None


def test_should_send_skips_already_sent_type():
    now = before_cutoff(15)

    assert should_send_reminder(False, ReminderPrefs(), {ReminderType.last_call}, now) is None
    assert should_send_reminder(False, ReminderPrefs(), {ReminderType.remind}, now) == ReminderType.last_call
