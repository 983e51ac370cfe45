from datetime import datetime, timedelta, timezone

from ibdaily.services.deadline import AtRiskEvaluation, evaluate_at_risk, minutes_remaining_before_cutoff
from ibdaily.utils.time import IST

# 21:00 IST on 2026-03-02 is 15:30 UTC
CUTOFF = datetime(2026, 3, 2, 15, 30, tzinfo=timezone.utc)


def test_thirty_minutes_before_cutoff():
    evaluation = evaluate_at_risk(CUTOFF - timedelta(minutes=30), has_submitted_today=False)

    assert evaluation == AtRiskEvaluation(minutes_remaining=30, is_at_risk=True)


def test_sixty_minutes_before_cutoff_is_inside_window():
    evaluation = evaluate_at_risk(CUTOFF - timedelta(minutes=60))

    assert evaluation.minutes_remaining == 60
    assert evaluation.is_at_risk is True


def test_sixty_one_minutes_before_cutoff_is_outside_window():
    evaluation = evaluate_at_risk(CUTOFF - timedelta(minutes=61))

    assert evaluation.minutes_remaining is None
    assert evaluation.is_at_risk is False


def test_partial_minute_past_sixty_is_floored_into_window():
    assert minutes_remaining_before_cutoff(CUTOFF - timedelta(minutes=60, seconds=59)) == 60
    assert minutes_remaining_before_cutoff(CUTOFF - timedelta(minutes=61)) is None


def test_exactly_at_cutoff_is_excluded():
    assert evaluate_at_risk(CUTOFF) == AtRiskEvaluation(minutes_remaining=None, is_at_risk=False)


def test_after_cutoff_is_excluded():
    assert minutes_remaining_before_cutoff(CUTOFF + timedelta(minutes=1)) is None
    assert minutes_remaining_before_cutoff(CUTOFF + timedelta(hours=3)) is None


def test_partial_minutes_are_floored():
    assert minutes_remaining_before_cutoff(CUTOFF - timedelta(minutes=45, seconds=59)) == 45
    assert minutes_remaining_before_cutoff(CUTOFF - timedelta(minutes=1)) == 1
    assert minutes_remaining_before_cutoff(CUTOFF - timedelta(seconds=30)) is None


def test_morning_is_outside_window():
    morning = datetime(2026, 3, 2, 8, 0, tzinfo=IST)

    assert evaluate_at_risk(morning).minutes_remaining is None


def test_submitted_today_is_never_at_risk():
    for minutes in (1, 30, 60):
        evaluation = evaluate_at_risk(CUTOFF - timedelta(minutes=minutes), has_submitted_today=True)
        assert evaluation.minutes_remaining == minutes
        assert evaluation.is_at_risk is False


def test_result_does_not_depend_on_input_offset():
    in_ist = (CUTOFF - timedelta(minutes=10)).astimezone(IST)
    in_pacific = (CUTOFF - timedelta(minutes=10)).astimezone(timezone(timedelta(hours=-8)))

    assert evaluate_at_risk(in_ist) == evaluate_at_risk(in_pacific) == evaluate_at_risk(CUTOFF - timedelta(minutes=10))


def test_naive_now_is_read_as_utc():
    naive = (CUTOFF - timedelta(minutes=20)).replace(tzinfo=None)

    assert minutes_remaining_before_cutoff(naive) == 20


def test_evaluation_is_repeatable():
    now = CUTOFF - timedelta(minutes=12)

    assert evaluate_at_risk(now, False) == evaluate_at_risk(now, False)


def test_instants_at_the_edge_of_the_calendar_are_outside_window():
    last_evening = datetime(9999, 12, 31, 20, 0, tzinfo=timezone.utc)
    first_morning = datetime(1, 1, 1, 1, 0, tzinfo=timezone(timedelta(hours=10)))

    assert evaluate_at_risk(last_evening) == AtRiskEvaluation(minutes_remaining=None, is_at_risk=False)
    assert evaluate_at_risk(first_morning) == AtRiskEvaluation(minutes_remaining=None, is_at_risk=False)
