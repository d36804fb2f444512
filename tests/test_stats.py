from datetime import date, timedelta

import pytest

from meditimer.schemas.session import Session
from meditimer.services.stats_service import (
    best_streak,
    compute_stats,
    current_streak,
    month_minutes,
    month_session_count,
    week_start,
    weekly_mask,
    weekly_minutes,
)


def s(iso: str, minutes: int = 10) -> Session:
    return Session(date=date.fromisoformat(iso), duration_minutes=minutes)


def weekly_run(first_monday: date, weeks: int) -> list[Session]:
    return [Session(date=first_monday + timedelta(weeks=i), duration_minutes=5) for i in range(weeks)]


@pytest.mark.parametrize(
    "day, monday",
    [
        ("2024-01-08", "2024-01-08"),  # Monday
        ("2024-01-10", "2024-01-08"),
        ("2024-01-14", "2024-01-08"),  # Sunday
        ("2024-03-01", "2024-02-26"),  # leap-year February
        ("2025-01-01", "2024-12-30"),  # crosses the year
    ],
)
def test_week_start(day, monday):
    assert week_start(date.fromisoformat(day)) == date.fromisoformat(monday)


def test_two_week_scenario():
    today = date(2024, 1, 8)
    sessions = [s("2024-01-01", 10), s("2024-01-08", 15)]

    assert weekly_mask(today, sessions) == [True, False, False, False, False, False, False]
    assert weekly_minutes(today, sessions) == [15, 0, 0, 0, 0, 0, 0]
    assert current_streak(today, sessions) == 2
    assert month_minutes(today, sessions) == 25
    assert month_session_count(today, sessions) == 2


def test_empty_log():
    today = date(2024, 1, 8)

    assert best_streak(today, []) == 0
    assert current_streak(today, []) == 0
    assert weekly_mask(today, []) == [False] * 7
    assert weekly_minutes(today, []) == [0] * 7
    assert month_minutes(today, []) == 0
    assert month_session_count(today, []) == 0


def test_streak_after_gap():
    today = date(2024, 2, 5)
    sessions = [
        s("2024-01-01"),
        s("2024-01-22"),
        s("2024-01-29"),
        s("2024-02-05"),
    ]

    assert best_streak(today, sessions) == 3
    assert current_streak(today, sessions) == 3


@pytest.mark.parametrize("n", range(8))
def test_mask_marks_each_distinct_day(n):
    today = date(2024, 1, 10)
    monday = week_start(today)
    sessions = [Session(date=monday + timedelta(days=i), duration_minutes=5) for i in range(n)]

    mask = weekly_mask(today, sessions)
    assert sum(mask) == n
    assert mask == [i < n for i in range(7)]


def test_multiple_sessions_per_day_all_count():
    today = date(2024, 1, 10)
    sessions = [s("2024-01-09", 10), s("2024-01-09", 20), s("2024-01-14", 5)]

    assert weekly_mask(today, sessions) == [False, True, False, False, False, False, True]
    assert weekly_minutes(today, sessions) == [0, 30, 0, 0, 0, 0, 5]
    assert month_session_count(today, sessions) == 3


def test_sessions_outside_week_are_ignored():
    today = date(2024, 1, 10)
    sessions = [s("2024-01-07", 30), s("2024-01-15", 30)]

    assert weekly_mask(today, sessions) == [False] * 7
    assert weekly_minutes(today, sessions) == [0] * 7


def test_current_streak_zero_without_session_this_week():
    today = date(2024, 1, 15)
    sessions = weekly_run(date(2023, 6, 5), 30)  # last session three weeks ago

    assert current_streak(today, sessions) == 0


def test_current_streak_grows_with_consecutive_weeks():
    today = date(2024, 6, 5)
    this_week = week_start(today)
    previous = 0
    for weeks in range(1, 60):
        sessions = weekly_run(this_week - timedelta(weeks=weeks - 1), weeks)
        streak = current_streak(today, sessions)
        assert streak >= previous
        assert streak <= 52
        previous = streak
    assert previous == 52


def test_current_streak_cap_is_adjustable():
    today = date(2024, 6, 5)
    sessions = weekly_run(week_start(today) - timedelta(weeks=9), 10)

    assert current_streak(today, sessions, max_weeks=4) == 4
    assert current_streak(today, sessions) == 10


def test_best_streak_is_uncapped():
    today = date(2026, 1, 7)
    this_week = week_start(today)
    sessions = weekly_run(this_week - timedelta(weeks=79), 80)

    assert current_streak(today, sessions) == 52
    assert best_streak(today, sessions) == 80


def test_best_streak_remembers_older_run():
    today = date(2024, 3, 6)
    sessions = weekly_run(date(2024, 1, 1), 4) + [s("2024-03-04")]

    assert best_streak(today, sessions) == 4
    assert current_streak(today, sessions) == 1


def test_best_streak_ignores_order():
    today = date(2024, 2, 5)
    sessions = [s("2024-02-05"), s("2024-01-01"), s("2024-01-29"), s("2024-01-22")]

    assert best_streak(today, sessions) == 3


@pytest.mark.parametrize(
    "dates",
    [
        ["2024-01-01"],
        ["2023-12-25", "2024-01-01", "2024-01-08"],
        ["2023-11-06", "2023-11-13", "2024-01-03", "2024-01-09"],
        ["2023-01-02", "2024-01-09", "2024-01-10"],
    ],
)
def test_best_streak_never_below_current(dates):
    today = date(2024, 1, 10)
    sessions = [s(d) for d in dates]

    assert best_streak(today, sessions) >= current_streak(today, sessions)


def test_month_filters_on_year_too():
    today = date(2024, 1, 20)
    sessions = [s("2024-01-02", 10), s("2023-01-15", 40), s("2024-02-01", 5), s("2023-12-31", 7)]

    assert month_minutes(today, sessions) == 10
    assert month_session_count(today, sessions) == 1


def test_compute_stats_uses_one_today():
    today = date(2024, 1, 8)
    sessions = [s("2024-01-01", 10), s("2024-01-08", 15)]

    stats = compute_stats(today, sessions)
    assert stats.today == today
    assert stats.weekly_mask == [True] + [False] * 6
    assert stats.weekly_minutes == [15, 0, 0, 0, 0, 0, 0]
    assert stats.weekly_streak == 2
    assert stats.best_streak == 2
    assert stats.month_minutes == 25
    assert stats.month_sessions == 2
