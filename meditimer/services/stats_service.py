from collections.abc import Sequence
from datetime import date, timedelta

from meditimer.config import settings
from meditimer.schemas.session import Session
from meditimer.schemas.stats import StatsSnapshot

WEEK = timedelta(days=7)


def week_start(d: date) -> date:
    """Monday on or before the given date."""
    return d - timedelta(days=d.weekday())


def _has_session_in_week(sessions: Sequence[Session], ws: date) -> bool:
    we = ws + timedelta(days=6)
    return any(ws <= s.date <= we for s in sessions)


def weekly_mask(today: date, sessions: Sequence[Session]) -> list[bool]:
    ws = week_start(today)
    days = {s.date for s in sessions}
    return [ws + timedelta(days=i) in days for i in range(7)]


def weekly_minutes(today: date, sessions: Sequence[Session]) -> list[int]:
    ws = week_start(today)
    minutes = [0] * 7
    for s in sessions:
        offset = (s.date - ws).days
        if 0 <= offset < 7:
            minutes[offset] += s.duration_minutes
    return minutes


def current_streak(
    today: date,
    sessions: Sequence[Session],
    max_weeks: int = settings.STREAK_MAX_WEEKS,
) -> int:
    """Consecutive weeks with at least one session, counting back from this week.

    Stops after ``max_weeks`` weeks even if the run continues further back.
    """
    streak = 0
    ws = week_start(today)
    for _ in range(max_weeks):
        if not _has_session_in_week(sessions, ws):
            break
        streak += 1
        ws -= WEEK
    return streak


def best_streak(today: date, sessions: Sequence[Session]) -> int:
    """Longest run of consecutive non-empty weeks between the first session and this week."""
    if not sessions:
        return 0

    active_weeks = {week_start(s.date) for s in sessions}
    ws = week_start(min(s.date for s in sessions))
    last = week_start(today)

    best = 0
    run = 0
    while ws <= last:
        if ws in active_weeks:
            run += 1
            best = max(best, run)
        else:
            run = 0
        ws += WEEK
    return best


def _in_month(today: date, d: date) -> bool:
    return (d.year, d.month) == (today.year, today.month)


def month_minutes(today: date, sessions: Sequence[Session]) -> int:
    return sum(s.duration_minutes for s in sessions if _in_month(today, s.date))


def month_session_count(today: date, sessions: Sequence[Session]) -> int:
    return sum(1 for s in sessions if _in_month(today, s.date))


def compute_stats(today: date, sessions: Sequence[Session]) -> StatsSnapshot:
    """Derive every history view from one snapshot of the log and a single ``today``."""
    return StatsSnapshot(
        today=today,
        weekly_mask=weekly_mask(today, sessions),
        weekly_streak=current_streak(today, sessions),
        weekly_minutes=weekly_minutes(today, sessions),
        month_minutes=month_minutes(today, sessions),
        month_sessions=month_session_count(today, sessions),
        best_streak=best_streak(today, sessions),
    )
