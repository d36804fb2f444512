from meditimer.schemas.session import Session, SessionLog
from meditimer.schemas.stats import AppState, StatsSnapshot, TimerState

__all__ = [
    "AppState",
    "Session",
    "SessionLog",
    "StatsSnapshot",
    "TimerState",
]
