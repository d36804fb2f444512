from datetime import date
from enum import Enum

from pydantic import BaseModel, Field


class TimerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    FINISHED = "finished"


class StatsSnapshot(BaseModel):
    today: date
    weekly_mask: list[bool] = Field(min_length=7, max_length=7)  # Monday..Sunday
    weekly_streak: int
    weekly_minutes: list[int] = Field(min_length=7, max_length=7)
    month_minutes: int
    month_sessions: int
    best_streak: int

    @classmethod
    def empty(cls, today: date) -> "StatsSnapshot":
        return cls(
            today=today,
            weekly_mask=[False] * 7,
            weekly_streak=0,
            weekly_minutes=[0] * 7,
            month_minutes=0,
            month_sessions=0,
            best_streak=0,
        )


class AppState(BaseModel):
    timer_state: TimerState
    selected_minutes: int
    seconds_remaining: int
    stats: StatsSnapshot
