from collections.abc import Callable
from datetime import date

Clock = Callable[[], date]


def local_today() -> date:
    """Current calendar date in the host's local timezone."""
    return date.today()
