from __future__ import annotations

from datetime import date, datetime, time, timedelta

from dpkgreport.core.models import TimeWindow


WINDOW_DAYS = {
    "today": 0,
    "two_days": 1,
    "last_week": 7,
    "last_month": 30,
}


def select_time_window(mode: str | None, today: date | None = None) -> TimeWindow:
    """Turn a window selection mode into a concrete time range.

    Args:
        mode (str | None): One of ``today``, ``two_days``, ``last_week``,
            ``last_month`` or None for no lower bound.
        today (date | None): Reference date, defaults to the local date.

    Returns:
        TimeWindow: Range ending today at 23:59:59.

    Raises:
        ValueError: If the mode is not recognized.
    """
    current = today or date.today()
    end = datetime.combine(current, time(23, 59, 59))
    if mode is None:
        return TimeWindow(end=end)
    if mode not in WINDOW_DAYS:
        raise ValueError(f"Unsupported time window: {mode}")
    start = datetime.combine(current, time.min) - timedelta(days=WINDOW_DAYS[mode])
    return TimeWindow(end=end, start=start)
