import logging
from bisect import bisect_left
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum, StrEnum
from typing import Final

from .models import Reading

logger = logging.getLogger(__name__)

DAY_MS: Final[int] = 24 * 60 * 60 * 1000
HOUR_MS: Final[int] = 60 * 60 * 1000


class TimeWindow(StrEnum):
    ONE_DAY = "1d"
    FIVE_DAYS = "5d"
    ONE_MONTH = "1m"
    THREE_MONTHS = "3m"
    SIX_MONTHS = "6m"
    ONE_YEAR = "1y"
    ALL = "all"


class IntervalClass(Enum):
    HOURLY = HOUR_MS
    DAILY = DAY_MS

    @property
    def ms(self) -> int:
        return int(self.value)


class LabelStyle(Enum):
    CLOCK = "clock"
    DAY_MONTH = "day_month"
    MONTH_YEAR = "month_year"


@dataclass(frozen=True)
class WindowSpec:
    title: str
    lookback_ms: int | None
    interval: IntervalClass
    label: LabelStyle


# Nominal durations: a month is 30 days and a year 365.
WINDOWS: Final[dict[TimeWindow, WindowSpec]] = {
    TimeWindow.ONE_DAY: WindowSpec("1 Day", 1 * DAY_MS, IntervalClass.HOURLY, LabelStyle.CLOCK),
    TimeWindow.FIVE_DAYS: WindowSpec("5 Days", 5 * DAY_MS, IntervalClass.HOURLY, LabelStyle.CLOCK),
    TimeWindow.ONE_MONTH: WindowSpec("1 Month", 30 * DAY_MS, IntervalClass.DAILY, LabelStyle.DAY_MONTH),
    TimeWindow.THREE_MONTHS: WindowSpec("3 Months", 90 * DAY_MS, IntervalClass.DAILY, LabelStyle.DAY_MONTH),
    TimeWindow.SIX_MONTHS: WindowSpec("6 Months", 180 * DAY_MS, IntervalClass.DAILY, LabelStyle.DAY_MONTH),
    TimeWindow.ONE_YEAR: WindowSpec("1 Year", 365 * DAY_MS, IntervalClass.DAILY, LabelStyle.MONTH_YEAR),
    TimeWindow.ALL: WindowSpec("All", None, IntervalClass.DAILY, LabelStyle.MONTH_YEAR),
}

DEFAULT_WINDOW: Final[TimeWindow] = TimeWindow.ONE_DAY


def resolve_window(value: TimeWindow | str | None) -> TimeWindow:
    """Map a user supplied value onto a known window, falling back to ``all``."""
    if isinstance(value, TimeWindow):
        return value
    try:
        return TimeWindow(str(value).strip().lower())
    except ValueError:
        logger.warning("Unknown time window %r; using %s", value, TimeWindow.ALL.value)
        return TimeWindow.ALL


def cutoff_ms(window: TimeWindow | str, now_ms: int) -> int:
    spec = WINDOWS[resolve_window(window)]
    if spec.lookback_ms is None:
        return 0
    return int(now_ms) - spec.lookback_ms


def filter_window(series: Sequence[Reading], window: TimeWindow | str, now_ms: int) -> tuple[Reading, ...]:
    """Return the suffix of a time-sorted series at or after the window cutoff."""
    if not series:
        return ()
    cutoff = cutoff_ms(window, now_ms)
    start = bisect_left(series, cutoff, key=lambda r: r.time)
    return tuple(series[start:])
