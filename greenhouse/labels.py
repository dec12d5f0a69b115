from datetime import datetime, tzinfo

from .windows import WINDOWS, LabelStyle, TimeWindow

_FORMATS: dict[LabelStyle, str] = {
    LabelStyle.CLOCK: "%H:%M",
    LabelStyle.DAY_MONTH: "%d %b",
    LabelStyle.MONTH_YEAR: "%b %Y",
}

_FULL_FORMAT = "%c"


def _to_datetime(ts_ms: int, tz: tzinfo | None) -> datetime:
    dt = datetime.fromtimestamp(ts_ms / 1000, tz=tz)
    return dt if tz is not None else dt.astimezone()


def format_label(ts_ms: int, window: TimeWindow | str, tz: tzinfo | None = None) -> str:
    """Axis label for ``ts_ms`` at the granularity of ``window``.

    Unknown windows get the full locale date-time instead of an error.
    """
    dt = _to_datetime(ts_ms, tz)
    try:
        style = WINDOWS[TimeWindow(str(window).strip().lower())].label
    except ValueError:
        return dt.strftime(_FULL_FORMAT)
    return dt.strftime(_FORMATS[style])


def format_tooltip(ts_ms: int, tz: tzinfo | None = None) -> str:
    return _to_datetime(ts_ms, tz).strftime(_FULL_FORMAT)
