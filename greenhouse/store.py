import logging
import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import tzinfo
from typing import Any

from .models import Reading
from .normalize import normalize_snapshot
from .resample import Collision, interval_for, resample
from .windows import DEFAULT_WINDOW, TimeWindow, filter_window, resolve_window

logger = logging.getLogger(__name__)

Listener = Callable[["SensorStore"], None]


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class SeriesView:
    window: TimeWindow
    version: int
    computed_at_ms: int
    readings: tuple[Reading, ...]

    @property
    def empty(self) -> bool:
        return not self.readings


class SensorStore:
    """Holds the canonical series and the selected window.

    Snapshots replace the series wholesale; readers always see either the
    old or the new tuple. ``view()`` caches the filtered and resampled
    series until the series version or the window changes.
    """

    def __init__(
        self,
        window: TimeWindow | str = DEFAULT_WINDOW,
        clock: Callable[[], int] | None = None,
        tz: tzinfo | None = None,
        collision: Collision | str = Collision.FIRST,
    ) -> None:
        self._clock = clock or _now_ms
        self._tz = tz
        self._collision = Collision(collision)
        self._lock = threading.Lock()
        self._series: tuple[Reading, ...] = ()
        self._version = 0
        self._window = resolve_window(window)
        self._views: dict[TimeWindow, SeriesView] = {}
        self._listeners: list[Listener] = []

    @property
    def series(self) -> tuple[Reading, ...]:
        return self._series

    @property
    def version(self) -> int:
        return self._version

    @property
    def window(self) -> TimeWindow:
        return self._window

    def replace_snapshot(self, raw: Mapping[str, Any] | None) -> None:
        series = normalize_snapshot(raw, self._tz)
        with self._lock:
            self._series = series
            self._version += 1
            version = self._version
        logger.info("Snapshot applied: version=%s readings=%s", version, len(series))
        self._notify()

    def select_window(self, value: TimeWindow | str) -> TimeWindow:
        window = resolve_window(value)
        with self._lock:
            changed = window is not self._window
            self._window = window
        if changed:
            logger.debug("Time window changed to %s", window.value)
            self._notify()
        return window

    def view(self, window: TimeWindow | str | None = None) -> SeriesView:
        """Filtered and resampled series for ``window`` (the selected one by default)."""
        with self._lock:
            series, version = self._series, self._version
            window = self._window if window is None else resolve_window(window)
            cached = self._views.get(window)
        if cached is not None and cached.version == version:
            return cached

        now = self._clock()
        filtered = filter_window(series, window, now)
        readings = resample(filtered, interval_for(window), self._collision)
        view = SeriesView(window=window, version=version, computed_at_ms=now, readings=readings)
        with self._lock:
            if view.version == self._version:
                self._views[window] = view
        return view

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(self)
            except Exception:
                # Listener errors must not break ingestion
                logger.exception("Store listener failed")
