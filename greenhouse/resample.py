import logging
from collections.abc import Sequence
from enum import StrEnum

import numpy as np

from .models import METRIC_FIELDS, Reading
from .windows import WINDOWS, IntervalClass, TimeWindow, resolve_window

logger = logging.getLogger(__name__)


class Collision(StrEnum):
    FIRST = "first"
    MEAN = "mean"


def interval_for(window: TimeWindow | str) -> IntervalClass:
    return WINDOWS[resolve_window(window)].interval


def bucket_floor(ts_ms: int, interval_ms: int) -> int:
    return (ts_ms // interval_ms) * interval_ms


def bucket_ceil(ts_ms: int, interval_ms: int) -> int:
    return -((-ts_ms) // interval_ms) * interval_ms


def _nan_mean(values: np.ndarray) -> float | None:
    if values.size == 0 or np.all(np.isnan(values)):
        return None
    return float(np.nanmean(values))


def _merge_bucket(bucket_start: int, group: Sequence[Reading]) -> Reading:
    merged: dict[str, float | None] = {}
    for name in METRIC_FIELDS:
        vals = [r.metric(name) for r in group]
        arr = np.array([np.nan if v is None else v for v in vals], dtype=float)
        merged[name] = _nan_mean(arr)
    return Reading(time=bucket_start, **merged)


def resample(
    series: Sequence[Reading],
    interval: IntervalClass | int,
    collision: Collision | str = Collision.FIRST,
) -> tuple[Reading, ...]:
    """Lay a time-sorted series onto a gap-free grid of ``interval`` buckets.

    The grid runs from the bucket floor of the first reading to the bucket
    ceiling of the last one, inclusive. A bucket holding exactly one reading
    emits that reading unchanged; an empty bucket emits a zero reading
    stamped at the bucket start. Buckets holding several readings keep the
    first one (``first``) or their per-metric average (``mean``).
    """
    if not series:
        return ()

    interval_ms = interval.ms if isinstance(interval, IntervalClass) else int(interval)
    if interval_ms <= 0:
        raise ValueError(f"interval must be positive, got {interval_ms}")
    policy = Collision(collision)

    start = bucket_floor(series[0].time, interval_ms)
    end = bucket_ceil(series[-1].time, interval_ms)

    out: list[Reading] = []
    idx = 0
    dropped = 0
    for t in range(start, end + interval_ms, interval_ms):
        group: list[Reading] = []
        while idx < len(series) and bucket_floor(series[idx].time, interval_ms) == t:
            group.append(series[idx])
            idx += 1
        if not group:
            out.append(Reading.zero(t))
        elif len(group) == 1 or policy is Collision.FIRST:
            out.append(group[0])
            dropped += len(group) - 1
        else:
            out.append(_merge_bucket(t, group))

    if dropped:
        logger.debug("Dropped %s readings sharing a bucket of %sms", dropped, interval_ms)
    return tuple(out)
