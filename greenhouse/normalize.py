import logging
import re
from collections.abc import Mapping
from datetime import datetime, tzinfo
from typing import Any, Final

from pydantic import ValidationError

from .models import Reading, SensorRecordModel

logger = logging.getLogger(__name__)

# e.g. "20250206_170002"
_KEY_PATTERN: Final[re.Pattern[str]] = re.compile(r"[0-9]{8}_[0-9]{6}")


class KeyParseError(ValueError):
    def __init__(self, key: object, reason: str) -> None:
        super().__init__(f"Invalid timestamp key {key!r}: {reason}")
        self.key = key
        self.reason = reason


def parse_key(key: str, tz: tzinfo | None = None) -> int:
    """Convert a ``YYYYMMDD_HHMMSS`` key to epoch milliseconds.

    The components are wall-clock time in ``tz``, or the host's local
    timezone when ``tz`` is None.
    """
    if not isinstance(key, str) or not _KEY_PATTERN.fullmatch(key):
        raise KeyParseError(key, "expected 15 characters shaped YYYYMMDD_HHMMSS")
    try:
        dt = datetime(
            int(key[0:4]),
            int(key[4:6]),
            int(key[6:8]),
            int(key[9:11]),
            int(key[11:13]),
            int(key[13:15]),
            tzinfo=tz,
        )
    except ValueError as exc:
        raise KeyParseError(key, str(exc)) from exc
    return int(dt.timestamp() * 1000)


def normalize_snapshot(raw: Mapping[str, Any] | None, tz: tzinfo | None = None) -> tuple[Reading, ...]:
    """Turn a raw keyed snapshot into a time-sorted series.

    Records with a malformed key or body are logged and skipped. Readings
    sharing a timestamp keep their snapshot order.
    """
    if not raw:
        return ()

    readings: list[Reading] = []
    skipped = 0
    for key, body in raw.items():
        try:
            ts = parse_key(key, tz)
            record = SensorRecordModel.model_validate(body)
        except (KeyParseError, ValidationError) as exc:
            logger.warning("Skipping sensor record %r: %s", key, exc)
            skipped += 1
            continue
        readings.append(
            Reading(
                time=ts,
                humidity=record.humidity,
                light=record.light,
                temperature=record.temperature,
            )
        )

    if skipped:
        logger.info("Normalized %s records, skipped %s", len(readings), skipped)
    # list.sort is stable
    readings.sort(key=lambda r: r.time)
    return tuple(readings)
