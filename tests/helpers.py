from datetime import UTC, datetime

HOUR_MS = 3_600_000
DAY_MS = 86_400_000


def utc_ms(*args: int) -> int:
    return int(datetime(*args, tzinfo=UTC).timestamp() * 1000)
