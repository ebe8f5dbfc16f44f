"""
Single time source for TTL checks. A clock is any callable returning epoch milliseconds.
"""
import time
from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], int]


def now_ms() -> int:
    return int(time.time() * 1000)


def iso_from_ms(ms: int) -> str:
    """ISO-8601 UTC with millisecond precision and Z suffix (e.g. 2024-01-01T00:00:00.000Z)."""
    dt = datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")
