"""
Epoch-millisecond helpers

Actions store every timestamp as integer milliseconds since the epoch.
"""
import time
from datetime import datetime, tzinfo


def now_ms() -> int:
    return int(time.time() * 1000)


def to_ms(value: datetime) -> int:
    """Aware datetime -> epoch ms"""
    return int(value.timestamp() * 1000)


def from_ms(value: int, tz: tzinfo) -> datetime:
    """Epoch ms -> aware datetime in tz"""
    return datetime.fromtimestamp(value / 1000, tz=tz)
