from __future__ import annotations

import secrets
import threading
import time
import uuid as _uuid
from datetime import datetime, timezone

# Monotonic state for same-millisecond IDs (RFC 9562 Method 2)
_state_lock = threading.Lock()
_last_timestamp_ms = 0
_counter = 0

_USE_NATIVE = hasattr(_uuid, "uuid7")


def uuid7() -> str:
    """Generate UUID v7 (time-ordered). Lexical order of the strings follows creation order."""
    if _USE_NATIVE:
        return str(_uuid.uuid7())

    global _last_timestamp_ms, _counter

    with _state_lock:
        timestamp_ms = int(time.time() * 1000)

        if timestamp_ms <= _last_timestamp_ms:
            # Same millisecond (or clock stepped back): bump the 12-bit counter,
            # carrying into the timestamp so ids stay strictly increasing.
            _counter += 1
            if _counter > 0xFFF:
                _counter = 0
                _last_timestamp_ms += 1
            timestamp_ms = _last_timestamp_ms
        else:
            _counter = secrets.randbits(11)
            _last_timestamp_ms = timestamp_ms

        # 48-bit timestamp + 4-bit version + 12-bit counter
        time_high = (timestamp_ms >> 16) & 0xFFFFFFFF
        time_low = timestamp_ms & 0xFFFF
        time_low_and_version = (time_low << 16) | (7 << 12) | _counter

        # Variant 10, then 62 random bits
        rand_b_high = secrets.randbits(14)
        rand_b_low = secrets.randbits(48)
        variant_and_rand = (0b10 << 62) | (rand_b_high << 48) | rand_b_low

        uuid_int = (time_high << 96) | (time_low_and_version << 64) | variant_and_rand

        return str(_uuid.UUID(int=uuid_int))


def short_id(full_uuid: str) -> str:
    """Return last 8 chars: the high-entropy tail of a UUID7."""
    return full_uuid[-8:]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def timestamp(moment: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp as stored in every collection. Fixed width, so it sorts lexically."""
    return (moment or utcnow()).astimezone(timezone.utc).isoformat(timespec="microseconds")


def parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


__all__ = ["uuid7", "short_id", "utcnow", "timestamp", "parse_timestamp"]
