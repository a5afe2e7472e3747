from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

# Ledger time counts seconds from 2000-01-01T00:00:00Z, not from the Unix epoch.
RIPPLE_EPOCH_OFFSET = 946684800

ISO_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def ripple_time_to_datetime(seconds: int) -> datetime:
    return datetime.fromtimestamp(int(seconds) + RIPPLE_EPOCH_OFFSET, tz=timezone.utc)


def ripple_time_to_iso(seconds: int) -> str:
    return ripple_time_to_datetime(seconds).strftime(ISO_FORMAT)


def parse_iso_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed.astimezone(timezone.utc) if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def entry_close_time(entry: dict, tx: Optional[dict] = None) -> Optional[str]:
    # Always emit ISO_FORMAT; stored timestamps are ordered as strings.
    parsed = parse_iso_timestamp(entry.get("close_time_iso"))
    if parsed is not None:
        return parsed.strftime(ISO_FORMAT)
    for source in (entry, tx or {}):
        date = source.get("date")
        if isinstance(date, int) and not isinstance(date, bool):
            return ripple_time_to_iso(date)
    return None
