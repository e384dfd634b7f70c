"""Time Utilities for UTC management"""

from datetime import date, datetime, timezone
from typing import Any, Optional


def get_utc_now() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def get_utc_today() -> date:
    """
    Current calendar date in UTC.
    Used as the reference "today" for active and upcoming course checks.
    """
    return get_utc_now().date()


def parse_record_date(value: Any) -> Optional[date]:
    """
    Parse a record store date value.

    Accepts date objects and ISO strings with or without a time part
    ("2025-03-01" or "2025-03-01T09:00"). Empty or unparseable values give None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None
