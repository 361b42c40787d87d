from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")


def parse_optional_date(value: Any) -> Optional[date]:
    """Accept date/datetime/ISO string/empty; empty means no date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_iso_date(str(value)[:10])


def format_date(value: Optional[date]) -> str:
    return value.strftime("%Y-%m-%d") if value else ""


def today_local() -> date:
    """Current local date (callers that need determinism pass `today` explicitly)."""
    return datetime.now().date()
