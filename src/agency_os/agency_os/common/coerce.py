from __future__ import annotations

import math
from datetime import date, datetime
from typing import Any, Optional

from ..core.exceptions import ValidationError


def safe_number(value: Any) -> float:
    """Numeric view of a possibly missing/malformed field; None, NaN and junk become 0."""
    try:
        number = float(value)
    except (TypeError, ValueError, ArithmeticError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def as_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    return value if isinstance(value, date) else None


_TRUE_WORDS = frozenset({"true", "1", "on", "yes"})
_FALSE_WORDS = frozenset({"false", "0", "off", "no", ""})


def parse_flag(value: Any, field: str) -> bool:
    """Boolean from JSON or form input; `"false"` and `"0"` are False."""
    if value is None or isinstance(value, bool):
        return bool(value)
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise ValidationError(f"{field} must be true or false")


def parse_tags(value: Any) -> frozenset[str]:
    """Tag set from a list or a comma-separated string."""
    if value is None or value == "":
        return frozenset()
    if isinstance(value, str):
        value = value.split(",")
    elif not isinstance(value, (list, tuple, set, frozenset)):
        raise ValidationError("Tags must be a list or a comma-separated string")
    return frozenset(str(t).strip() for t in value if str(t).strip())
