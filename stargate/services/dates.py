# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Date normalisation for duty bookkeeping — pure functions, no I/O.
Every stored or compared duty date is a UTC calendar day.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional, Union

RETIREMENT_TITLE = "RETIRED"
ONE_DAY = timedelta(days=1)


def normalize_to_utc_date(value: Union[date, datetime]) -> date:
    """
    Convert a timestamp to its UTC calendar day.
    Naive datetimes are taken to be UTC already; plain dates pass through.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(timezone.utc).date()
    return value


def is_unset_date(value: Optional[Union[date, datetime]]) -> bool:
    """True for a missing start date or the minimum (default) value."""
    if value is None:
        return True
    if isinstance(value, datetime):
        return value.replace(tzinfo=None) == datetime.min
    return value == date.min


def is_retirement(duty_title: str) -> bool:
    return duty_title.upper() == RETIREMENT_TITLE


def day_before(value: date) -> date:
    return value - ONE_DAY


def as_date(value: Any) -> Optional[date]:
    """Coerce a DATE column value (date, datetime or ISO string) to ``date``."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def as_iso(value: Any) -> Optional[str]:
    """Render a TIMESTAMP column value as ISO-8601."""
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)
