"""Transaction date normalization.

Turns a raw spreadsheet cell into an absolute UTC instant. Text cells are
"<date> <time>" pairs read as UTC; numeric cells are spreadsheet serials
in the 1900 date system. Anything that cannot be turned into an instant
yields None, which the aggregator treats as a filterable row.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation

#: Days between the spreadsheet serial epoch and 1970-01-01.
SERIAL_UNIX_EPOCH_OFFSET = Decimal("25569")

SECONDS_PER_DAY = Decimal("86400")

_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _from_text(value: str) -> datetime | None:
    # a single space separates date and time; extra whitespace is malformed
    parts = value.split(" ")
    if len(parts) < 2:
        return None
    try:
        parsed = datetime.fromisoformat(f"{parts[0]}T{parts[1]}")
    except ValueError:
        return None
    # "<date> <time>" is always UTC; an explicit offset is not a valid cell
    if parsed.tzinfo is not None:
        return None
    return parsed.replace(tzinfo=timezone.utc)


def _from_serial(value: int | float | Decimal) -> datetime | None:
    try:
        serial = Decimal(str(value))
    except InvalidOperation:
        return None
    if not serial.is_finite():
        return None

    # Truncate to whole milliseconds, toward zero
    millis = int((serial - SERIAL_UNIX_EPOCH_OFFSET) * SECONDS_PER_DAY * 1000)
    try:
        return _UNIX_EPOCH + timedelta(milliseconds=millis)
    except OverflowError:
        return None


def normalize_instant(value: object) -> datetime | None:
    """Convert a raw date cell into a UTC-aware datetime.

    Args:
        value: Text timestamp ("2024-06-17 12:30:00"), numeric spreadsheet
            serial (45460.5), or a datetime/date already decoded by the
            spreadsheet reader.

    Returns:
        UTC-aware datetime, or None when the value is absent, of an
        unsupported type, or cannot be parsed.
    """
    if isinstance(value, str):
        return _from_text(value)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        return _from_serial(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    return None
