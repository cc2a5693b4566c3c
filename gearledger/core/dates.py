from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

from .config import settings
from .errors import ValidationError

LOCAL_TZ = ZoneInfo(settings.TZ) if settings.TZ else None

_ACCEPTED_FORMATS = ("%Y-%m-%d", "%Y.%m.%d", "%Y/%m/%d", "%Y%m%d")


def today_iso() -> str:
    return datetime.now(LOCAL_TZ).date().isoformat()


def normalize_date(value: str | date | None) -> str:
    """Return ``YYYY-MM-DD`` for ``value``; ``None`` or blank means today."""

    if value is None:
        return today_iso()
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    cleaned = str(value).strip().rstrip(".")
    if not cleaned:
        return today_iso()
    # Spreadsheet cells sometimes carry a time component.
    cleaned = cleaned.split("T")[0].split(" ")[0]
    for fmt in _ACCEPTED_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date().isoformat()
        except ValueError:
            continue
    raise ValidationError("date must look like YYYY-MM-DD", code="date_malformed", details={"value": value})
