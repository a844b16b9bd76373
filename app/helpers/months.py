from __future__ import annotations

from datetime import date, datetime, timezone

_MONTH_FORMATS = ("%Y-%m", "%m-%Y", "%Y-%m-%d")


def normalize_month(value: date | datetime) -> date:
    """
    Canonical month value: first day of the calendar month, in UTC.

    Aware datetimes are converted to UTC before truncating,
    naive datetimes are taken as UTC already.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return date(value.year, value.month, 1)
    return date(value.year, value.month, 1)


def parse_month(value: str) -> date:
    """
    Accepts YYYY-MM, MM-YYYY or a full YYYY-MM-DD (day is dropped).
    """
    v = value.strip()
    if not v:
        raise ValueError("date value cannot be empty")

    for fmt in _MONTH_FORMATS:
        try:
            parsed = datetime.strptime(v, fmt)
        except ValueError:
            continue
        return normalize_month(parsed)

    raise ValueError("date must be in YYYY-MM or MM-YYYY format")


def current_month(now_utc: datetime | None = None) -> date:
    now_utc = now_utc or datetime.now(timezone.utc)
    if now_utc.tzinfo is None:
        now_utc = now_utc.replace(tzinfo=timezone.utc)
    return normalize_month(now_utc)


def month_span(start: date, end: date) -> int:
    """
    Inclusive number of calendar months between start and end:
    Jan..Jan == 1, Jan..Mar == 3. Returns 0 when end is before start.
    """
    start = normalize_month(start)
    end = normalize_month(end)
    if end < start:
        return 0

    years = end.year - start.year
    months = end.month - start.month
    return years * 12 + months + 1
