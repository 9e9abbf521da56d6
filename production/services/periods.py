from __future__ import annotations

from datetime import date, timedelta
from typing import Optional, Union

from django.utils import timezone

MONTH_ABBREVIATIONS: tuple[str, ...] = (
    "Jan",
    "Fev",
    "Mar",
    "Abr",
    "Mai",
    "Jun",
    "Jul",
    "Ago",
    "Set",
    "Out",
    "Nov",
    "Dez",
)
MONTH_INDEX: dict[str, int] = {name: index for index, name in enumerate(MONTH_ABBREVIATIONS, start=1)}

FIRST_FORTNIGHT = "1ª Quinzena"
SECOND_FORTNIGHT = "2ª Quinzena"
FORTNIGHT_SEPARATOR = " - "

FortnightKey = tuple[int, int, int]
DateLike = Union[str, date]


def today() -> str:
    """Local wall-clock date in ISO form."""
    return timezone.localdate().isoformat()


def is_iso_date(value: str | None) -> bool:
    if not value or len(value) != 10:
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def is_future_date(value: str) -> bool:
    return value > today()


def format_local_date(value: str | None) -> str:
    """Convert ``YYYY-MM-DD`` into the ``DD/MM/YYYY`` display form."""
    if not value:
        return ""
    parts = value[:10].split("-")
    if len(parts) != 3:
        return value
    year, month, day = parts
    return f"{day}/{month}/{year}"


def parse_local_date(value: str | None) -> str:
    """Convert a ``DD/MM/YYYY`` (or ``D/M/YY``) display date into ISO form.

    Text without ``/`` is assumed to be ISO already and is returned unchanged.
    Blank input means today. A display date that cannot name a real day
    returns an empty string so callers can discard it.
    """
    text = (value or "").strip()
    if not text:
        return today()
    if "/" not in text:
        return text

    parts = [part.strip() for part in text.split("/")]
    if len(parts) != 3 or not all(part.isdigit() for part in parts):
        return ""
    day, month, year = parts
    if len(year) == 2:
        year = f"20{year}"
    iso_value = f"{year}-{month.zfill(2)}-{day.zfill(2)}"
    return iso_value if is_iso_date(iso_value) else ""


def _as_date(value: DateLike) -> date:
    if isinstance(value, date):
        return value
    # Only the calendar part matters; a trailing time component is ignored.
    return date.fromisoformat(value[:10])


def fortnight_of(value: DateLike) -> str:
    """Return the half-month label, e.g. ``"Jan/2024 - 1ª Quinzena"``."""
    day = _as_date(value)
    part = FIRST_FORTNIGHT if day.day <= 15 else SECOND_FORTNIGHT
    return f"{MONTH_ABBREVIATIONS[day.month - 1]}/{day.year}{FORTNIGHT_SEPARATOR}{part}"


def fortnight_sort_key(label: str) -> FortnightKey:
    """Parse a fortnight label into ``(year, month, ordinal)``.

    Labels without the ``" - "`` separator sort first as ``(0, 0, 0)``.
    """
    parts = label.split(FORTNIGHT_SEPARATOR)
    if len(parts) < 2:
        return (0, 0, 0)
    date_part, ordinal_part = parts[0], parts[1]
    month_label, _, year_label = date_part.partition("/")
    try:
        year = int(year_label.strip())
    except ValueError:
        year = 0
    month = MONTH_INDEX.get(month_label.strip(), 0)
    ordinal = 1 if "1ª" in ordinal_part else 2
    return (year, month, ordinal)


def compare_fortnights(first: str, second: str) -> int:
    """Three-way comparison of two fortnight labels (negative, zero, positive)."""
    first_key = fortnight_sort_key(first)
    second_key = fortnight_sort_key(second)
    if first_key < second_key:
        return -1
    if first_key > second_key:
        return 1
    return 0


def format_month_label(year_month: str | None) -> str:
    """Turn ``YYYY-MM`` into a short label such as ``Jan/24``."""
    if not year_month or len(year_month) < 7:
        return ""
    year, _, month = year_month[:7].partition("-")
    try:
        month_index = int(month)
    except ValueError:
        return year_month
    if not 1 <= month_index <= 12:
        return year_month
    return f"{MONTH_ABBREVIATIONS[month_index - 1]}/{year[2:]}"


def cutoff_date(days_ago: int, reference: Optional[DateLike] = None) -> str:
    base = _as_date(reference) if reference is not None else timezone.localdate()
    return (base - timedelta(days=days_ago)).isoformat()


def weeks_between(start: DateLike, end: DateLike) -> int:
    """Whole weeks separating two calendar days, regardless of their order."""
    return abs((_as_date(end) - _as_date(start)).days) // 7
