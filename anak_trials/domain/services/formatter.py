"""Presentation formatting for child rows.

Formatting is display-only: the returned dictionaries are never written back.
"""

from datetime import date, datetime
from typing import Any, Optional, Union

from babel.core import UnknownLocaleError
from babel.dates import format_date


BIRTH_DATE_FIELD = "tanggal_lahir"


def normalize_locale(locale: str) -> str:
    """Turn a BCP-47 tag such as ``id-ID`` into Babel's ``id_ID`` form."""
    return locale.strip().replace("-", "_")


def _coerce_date(value: Union[date, datetime, str]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip()[:10])
    raise TypeError(f"Cannot format {type(value).__name__} as a date")


def format_birth_date(value: Optional[Union[date, datetime, str]], locale: str) -> Optional[str]:
    """Format a stored birth date as a long localized date.

    Parameters:
        value: Date from the database (date, datetime or ISO string)
        locale: Locale identifier, e.g. ``id_ID`` or ``en-US``

    Returns:
        Day, full month name and year in the locale's long pattern
        (``1 Januari 2020`` for id_ID, ``January 1, 2020`` for en_US),
        or None when the stored value is None.

    Raises:
        ValueError: If the locale is unknown or the value is not a date
    """
    if value is None:
        return None

    try:
        return format_date(_coerce_date(value), format="long", locale=normalize_locale(locale))
    except UnknownLocaleError as e:
        raise ValueError(f"Unknown locale: {locale}") from e


def format_child(row: dict[str, Any], locale: str) -> dict[str, Any]:
    """Return a copy of a child row with its birth date formatted.

    All other fields are passed through unchanged.
    """
    formatted = dict(row)
    if BIRTH_DATE_FIELD in formatted:
        formatted[BIRTH_DATE_FIELD] = format_birth_date(formatted[BIRTH_DATE_FIELD], locale)
    return formatted


def format_children(rows: list[dict[str, Any]], locale: str) -> list[dict[str, Any]]:
    return [format_child(row, locale) for row in rows]
