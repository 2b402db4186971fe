"""Reversed penny challenge arithmetic.

Day 1 of the year saves the most (365p, or 366p in a leap year) and the final
day saves 1p. All amounts are integer minor currency units.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

DAYS_IN_YEAR = 365
DEDUPE_PREFIX = "PENNY-"
DATE_FORMAT = "%Y-%m-%d"


def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_year(year: int) -> int:
    return DAYS_IN_YEAR + 1 if is_leap_year(year) else DAYS_IN_YEAR


def utc_date(moment: datetime) -> date:
    """Civil UTC date of ``moment``; naive datetimes are taken to be UTC already."""
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(timezone.utc).date()


def amount_to_save(day: date) -> int:
    if isinstance(day, datetime):
        day = utc_date(day)
    ordinal = day.timetuple().tm_yday
    return days_in_year(day.year) + 1 - ordinal


def dedupe_id(day: date) -> str:
    if isinstance(day, datetime):
        day = utc_date(day)
    return f"{DEDUPE_PREFIX}{day.strftime(DATE_FORMAT)}"


__all__ = ["amount_to_save", "days_in_year", "dedupe_id", "is_leap_year", "utc_date"]
