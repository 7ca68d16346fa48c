"""Tolerant value coercion shared by the CSV and remote sources.

Source data is never rejected: anything that does not parse falls back to a
field default so one bad cell cannot hide a whole district.
"""
import math
from datetime import datetime

UNKNOWN_DISTRICT = "Unknown"


def parse_numeric_or_default(raw, default=0, cast=float):
    """Parse ``raw`` as a non-negative number, or return ``default``.

    Strings may carry thousands separators ("1,200"). Empty, unparseable,
    negative, NaN and infinite values all yield ``default``.
    """
    if raw is None or isinstance(raw, bool):
        return default
    if isinstance(raw, str):
        raw = raw.replace(",", "").strip()
        if not raw:
            return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(value) or value < 0:
        return default
    return cast(value)


def parse_month(raw):
    month = parse_numeric_or_default(raw, 1, int)
    return month if 1 <= month <= 12 else 1


def parse_year(raw, now=None):
    current = (now or datetime.now()).year
    year = parse_numeric_or_default(raw, current, int)
    return year if 1000 <= year <= 9999 else current


def parse_district(raw):
    # short CSV rows leave NaN in the missing cells
    if raw is None or (isinstance(raw, float) and math.isnan(raw)):
        return UNKNOWN_DISTRICT
    name = str(raw).strip()
    return name or UNKNOWN_DISTRICT


def first_present(rec, *names):
    """Value of the first key in ``names`` that is set and non-blank."""
    for name in names:
        value = rec.get(name)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def district_matches(name, query):
    return bool(name) and query.strip().lower() in name.lower()
