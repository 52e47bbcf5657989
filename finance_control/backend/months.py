"""
Month key helpers.

A month key is the canonical "YYYY-MM" string used to bucket ledger
transactions and to anchor installment purchases. All arithmetic is done
on calendar months; the day of month never matters.
"""

import re
from datetime import datetime

MONTH_KEY_RE = re.compile(r'^(\d{4})-(0[1-9]|1[0-2])$')

MONTH_NAMES_PT = [
    'janeiro', 'fevereiro', 'março', 'abril', 'maio', 'junho',
    'julho', 'agosto', 'setembro', 'outubro', 'novembro', 'dezembro',
]


def month_key(d) -> str:
    return d.strftime("%Y-%m")


def current_month_key() -> str:
    return month_key(datetime.now())


def is_month_key(key) -> bool:
    return isinstance(key, str) and MONTH_KEY_RE.match(key) is not None


def parse_month_key(key):
    """Split a "YYYY-MM" key into (year, month), raising ValueError if malformed"""
    match = MONTH_KEY_RE.match(key) if isinstance(key, str) else None
    if not match:
        raise ValueError(f"Invalid month key: {key!r} (expected YYYY-MM)")
    return int(match.group(1)), int(match.group(2))


def _ordinal(key) -> int:
    year, month = parse_month_key(key)
    return year * 12 + (month - 1)


def _from_ordinal(ordinal) -> str:
    year, month_index = divmod(ordinal, 12)
    return f"{year:04d}-{month_index + 1:02d}"


def add_months(key, n) -> str:
    return _from_ordinal(_ordinal(key) + n)


def months_between(start, end) -> int:
    """Signed calendar-month distance from start to end (positive if end is later)"""
    return _ordinal(end) - _ordinal(start)


def trailing_months(key, count=6):
    """The `count` month keys ending at `key` (inclusive), oldest first"""
    return [add_months(key, -i) for i in range(count - 1, -1, -1)]


def month_label(key) -> str:
    # e.g. "jan/24"
    year, month = parse_month_key(key)
    return f"{MONTH_NAMES_PT[month - 1][:3]}/{year % 100:02d}"


def month_title(key) -> str:
    # e.g. "janeiro de 2024"
    year, month = parse_month_key(key)
    return f"{MONTH_NAMES_PT[month - 1]} de {year}"
