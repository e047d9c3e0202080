"""
Natural-language date resolution for flight searches.

Resolves one side of a date expression ("tomorrow", "25th December",
"12/03/2027", "a week in March") to an ISO calendar date. Strategies are
tried in the order of ``STRATEGIES``; the first one that produces a date wins.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from dateutil import parser as date_parser

from src.utils.logger import get_logger

logger = get_logger(__name__)

ORDINAL_SUFFIX = re.compile(r"(\d+)(st|nd|rd|th)\b")
YEAR_TOKEN = re.compile(r"\d{4}|'\d{2}")
WEEK_IN_MONTH = re.compile(r"a week in ([a-z]+)")

SUNDAY = 6

MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "sept": 9, "oct": 10, "nov": 11, "dec": 12,
    "january": 1, "february": 2, "march": 3, "april": 4, "june": 6,
    "july": 7, "august": 8, "september": 9, "october": 10,
    "november": 11, "december": 12,
}

FORMATS_WITH_YEAR = [
    "%Y-%m-%d",      # ISO
    "%m/%d/%Y",      # US
    "%d/%m/%Y",      # EU
    "%m-%d-%Y",
    "%d-%m-%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%Y/%m/%d",
    "%d %B '%y",
    "%d %b '%y",
    "%B %d '%y",
    "%b %d '%y",
]

# Parsed against a leap reference year so that "29 feb" is accepted.
FORMATS_WITHOUT_YEAR = [
    "%B %d",
    "%b %d",
    "%m/%d",
    "%d %b",
    "%d %B",
]
_REFERENCE_YEAR = 2000


def normalize(expression: str) -> str:
    cleaned = expression.strip().lower()
    return ORDINAL_SUFFIX.sub(r"\1", cleaned)


def year_specified(text: str) -> bool:
    return bool(YEAR_TOKEN.search(text))


def next_weekday(today: date, weekday: int) -> date:
    """The next ``weekday`` strictly after ``today``."""
    days_ahead = (weekday - today.weekday()) % 7 or 7
    return today + timedelta(days=days_ahead)


def match_keyword(text: str, today: date) -> Optional[date]:
    keywords = {
        "anytime": lambda: today,
        "today": lambda: today,
        "tomorrow": lambda: today + timedelta(days=1),
        "next week": lambda: next_weekday(today, SUNDAY),
    }
    resolver = keywords.get(text)
    return resolver() if resolver else None


def match_week_in_month(text: str, today: date) -> Optional[date]:
    match = WEEK_IN_MONTH.search(text)
    if not match:
        return None
    month = MONTHS.get(match.group(1))
    if month is None:
        return None
    return date(today.year, month, 1)


def match_explicit_format(text: str, today: date) -> Optional[date]:
    for fmt in FORMATS_WITH_YEAR:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    for fmt in FORMATS_WITHOUT_YEAR:
        try:
            return datetime.strptime(f"{text} {_REFERENCE_YEAR}", f"{fmt} %Y").date()
        except ValueError:
            continue

    return None


def match_generic(text: str, today: date) -> Optional[date]:
    default = datetime(today.year, today.month, today.day)
    try:
        return date_parser.parse(text, default=default).date()
    except (ValueError, OverflowError):
        return None


@dataclass(frozen=True)
class DateStrategy:
    name: str
    match: Callable[[str, date], Optional[date]]
    # Whether a yearless result is moved to the current or next year.
    rolls_forward: bool


STRATEGIES = [
    DateStrategy("keyword", match_keyword, rolls_forward=False),
    DateStrategy("week_in_month", match_week_in_month, rolls_forward=False),
    DateStrategy("explicit_format", match_explicit_format, rolls_forward=True),
    DateStrategy("generic", match_generic, rolls_forward=True),
]


def _in_year(value: date, year: int) -> Optional[date]:
    try:
        return value.replace(year=year)
    except ValueError:
        return None


def roll_forward(value: date, today: date) -> Optional[date]:
    """Place a yearless date in the current year, or the next one if already past.

    Feb 29 keeps moving forward until a leap year accepts it.
    """
    for year in range(today.year, today.year + 9):
        candidate = _in_year(value, year)
        if candidate is not None and candidate >= today:
            return candidate
    return None


class DateResolver:
    def __init__(self, today_provider: Callable[[], date] = date.today, strategies=None):
        self.today_provider = today_provider
        self.strategies = strategies if strategies is not None else STRATEGIES

    def resolve_date(self, expression: Optional[str]) -> Optional[date]:
        if not expression or not expression.strip():
            return None

        text = normalize(expression)
        today = self.today_provider()

        for strategy in self.strategies:
            parsed = strategy.match(text, today)
            if parsed is None:
                continue

            if strategy.rolls_forward and not year_specified(text):
                parsed = roll_forward(parsed, today)
                if parsed is None:
                    continue

            logger.debug(f"Resolved date '{expression}' -> {parsed} via {strategy.name}")
            return parsed

        logger.warning(f"Could not resolve date expression: '{expression}'")
        return None

    def resolve(self, expression: Optional[str]) -> Optional[str]:
        """Resolve ``expression`` to an ISO date string, or None if unparseable."""
        resolved = self.resolve_date(expression)
        return resolved.isoformat() if resolved else None


# Global instance
date_resolver = DateResolver()
