"""Cron-like rules for disabling (or re-enabling) calendar dates.

A rule reads ``"<days> <months> <years> [weekdays]"``. Each part is ``*``, a
number, a comma separated list, a dash range, or a mix of these::

    "1 1 2022"          January 1, 2022
    "* 1 2022"          all of January 2022
    "1-10,20 1-3 *"     1st to 10th and the 20th of January to March, every year
    "* * * 0,6"         every Saturday and Sunday

Weekdays go from 0 (Sunday) to 6 (Saturday). Missing parts default to ``*``.
"""

from dataclasses import dataclass
from datetime import date
import logging
import re
from typing import FrozenSet, Iterable, Optional, Tuple

logger = logging.getLogger(__name__)

RANGE_PATTERN = re.compile(r"^([0-9]+)-([0-9]+)")

# None stands for the "*" wildcard
Values = Optional[FrozenSet[int]]

# Smallest and largest value of days, months, years and weekdays
LIMITS = ((1, 31), (1, 12), (date.min.year, date.max.year), (0, 6))


def weekday(year: int, month: int, day: int) -> int:
    """Day of the week from 0 (Sunday) to 6 (Saturday)."""
    return date(year, month, day).isoweekday() % 7


def _contains(values: Values, value: int) -> bool:
    return values is None or value in values


def parse_values(text: str, limits: Optional[Tuple[int, int]] = None) -> Values:
    """Expand one part of a rule into the set of values it covers.

    Ranges are clipped to ``limits`` (inclusive) when given.
    """
    values = set()
    for item in text.split(","):
        item = item.strip()
        if item == "*":
            return None
        if not item:
            continue

        if "-" in item:
            bounds = RANGE_PATTERN.match(item)
            if bounds is None:
                logger.warning(f"Ignoring malformed range in date rule: {item!r}")
                continue
            try:
                start, stop = int(bounds.group(1)), int(bounds.group(2))
            except ValueError:
                logger.warning(f"Ignoring malformed range in date rule: {item!r}")
                continue
            if limits is not None:
                start, stop = max(start, limits[0]), min(stop, limits[1])
            values.update(range(start, stop + 1))
            continue

        try:
            # "01" and "1" are the same value
            values.add(int(item))
        except ValueError:
            logger.warning(f"Ignoring malformed value in date rule: {item!r}")

    return frozenset(values)


@dataclass(frozen=True)
class DateRule:
    days: Values = None
    months: Values = None
    years: Values = None
    weekdays: Values = None
    source: str = "* * *"

    @classmethod
    def parse(cls, rule: str) -> "DateRule":
        parts = rule.split()
        if len(parts) > 4:
            logger.warning(f"Ignoring extra parts in date rule: {rule!r}")
        parts = (parts + ["*"] * 4)[:4]

        days, months, years, weekdays = (
            parse_values(part, limits) for part, limits in zip(parts, LIMITS)
        )
        return cls(days=days, months=months, years=years, weekdays=weekdays, source=rule)

    def matches(self, year: int, month: Optional[int] = None, day: Optional[int] = None) -> bool:
        """Whether the rule covers the whole year, month or day.

        A year (or month) is only covered when the rule applies to every day in
        it, so the parts that were not given must be wildcards. Weekdays only
        apply when checking a day.
        """
        if not _contains(self.years, year):
            return False
        if month is None:
            return self.months is None and self.days is None and self.weekdays is None
        if not _contains(self.months, month):
            return False
        if day is None:
            return self.days is None and self.weekdays is None
        if not _contains(self.days, day):
            return False
        return self.weekdays is None or weekday(year, month, day) in self.weekdays

    def overlaps(self, year: int, month: Optional[int] = None, day: Optional[int] = None) -> bool:
        """Whether the rule covers at least one day of the year, month or day."""
        if not _contains(self.years, year):
            return False
        if month is None:
            return True
        if not _contains(self.months, month):
            return False
        if day is None:
            return True
        if not _contains(self.days, day):
            return False
        return self.weekdays is None or weekday(year, month, day) in self.weekdays


def parse_rules(rules: Optional[Iterable[str]]) -> Tuple[DateRule, ...]:
    if not rules:
        return ()
    return tuple(DateRule.parse(rule) for rule in rules if isinstance(rule, str) and rule.strip())
