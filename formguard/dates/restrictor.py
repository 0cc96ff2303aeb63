"""Selectable-date computation for date picker elements.

A ``DateRestrictor`` is built from the element's format, direction and
disabled/enabled date rules. It works out the first and last selectable dates,
answers whether a year, month or day can be picked, and validates submitted
values. Instances are meant to live for one render or validation pass: the
parsed rules and the range are computed once and then reused.

Direction values::

    0                   no restriction
    True / False        future only / past only, starting / ending on the reference date
    5 / -5              starts 5 days after / ends 5 days before the reference date
    [True, 10]          starts on the reference date, ends 10 days later
    [0, 10]             same as [True, 10]
    [3, False]          starts 3 days after the reference date, no end
    ["2024-03-01", "2024-03-10"]  literal dates, in the element's format
    ["20240301", "5"]   with format "Ymd": a literal start date, an offset end
    [-1, 30]            ends the day before the reference date, starts 30 days before that
    [False, "2024-01-01"]  ends on the reference date, starts on the literal date

Strings in a pair are read as dates in the element's format first and as day
offsets only when they do not parse.

The reference date is today unless given, e.g. the date selected in a paired
element.
"""

import calendar
from datetime import date, datetime, timedelta
import logging
import re
from typing import Any, Iterable, Optional, Sequence, Tuple, Union

from formguard.dates.formats import DateFormatSpec, parse_date
from formguard.dates.models import DISABLED, FORMAT_MISMATCH, DateParseResult, DateRange, InvalidDate
from formguard.dates.rules import DateRule, parse_rules
from formguard.languages import Language, get_language

logger = logging.getLogger(__name__)

# How far the first/last selectable date may be pushed over disabled dates
MAX_WALK_YEARS = 200

INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")

Direction = Union[bool, int, str, Sequence[Any]]


def _coerce(value: Any) -> Any:
    """Turn integer-looking strings into integers, leave everything else alone."""
    if isinstance(value, str) and INTEGER_PATTERN.match(value.strip()):
        return int(value)
    return value


def _is_offset(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _shift(value: date, days: int) -> date:
    try:
        return value + timedelta(days=days)
    except OverflowError:
        return date.max if days > 0 else date.min


def _last_day(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


class DateRestrictor:
    """Works out which dates a date element accepts."""

    def __init__(
        self,
        date_format: str = "Y-m-d",
        direction: Direction = 0,
        disabled_dates: Optional[Iterable[str]] = None,
        enabled_dates: Optional[Iterable[str]] = None,
        language: Union[Language, str, None] = None,
        reference_date: Union[date, datetime, None] = None,
    ):
        self.format = DateFormatSpec.compile(date_format)
        self.disabled_dates = tuple(disabled_dates or ())
        self.enabled_dates = tuple(enabled_dates or ())
        self.language = language if isinstance(language, Language) else get_language(language)

        if isinstance(reference_date, datetime):
            reference_date = reference_date.date()
        self.reference_date = reference_date or date.today()

        self.direction = self._check_direction(direction)

        self._rules: Optional[Tuple[DateRule, ...]] = None
        self._enabled_rules: Optional[Tuple[DateRule, ...]] = None
        self._range: Optional[DateRange] = None

    def _check_direction(self, direction: Direction) -> Direction:
        if isinstance(direction, (list, tuple)):
            if len(direction) != 2:
                raise ValueError(f"Direction pair must have 2 items, got {len(direction)}")
            return (self._pair_side(direction[0]), self._pair_side(direction[1]))

        direction = _coerce(direction)
        if isinstance(direction, bool) or _is_offset(direction):
            return direction

        logger.warning(f"Unsupported date direction {direction!r}, calendar is unrestricted")
        return 0

    def _pair_side(self, value: Any) -> Any:
        """A date if the value parses in the element's format, else the value as an offset."""
        if isinstance(value, str):
            result = self.parse_and_validate(value)
            if result.is_valid:
                return result.date
        return _coerce(value)

    @property
    def rules(self) -> Tuple[DateRule, ...]:
        """Parsed disabled-date rules."""
        if self._rules is None:
            self._rules = parse_rules(self.disabled_dates)
        return self._rules

    @property
    def enabled_rules(self) -> Tuple[DateRule, ...]:
        """Parsed enabled-date rules, exceptions to the disabled ones."""
        if self._enabled_rules is None:
            self._enabled_rules = parse_rules(self.enabled_dates)
        return self._enabled_rules

    def parse_and_validate(self, candidate: str) -> DateParseResult:
        """Parse a submitted value against the element's format.

        Returns:
            A ``NormalizedDate`` (``value`` is ``YYYY-MM-DD``) or an ``InvalidDate``
        """
        if not isinstance(candidate, str):
            return InvalidDate(str(candidate), FORMAT_MISMATCH)
        return parse_date(self.format, candidate, self.language, self.reference_date.year)

    def validate(self, candidate: str) -> DateParseResult:
        """Like ``parse_and_validate``, also rejecting dates that cannot be selected."""
        result = self.parse_and_validate(candidate)
        if not result.is_valid:
            return result

        parsed = result.date
        if self.is_disabled(parsed.year, parsed.month, parsed.day):
            return InvalidDate(candidate, DISABLED)
        return result

    def is_disabled(self, year: int, month: Optional[int] = None, day: Optional[int] = None) -> bool:
        """Whether a whole year, a whole month, or a single day cannot be selected.

        Raises:
            ValueError: if a day is given without a month
        """
        if day is not None and month is None:
            raise ValueError("A day can only be checked together with its month")

        # Units that do not exist in the calendar cannot be picked
        if not date.min.year <= year <= date.max.year:
            return True
        if month is not None and not 1 <= month <= 12:
            return True
        if day is not None and not 1 <= day <= _last_day(year, month):
            return True

        return self._is_disabled(year, month, day, self.compute_selectable_range())

    def compute_selectable_range(self) -> DateRange:
        """First and last selectable dates, moved past any disabled dates."""
        if self._range is None:
            first, last = self._resolve_direction()
            raw = DateRange(first, last)

            if first is not None:
                first = self._walk(first, 1, last, raw) or first
            if last is not None:
                last = self._walk(last, -1, first, DateRange(first, last)) or last

            self._range = DateRange(first, last)
            logger.debug(
                f"Selectable range for format {self.format.format!r}: "
                f"{self._range.first_selectable} - {self._range.last_selectable}"
            )

        return self._range

    def _literal(self, value: Any) -> Optional[date]:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            result = self.parse_and_validate(value)
            if result.is_valid:
                return result.date
            logger.warning(f"Ignoring direction date {value!r}: {result.reason}")
        return None

    def _resolve_direction(self) -> Tuple[Optional[date], Optional[date]]:
        """Raw first and last selectable dates, before skipping disabled dates."""
        direction = self.direction
        reference = self.reference_date

        if direction is True:
            return reference, None
        if direction is False:
            return None, reference
        if _is_offset(direction):
            if direction > 0:
                return _shift(reference, direction), None
            if direction < 0:
                return None, _shift(reference, direction)
            return None, None

        start, end = direction
        start_date = self._literal(start)
        end_date = self._literal(end)

        # Future: starts on/after the reference date
        if (start is True or (_is_offset(start) and start >= 0) or start_date is not None) and (
            end is False or (_is_offset(end) and end >= 0) or end_date is not None
        ):
            first = start_date or _shift(reference, 0 if start is True else start)
            last = None
            if end_date is not None:
                if end_date >= first:
                    last = end_date
                else:
                    logger.warning(f"Ignoring end date {end!r}, it falls before {first}")
            elif end is not False:
                last = _shift(first, end)
            return first, last

        # Past: ends on/before the reference date
        if (start is False or (_is_offset(start) and start < 0)) and (
            (_is_offset(end) and end >= 0) or end_date is not None
        ):
            last = _shift(reference, 0 if start is False else start)
            first = None
            if end_date is not None:
                if end_date <= last:
                    first = end_date
                else:
                    logger.warning(f"Ignoring start date {end!r}, it falls after {last}")
            else:
                first = _shift(last, -end)
            return first, last

        logger.warning(f"Unsupported date direction {direction!r}, calendar is unrestricted")
        return None, None

    def _is_disabled(
        self, year: int, month: Optional[int], day: Optional[int], bounds: DateRange
    ) -> bool:
        if bounds.excludes(year, month, day):
            return True
        if not any(rule.matches(year, month, day) for rule in self.rules):
            return False
        return not any(rule.overlaps(year, month, day) for rule in self.enabled_rules)

    def _walk(
        self, start: date, step: int, limit: Optional[date], bounds: DateRange
    ) -> Optional[date]:
        """Closest selectable date from ``start`` in the direction of ``step``.

        Whole years are skipped first, then whole months, then single days.
        Returns None when no selectable date exists before ``limit``.
        """
        if not self._is_disabled(start.year, start.month, start.day, bounds):
            return start

        forward = step > 0

        def beyond(unit: Tuple[int, ...]) -> bool:
            if limit is None:
                return False
            edge = (limit.year, limit.month, limit.day)[: len(unit)]
            return unit > edge if forward else unit < edge

        year, month = start.year, start.month

        scanned = 0
        while self._is_disabled(year, None, None, bounds):
            year += step
            scanned += 1
            if scanned > MAX_WALK_YEARS or beyond((year,)) or not date.min.year <= year <= date.max.year:
                return None
        if year != start.year:
            month = 1 if forward else 12

        scanned = 0
        while self._is_disabled(year, month, None, bounds):
            month += step
            if month > 12:
                year, month = year + 1, 1
            elif month < 1:
                year, month = year - 1, 12
            scanned += 1
            if (
                scanned > 12 * MAX_WALK_YEARS
                or beyond((year, month))
                or not date.min.year <= year <= date.max.year
            ):
                return None

        if (year, month) == (start.year, start.month):
            current = start
        else:
            current = date(year, month, 1 if forward else _last_day(year, month))

        scanned = 0
        while self._is_disabled(current.year, current.month, current.day, bounds):
            if current in (date.min, date.max):
                return None
            current = current + timedelta(days=step)
            scanned += 1
            if scanned > 366 * MAX_WALK_YEARS or beyond((current.year, current.month, current.day)):
                return None

        return current
