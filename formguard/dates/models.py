"""Value types shared by the date modules."""

from dataclasses import dataclass
from datetime import date, time
from typing import Optional, Tuple, Union

FORMAT_MISMATCH = "format_mismatch"
UNKNOWN_NAME = "unknown_name"
IMPOSSIBLE_DATE = "impossible_date"
DISABLED = "disabled"


def _unit(value: date, size: int) -> Tuple[int, ...]:
    return (value.year, value.month, value.day)[:size]


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of selectable dates; ``None`` means unbounded on that side."""

    first_selectable: Optional[date] = None
    last_selectable: Optional[date] = None

    @property
    def is_bounded(self) -> bool:
        return self.first_selectable is not None or self.last_selectable is not None

    def excludes(self, year: int, month: Optional[int] = None, day: Optional[int] = None) -> bool:
        """Whether the year, month or day lies entirely outside the range."""
        unit: Tuple[int, ...] = (year,)
        if month is not None:
            unit += (month,)
            if day is not None:
                unit += (day,)

        if self.first_selectable is not None and unit < _unit(self.first_selectable, len(unit)):
            return True
        if self.last_selectable is not None and unit > _unit(self.last_selectable, len(unit)):
            return True
        return False


@dataclass(frozen=True)
class NormalizedDate:
    """A submitted date that matched the format and exists in the calendar."""

    date: date
    hour: Optional[int] = None
    minute: Optional[int] = None
    second: Optional[int] = None

    is_valid = True

    @property
    def value(self) -> str:
        """The date as ``YYYY-MM-DD``."""
        return self.date.isoformat()

    @property
    def time(self) -> Optional[time]:
        if self.hour is None and self.minute is None and self.second is None:
            return None
        return time(self.hour or 0, self.minute or 0, self.second or 0)


@dataclass(frozen=True)
class InvalidDate:
    """A submitted date that was rejected, and why."""

    candidate: str
    reason: str

    is_valid = False


DateParseResult = Union[NormalizedDate, InvalidDate]
