"""Date range restrictions and date format validation for date elements."""

from .formats import DateFormatSpec, parse_date
from .models import DateRange, InvalidDate, NormalizedDate
from .restrictor import DateRestrictor
from .rules import DateRule

__all__ = [
    "DateFormatSpec",
    "DateRange",
    "DateRestrictor",
    "DateRule",
    "InvalidDate",
    "NormalizedDate",
    "parse_date",
]
