"""Date format compiling and parsing.

Formats use PHP ``date()`` characters; every other character is a literal
separator::

    d  day of the month, 01 to 31          D  day name, abbreviated
    j  day of the month, 1 to 31           l  day name, full
    N  ISO day of the week, 1 to 7         S  ordinal suffix (st, nd, rd, th)
    w  day of the week, 0 to 6             F  month name, full
    m  month, 01 to 12                     M  month name, abbreviated
    n  month, 1 to 12                      Y  year, 4 digits
    y  year, 2 digits                      G  hour 0 to 23, H  hour 00 to 23
    g  hour 0 to 12, h  hour 00 to 12      a, A  am or pm
    i  minutes, 00 to 59                   s  seconds, 00 to 59

``d`` and ``m`` also accept values without the leading zero. Whitespace around a
submitted value is ignored, so " 2024-03-05 " parses like "2024-03-05".
"""

from dataclasses import dataclass
from datetime import date, timedelta
import re
from typing import List, Optional, Tuple

from formguard.dates.models import (
    FORMAT_MISMATCH,
    IMPOSSIBLE_DATE,
    UNKNOWN_NAME,
    DateParseResult,
    InvalidDate,
    NormalizedDate,
)
from formguard.languages import Language

TOKEN_PATTERNS = {
    "d": r"0?[1-9]|[12][0-9]|3[01]",
    "D": r"\w+?",
    "j": r"[1-9]|[12][0-9]|3[01]",
    "l": r"\w+?",
    "N": r"[1-7]",
    "S": r"st|nd|rd|th",
    "w": r"[0-6]",
    "F": r"\w+?",
    "m": r"0?[1-9]|1[0-2]",
    "M": r"\w+?",
    "n": r"[1-9]|1[0-2]",
    "Y": r"[0-9]{4}",
    "y": r"[0-9]{2}",
    "G": r"[0-9]|1[0-9]|2[0-3]",
    "H": r"[01][0-9]|2[0-3]",
    "g": r"[0-9]|1[0-2]",
    "h": r"0[0-9]|1[0-2]",
    "a": r"am|pm",
    "A": r"am|pm",
    "i": r"[0-5][0-9]",
    "s": r"[0-5][0-9]",
}

TIME_TOKENS = frozenset("GHghaAis")


@dataclass(frozen=True)
class DateFormatSpec:
    """A date format compiled into an anchored, case-insensitive regular expression."""

    format: str
    tokens: Tuple[str, ...]
    pattern: "re.Pattern[str]"

    @classmethod
    def compile(cls, date_format: str) -> "DateFormatSpec":
        tokens: List[str] = []
        parts: List[str] = []
        for char in date_format:
            if char in TOKEN_PATTERNS:
                tokens.append(char)
                parts.append("(" + TOKEN_PATTERNS[char] + ")")
            else:
                parts.append(re.escape(char))

        return cls(
            format=date_format,
            tokens=tuple(tokens),
            pattern=re.compile("".join(parts), re.IGNORECASE),
        )

    @property
    def has_time(self) -> bool:
        return any(token in TIME_TOKENS for token in self.tokens)

    def match(self, candidate: str) -> Optional[List[Tuple[str, str]]]:
        """Pair every token of the format with the text it matched, or None."""
        if not self.tokens:
            return None
        found = self.pattern.fullmatch(candidate)
        if found is None:
            return None
        return list(zip(self.tokens, found.groups()))


def roll_date(year: int, month: int, day: int) -> date:
    """Calendar-normalize a triple, rolling overflow into the next months (2011-05-33 is 2011-06-02).

    Raises:
        ValueError: if the year or month is outside what ``datetime.date`` supports
        OverflowError: if rolling leaves the supported range
    """
    return date(year, month, 1) + timedelta(days=day - 1)


def lookup_name(token: str, text: str, language: Language) -> Optional[int]:
    """Position of a day or month name in the language, or None if unknown."""
    if token == "D":
        names = language.day_abbreviations()
    elif token == "l":
        names = language.days
    elif token == "M":
        names = language.month_abbreviations()
    else:
        names = language.months

    folded = text.casefold()
    for index, name in enumerate(names):
        if name.casefold() == folded:
            return index
    return None


def parse_date(
    spec: DateFormatSpec, candidate: str, language: Language, default_year: int
) -> DateParseResult:
    """Parse a submitted value against a compiled format.

    Missing parts default to the 1st, January and ``default_year``. A value
    that matches the format but names a day the calendar does not have (for
    example "Feb 31, 2024") is rejected rather than rolled over.
    """
    segments = spec.match(candidate.strip())
    if segments is None:
        return InvalidDate(candidate, FORMAT_MISMATCH)

    year = month = day = None
    hour = minute = second = None
    meridiem = None

    for token, text in segments:
        if token in "mn":
            month = int(text)
        elif token in "dj":
            day = int(text)
        elif token in "DlMF":
            index = lookup_name(token, text, language)
            if index is None:
                return InvalidDate(candidate, UNKNOWN_NAME)
            if token in "MF":
                month = index + 1
        elif token == "Y":
            year = int(text)
        elif token == "y":
            year = int("19" + text)
        elif token in "GHgh":
            hour = int(text)
        elif token in "aA":
            meridiem = text.lower()
        elif token == "i":
            minute = int(text)
        elif token == "s":
            second = int(text)

    year = default_year if year is None else year
    month = 1 if month is None else month
    day = 1 if day is None else day

    try:
        normalized = roll_date(year, month, day)
    except (ValueError, OverflowError):
        return InvalidDate(candidate, IMPOSSIBLE_DATE)

    if (normalized.year, normalized.month, normalized.day) != (year, month, day):
        return InvalidDate(candidate, IMPOSSIBLE_DATE)

    if hour is not None and meridiem is not None:
        hour = hour % 12 + (12 if meridiem == "pm" else 0)

    return NormalizedDate(normalized, hour=hour, minute=minute, second=second)
