"""Day and month names for the supported languages.

Date formats may contain textual tokens (``D``, ``l``, ``M``, ``F``); the names
submitted for those tokens are looked up in the active language and mapped back
to their position, Sunday first for days and January first for months.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from formguard.config import get_default_language


class Language(BaseModel):
    """Day and month names of one locale."""

    model_config = {"frozen": True}

    name: str
    days: List[str] = Field(..., min_length=7, max_length=7, description="Sunday first")
    months: List[str] = Field(..., min_length=12, max_length=12, description="January first")
    days_abbr: Optional[List[str]] = None
    months_abbr: Optional[List[str]] = None

    @field_validator("days_abbr")
    @classmethod
    def _check_days_abbr(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is not None and len(value) != 7:
            raise ValueError("days_abbr must contain exactly 7 names")
        return value

    @field_validator("months_abbr")
    @classmethod
    def _check_months_abbr(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is not None and len(value) != 12:
            raise ValueError("months_abbr must contain exactly 12 names")
        return value

    def day_abbreviations(self) -> List[str]:
        """Abbreviated day names, defaulting to the first 3 letters of each name."""
        return list(self.days_abbr) if self.days_abbr else [day[:3] for day in self.days]

    def month_abbreviations(self) -> List[str]:
        """Abbreviated month names, defaulting to the first 3 letters of each name."""
        if self.months_abbr:
            return list(self.months_abbr)
        return [month[:3] for month in self.months]


ENGLISH = Language(
    name="english",
    days=["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"],
    months=[
        "January",
        "February",
        "March",
        "April",
        "May",
        "June",
        "July",
        "August",
        "September",
        "October",
        "November",
        "December",
    ],
)

ROMANIAN = Language(
    name="romanian",
    days=["Duminică", "Luni", "Marți", "Miercuri", "Joi", "Vineri", "Sâmbătă"],
    months=[
        "Ianuarie",
        "Februarie",
        "Martie",
        "Aprilie",
        "Mai",
        "Iunie",
        "Iulie",
        "August",
        "Septembrie",
        "Octombrie",
        "Noiembrie",
        "Decembrie",
    ],
)

AFRIKAANS = Language(
    name="afrikaans",
    days=["Sondag", "Maandag", "Dinsdag", "Woensdag", "Donderdag", "Vrydag", "Saterdag"],
    months=[
        "Januarie",
        "Februarie",
        "Maart",
        "April",
        "Mei",
        "Junie",
        "Julie",
        "Augustus",
        "September",
        "Oktober",
        "November",
        "Desember",
    ],
)

# Japanese has no abbreviations, the short forms are the names themselves
JAPANESE = Language(
    name="japanese",
    days=["日", "月", "火", "水", "木", "金", "土"],
    months=[
        "１月",
        "２月",
        "３月",
        "４月",
        "５月",
        "６月",
        "７月",
        "８月",
        "９月",
        "１０月",
        "１１月",
        "１２月",
    ],
    days_abbr=["日", "月", "火", "水", "木", "金", "土"],
    months_abbr=[
        "１月",
        "２月",
        "３月",
        "４月",
        "５月",
        "６月",
        "７月",
        "８月",
        "９月",
        "１０月",
        "１１月",
        "１２月",
    ],
)

LANGUAGES: Dict[str, Language] = {
    language.name: language for language in (ENGLISH, ROMANIAN, AFRIKAANS, JAPANESE)
}


def get_language(name: Optional[str] = None) -> Language:
    """Return the language registered under ``name`` (the configured default if omitted).

    Raises:
        ValueError: if no language is registered under that name
    """
    key = (name or get_default_language()).strip().lower()
    try:
        return LANGUAGES[key]
    except KeyError:
        raise ValueError(
            f"Unknown language: {key}. Available: {', '.join(sorted(LANGUAGES))}"
        ) from None
