from datetime import date
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field

SubmittedValue = Union[str, List[str], Dict[str, str]]
DirectionItem = Union[bool, int, str]


class SanitizeRequest(BaseModel):
    value: SubmittedValue


class SanitizeResponse(BaseModel):
    value: SubmittedValue
    changed: bool


class DateConfig(BaseModel):
    """Configuration of one date element."""

    format: str = Field("Y-m-d", min_length=1)
    direction: Union[DirectionItem, List[DirectionItem]] = 0
    disabled_dates: List[str] = Field(default_factory=list)
    enabled_dates: List[str] = Field(default_factory=list)
    language: Optional[str] = None
    reference_date: Optional[date] = Field(
        None, description="Defaults to today; the paired element's date when chained"
    )


class DateCheckRequest(DateConfig):
    year: int
    month: Optional[int] = None
    day: Optional[int] = None


class DateValidateRequest(DateConfig):
    value: str


class DateRangeResponse(BaseModel):
    first_selectable: Optional[date] = None
    last_selectable: Optional[date] = None


class DateCheckResponse(BaseModel):
    disabled: bool


class DateValidateResponse(BaseModel):
    valid: bool
    value: Optional[str] = None
    time: Optional[str] = None
    reason: Optional[str] = None


class LanguageResponse(BaseModel):
    name: str
    days: List[str]
    months: List[str]
