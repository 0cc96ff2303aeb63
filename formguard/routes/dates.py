"""Date element routes: selectable range, disabled checks and value validation."""

from typing import List

from fastapi import APIRouter, HTTPException, Request

from formguard.dates import DateRestrictor
from formguard.languages import LANGUAGES
from formguard.logging_config import get_logger, log_date_event, log_request
from formguard.schemas import (
    DateCheckRequest,
    DateCheckResponse,
    DateConfig,
    DateRangeResponse,
    DateValidateRequest,
    DateValidateResponse,
    LanguageResponse,
)

router = APIRouter(prefix="/api", tags=["dates"])


def build_restrictor(config: DateConfig) -> DateRestrictor:
    """Create the restrictor for one request, turning configuration errors into 422s."""
    try:
        return DateRestrictor(
            config.format,
            direction=config.direction,
            disabled_dates=config.disabled_dates,
            enabled_dates=config.enabled_dates,
            language=config.language,
            reference_date=config.reference_date,
        )
    except ValueError as e:
        get_logger().warning(f"Invalid date configuration: {e}")
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/languages", response_model=List[LanguageResponse])
async def list_languages() -> List[LanguageResponse]:
    """Languages available for day and month names."""
    return [
        LanguageResponse(name=language.name, days=language.days, months=language.months)
        for language in LANGUAGES.values()
    ]


@router.post("/dates/range", response_model=DateRangeResponse)
def selectable_range(request: Request, payload: DateConfig) -> DateRangeResponse:
    """First and last selectable dates of a date element (null when unbounded)."""
    log_request(request)

    selectable = build_restrictor(payload).compute_selectable_range()
    log_date_event("range", request, payload.format, success=True)

    return DateRangeResponse(
        first_selectable=selectable.first_selectable,
        last_selectable=selectable.last_selectable,
    )


@router.post("/dates/disabled", response_model=DateCheckResponse)
def check_disabled(request: Request, payload: DateCheckRequest) -> DateCheckResponse:
    """Whether a year, a month, or a day cannot be selected."""
    log_request(request)

    if payload.day is not None and payload.month is None:
        raise HTTPException(status_code=422, detail="A day can only be checked together with its month")

    disabled = build_restrictor(payload).is_disabled(payload.year, payload.month, payload.day)
    log_date_event("disabled", request, payload.format, success=not disabled)

    return DateCheckResponse(disabled=disabled)


@router.post("/dates/validate", response_model=DateValidateResponse)
def validate_date(request: Request, payload: DateValidateRequest) -> DateValidateResponse:
    """Validate a submitted date against the element's format and restrictions.

    Valid values come back normalized to ``YYYY-MM-DD`` (plus ``HH:MM:SS`` when
    the format has a time part).
    """
    log_request(request)

    result = build_restrictor(payload).validate(payload.value)

    if not result.is_valid:
        log_date_event("validate", request, payload.format, success=False, reason=result.reason)
        return DateValidateResponse(valid=False, reason=result.reason)

    log_date_event("validate", request, payload.format, success=True)
    parsed_time = result.time
    return DateValidateResponse(
        valid=True,
        value=result.value,
        time=parsed_time.isoformat() if parsed_time is not None else None,
    )
