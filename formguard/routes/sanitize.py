"""Sanitization routes."""

from fastapi import APIRouter, Request

from formguard.logging_config import log_request, log_sanitize_event
from formguard.schemas import SanitizeRequest, SanitizeResponse
from formguard.security import sanitize

router = APIRouter(prefix="/api", tags=["sanitize"])


def _count_values(value) -> int:
    if isinstance(value, dict):
        return len(value)
    if isinstance(value, list):
        return len(value)
    return 1


@router.post("/sanitize", response_model=SanitizeResponse)
def sanitize_value(request: Request, payload: SanitizeRequest) -> SanitizeResponse:
    """Sanitize a submitted value, a list of values, or a mapping of field names to values.

    The response has the same shape as the submitted value.
    """
    log_request(request)

    cleaned = sanitize(payload.value)
    changed = cleaned != payload.value
    log_sanitize_event(request, _count_values(payload.value), changed)

    return SanitizeResponse(value=cleaned, changed=changed)
