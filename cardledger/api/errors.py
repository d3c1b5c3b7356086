"""
Translation of core failures into HTTP responses.

The core raises CardLedgerError subclasses; this module is the only place
that decides which status code a failure kind becomes.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from cardledger.models.failure import CardLedgerError, FailureKind, UpstreamUnavailableError

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[FailureKind, int] = {
    FailureKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    # Several printings match: the body lists them for the caller to pick
    FailureKind.AMBIGUOUS: status.HTTP_300_MULTIPLE_CHOICES,
    FailureKind.CONFLICT: status.HTTP_409_CONFLICT,
    FailureKind.INVALID_ARGUMENT: status.HTTP_400_BAD_REQUEST,
    FailureKind.UPSTREAM_UNAVAILABLE: status.HTTP_502_BAD_GATEWAY,
    FailureKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(error: CardLedgerError) -> int:
    """HTTP status code for a core failure."""
    if isinstance(error, UpstreamUnavailableError) and not error.retryable:
        return status.HTTP_404_NOT_FOUND
    return STATUS_BY_KIND.get(error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)


async def card_ledger_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Render a CardLedgerError as {"error": FailureDetail}."""
    if not isinstance(exc, CardLedgerError):
        raise exc

    status_code = status_for(exc)
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s: %s (%s)", exc.kind.value, exc.message, exc.detail)

    return JSONResponse(
        status_code=status_code,
        content={"error": exc.to_detail().model_dump(mode="json", exclude_none=True)},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Install the core failure handler on an application."""
    app.add_exception_handler(CardLedgerError, card_ledger_error_handler)
