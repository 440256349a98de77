"""Error handling middleware."""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from convconv.models.errors import (
    ConvConvError,
    ErrorResponse,
    JobStateError,
    NotFoundError,
    StorageError,
    ValidationError,
)

logger = logging.getLogger(__name__)


async def convconv_error_handler(request: Request, exc: ConvConvError) -> JSONResponse:
    """Handle ConvConvError exceptions."""
    status_code = _get_status_code(exc)
    if status_code >= 500:
        logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    response = ErrorResponse.from_exception(
        exc, guidance=_get_guidance(exc), retry=_is_retryable(exc)
    )
    return JSONResponse(status_code=status_code, content=response.to_wire())


def _get_status_code(exc: ConvConvError) -> int:
    """Map error type to HTTP status code."""
    if isinstance(exc, ValidationError):
        return 400
    elif isinstance(exc, NotFoundError):
        return 404
    elif isinstance(exc, JobStateError):
        return 409
    return 500


def _get_guidance(exc: ConvConvError) -> str:
    """Generate actionable guidance based on error type."""
    if isinstance(exc, ValidationError):
        return "Check the uploaded file path, output format, and options."
    if isinstance(exc, NotFoundError):
        return "Check the job ID; jobs are only kept while the server runs."
    if isinstance(exc, JobStateError):
        return "Poll the job status and retry once it allows this action."
    return "Please try again or contact support."


def _is_retryable(exc: ConvConvError) -> bool:
    return isinstance(exc, (JobStateError, StorageError))
