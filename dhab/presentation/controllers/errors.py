"""Mapping of unexpected failures onto HTTP 500 responses."""

from fastapi import HTTPException, status

from dhab.shared import get_logger

logger = get_logger(__name__)

GENERIC_ERROR = "Internal server error"


def internal_server_error(
    exc: Exception, *, event: str, expose_details: bool, **context
) -> HTTPException:
    """Log ``exc`` and build the 500 response.

    The exception text is only echoed back when ``expose_details`` is set,
    which the container disables in production.
    """
    logger.error(event, error=str(exc), exc_info=exc, **context)
    detail = f"{GENERIC_ERROR}: {exc}" if expose_details else GENERIC_ERROR
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail
    )
