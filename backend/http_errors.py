"""
Mapping from service-layer failures to HTTPException.

The app-level handlers in main.py turn `detail` into the JSON body:
a string becomes {"error": ...}; a dict is sent as-is.
"""
import logging

from fastapi import HTTPException, status

from errors import DomainError, NotFoundError

logger = logging.getLogger(__name__)


def domain_error(exc: DomainError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def server_error(action: str, exc: Exception) -> HTTPException:
    """Log an unexpected failure and build the 500 response for it."""
    logger.exception("Error while trying to %s", action.lower())
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": f"Failed to {action}", "message": str(exc) or exc.__class__.__name__},
    )
