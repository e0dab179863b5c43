"""Shared API helpers for route handlers."""

from fastapi import HTTPException

from services.exceptions import (
    ConflictError,
    InsufficientQuantityError,
    LedgerError,
    LedgerValidationError,
    NotFoundError,
)


def http_error(exc: LedgerError) -> HTTPException:
    """Map a service-layer exception onto an HTTPException.

    Args:
        exc: The exception raised by a service.

    Returns:
        HTTPException with the matching status code and the exception
        message as ``detail``.
    """
    if isinstance(exc, NotFoundError):
        status = 404
    elif isinstance(exc, ConflictError):
        status = 409
    elif isinstance(exc, (InsufficientQuantityError, LedgerValidationError)):
        status = 400
    else:
        status = 500
    return HTTPException(status_code=status, detail=str(exc))
