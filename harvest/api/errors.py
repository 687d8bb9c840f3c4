# harvest/api/errors.py
from typing import Any

from fastapi import HTTPException

from harvest.domain.errors import CapacityExceededError, ConflictError


class ApiError(HTTPException):
    """HTTPException that also carries a `data` block for the error envelope."""

    def __init__(self, status_code: int, detail: str, data: Any = None):
        super().__init__(status_code=status_code, detail=detail)
        self.data = data


def to_http(e: Exception) -> HTTPException:
    """Map a service exception to the HTTP error the client sees."""
    if isinstance(e, CapacityExceededError):
        return ApiError(400, str(e), data=e.data)
    if isinstance(e, PermissionError):
        return HTTPException(status_code=403, detail=str(e))
    if isinstance(e, LookupError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, ConflictError):
        return HTTPException(status_code=409, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))


# what services raise on purpose; anything else is a 500
DOMAIN_ERRORS = (ValueError, PermissionError, LookupError, ConflictError)
