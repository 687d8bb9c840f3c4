# harvest/domain/errors.py
"""
Domain exceptions.

They extend the built-in families the routers already translate:
ValueError -> 400, PermissionError -> 403, LookupError -> 404,
ConflictError -> 409. Other RuntimeErrors are bugs and stay 500s.
"""


class NotFoundError(LookupError):
    pass


class CapacityExceededError(ValueError):
    def __init__(self, message: str, data: dict | None = None):
        super().__init__(message)
        self.data = data or {}


class ConflictError(RuntimeError):
    pass
