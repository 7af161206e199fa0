"""
Domain errors raised by the service layer.

Each failure origin has its own exception class carrying the HTTP
status the API answers with.  Every error renders as a JSON body of
the form ``{"message": ..., "error": ...}``; see ``main.create_app``
for the exception handlers.
"""

from typing import Any, Optional

from fastapi import status


class OrderChangeError(Exception):
    """Base class for errors raised while handling order changes."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, error: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.error = error

    def to_dict(self) -> dict:
        return {"message": self.message, "error": self.error}


class ValidationError(OrderChangeError):
    """The request is malformed: bad body, bad pagination bounds."""

    status_code = status.HTTP_400_BAD_REQUEST


class InvalidIdentifierError(ValidationError):
    """An identifier is not a valid document id."""


class NotFoundError(OrderChangeError):
    """No document exists with the requested id."""

    status_code = status.HTTP_404_NOT_FOUND


class PersistenceError(OrderChangeError):
    """The database rejected the operation or could not be reached."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
