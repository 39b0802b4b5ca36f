"""Domain errors raised by the service layer.

Routers do not translate these by hand: ``register_exception_handlers``
renders every :class:`ContactManagerError` as a JSON response carrying the
error's HTTP status, using the same ``detail`` key as FastAPI's
``HTTPException``.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse


class ContactManagerError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "INTERNAL_SERVER_ERROR"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code}


class InvalidArgument(ContactManagerError):
    """Malformed input such as an out-of-range page or limit."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "BAD_REQUEST"
    default_message = "Invalid argument"


class Forbidden(ContactManagerError):
    """Caller is not allowed to perform the operation."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    default_message = "Forbidden"


class NotFound(ContactManagerError):
    """Resource is absent or outside the caller's effective scope."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    default_message = "Not found"


class Conflict(ContactManagerError):
    """Operation clashes with existing state, e.g. a duplicate email."""

    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
    default_message = "Conflict"


class Unexpected(ContactManagerError):
    """Wraps infrastructure failures. The cause is logged, never returned."""


async def contact_manager_error_handler(
    request: Request, exc: ContactManagerError
) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the domain error handler to ``app``."""
    app.add_exception_handler(ContactManagerError, contact_manager_error_handler)
