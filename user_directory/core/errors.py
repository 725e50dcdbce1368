"""
Domain errors raised by the directory service and the user stores.
The HTTP layer maps each one to a JSON response (see ``install_error_handlers``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

if TYPE_CHECKING:
    from user_directory.schemas.user import FieldError


class DirectoryError(Exception):
    """Base class for all directory errors."""


class RecordValidationError(DirectoryError):
    """One or more fields failed validation. Carries every failure, not just the first."""

    def __init__(self, errors: list[FieldError]):
        self.errors = errors
        super().__init__("; ".join(f"{e.field}: {e.message}" for e in errors))


class UniquenessConflict(DirectoryError):
    """Another record already holds this email or phone."""

    def __init__(self, field: str, message: str | None = None):
        self.field = field
        self.message = message or _CONFLICT_MESSAGES.get(field, "Duplicate value detected")
        super().__init__(self.message)


class UserNotFound(DirectoryError):
    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User {user_id!r} not found")


class BackendUnavailable(DirectoryError):
    """Durable store unreachable at startup. Recovered by store selection."""


class ResetUnavailable(DirectoryError):
    """The active store cannot be reset."""


class InternalFailure(DirectoryError):
    """Unexpected store error during an operation."""


_CONFLICT_MESSAGES = {
    "email": "Email is already in use",
    "phone": "Phone number is already in use",
}


def install_error_handlers(app: FastAPI) -> None:
    """Register JSON renderers for the domain errors."""

    @app.exception_handler(RecordValidationError)
    async def validation_handler(request: Request, exc: RecordValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "message": "Validation Error",
                "errors": [e.model_dump() for e in exc.errors],
            },
        )

    @app.exception_handler(UniquenessConflict)
    async def conflict_handler(request: Request, exc: UniquenessConflict):
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"success": False, "message": exc.message, "field": exc.field},
        )

    @app.exception_handler(UserNotFound)
    async def not_found_handler(request: Request, exc: UserNotFound):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"success": False, "message": "User not found"},
        )

    @app.exception_handler(ResetUnavailable)
    async def reset_handler(request: Request, exc: ResetUnavailable):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "message": str(exc)},
        )

    @app.exception_handler(InternalFailure)
    async def internal_handler(request: Request, exc: InternalFailure):
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": "Server Error"},
        )
