# File: app/core/errors.py
"""Domain errors raised by the service layer.

Routers let these propagate; the handlers registered in ``app.main`` turn
each kind into a JSON ``{"detail": ...}`` response with its status code.
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse


class AppError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """A required field is missing or a value is out of range."""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class PermissionDenied(AppError):
    status_code = status.HTTP_403_FORBIDDEN


class ConstraintViolation(AppError):
    """Uniqueness or foreign-key conflict."""
    status_code = status.HTTP_409_CONFLICT


class StorageError(AppError):
    """Photo upload or public URL resolution failed."""
    status_code = status.HTTP_502_BAD_GATEWAY


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})
