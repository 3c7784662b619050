"""Single boundary mapping domain errors to HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from user_auth.application.services.user_directory_service import (
    EmailAlreadyInUseError,
    UserNotFoundError,
)
from user_auth.infrastructure.http.auth_guard import InvalidAuthTokenError, MissingAuthTokenError

logger = logging.getLogger(__name__)

_BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


class InvalidCredentialsError(PermissionError):
    """Raised at the HTTP edge when login credentials are rejected."""

    def __init__(self) -> None:
        super().__init__("invalid credentials")


def to_error_response(exc: Exception) -> JSONResponse:
    """Map one exception from the closed error taxonomy to a JSON response.

    Anything outside the taxonomy becomes an opaque 500.
    """

    if isinstance(exc, InvalidCredentialsError | MissingAuthTokenError | InvalidAuthTokenError):
        return JSONResponse(
            status_code=401,
            content={"detail": str(exc)},
            headers=_BEARER_CHALLENGE,
        )
    if isinstance(exc, EmailAlreadyInUseError):
        return JSONResponse(
            status_code=409,
            content={"detail": str(exc), "field": exc.field},
        )
    if isinstance(exc, UserNotFoundError):
        return JSONResponse(status_code=404, content={"detail": "user not found"})

    logger.error("unhandled_request_error", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "internal server error"})


async def _handle_domain_error(request: Request, exc: Exception) -> JSONResponse:
    _ = request
    return to_error_response(exc)


def register_error_handlers(app: FastAPI) -> None:
    """Install the boundary mapping for every domain error type.

    The `Exception` entry is served by Starlette's outermost error middleware,
    so unexpected failures still get the JSON envelope.
    """

    for error_type in (
        InvalidCredentialsError,
        MissingAuthTokenError,
        InvalidAuthTokenError,
        EmailAlreadyInUseError,
        UserNotFoundError,
    ):
        app.add_exception_handler(error_type, _handle_domain_error)
    app.add_exception_handler(Exception, _handle_domain_error)
