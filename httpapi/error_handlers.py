"""Global exception handlers: catalog errors to JSON responses.

Recoverable errors get a specific status and message. Anything else is logged
with its traceback and answered with an opaque 500.
"""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from catalog.errors import (
    AuthenticationError,
    CryptoError,
    EditConflictError,
    InactiveAccountError,
    InvalidTokenError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from catalog.logging_config import get_logger

logger = get_logger(__name__)

NOT_FOUND_MESSAGE = "the requested resource could not be found"
EDIT_CONFLICT_MESSAGE = "unable to update the record due to an edit conflict, please try again"
SERVER_ERROR_MESSAGE = "the server encountered a problem and could not process your request"


def _error(status_code: int, error, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error}, headers=headers)


def _server_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"{type(exc).__name__} on {request.method} {request.url.path}: {exc}",
        exc_info=exc,
    )
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, SERVER_ERROR_MESSAGE)


def _field_name(loc) -> str:
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "header")]
    return ".".join(parts) or "body"


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, exc.errors)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        errors = {}
        for err in exc.errors():
            errors.setdefault(_field_name(err["loc"]), err["msg"])
        logger.debug(f"Malformed request on {request.url.path}: {errors}")
        return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, errors)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _error(status.HTTP_404_NOT_FOUND, NOT_FOUND_MESSAGE)

    @app.exception_handler(EditConflictError)
    async def edit_conflict_handler(request: Request, exc: EditConflictError):
        return _error(status.HTTP_409_CONFLICT, EDIT_CONFLICT_MESSAGE)

    @app.exception_handler(InvalidTokenError)
    async def invalid_token_handler(request: Request, exc: InvalidTokenError):
        return _error(
            status.HTTP_401_UNAUTHORIZED,
            exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(InactiveAccountError)
    async def inactive_account_handler(request: Request, exc: InactiveAccountError):
        return _error(status.HTTP_403_FORBIDDEN, exc.message)

    @app.exception_handler(AuthenticationError)
    async def authentication_error_handler(request: Request, exc: AuthenticationError):
        return _error(status.HTTP_401_UNAUTHORIZED, exc.message)

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        return _server_error(request, exc)

    @app.exception_handler(CryptoError)
    async def crypto_error_handler(request: Request, exc: CryptoError):
        return _server_error(request, exc)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        return _server_error(request, exc)
