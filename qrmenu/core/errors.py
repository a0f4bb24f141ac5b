from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class MenuServiceError(Exception):
    """Base class for classified failures surfaced to the HTTP boundary.

    ``public_message`` is what callers see. ``expose_detail`` controls whether the
    message passed at raise time may replace it: user-correctable errors carry
    their own detail, operational errors (storage, providers) never do.
    """

    status_code = 500
    public_message = "Internal Server Error"
    expose_detail = True

    def __init__(self, message: str | None = None, *, field: str | None = None) -> None:
        super().__init__(message or self.public_message)
        self.message = message or self.public_message
        self.field = field

    def to_payload(self) -> dict[str, str]:
        message = self.message if self.expose_detail else self.public_message
        payload = {"message": message}
        if self.field:
            payload["field"] = self.field
        return payload


class ValidationError(MenuServiceError):
    status_code = 400
    public_message = "Invalid input"


class ConflictError(MenuServiceError):
    status_code = 409
    public_message = "Resource already exists"


class NotFoundError(MenuServiceError):
    status_code = 404
    public_message = "Not found"


class StorageError(MenuServiceError):
    status_code = 503
    public_message = "Storage is temporarily unavailable. Please try again."
    expose_detail = False


class ProviderError(MenuServiceError):
    status_code = 502
    public_message = "AI generation failed. Please try again."
    expose_detail = False


class ProviderAuthError(ProviderError):
    public_message = "The AI provider rejected the configured API key. Check the provider credentials."


class ProviderRateLimitError(ProviderError):
    status_code = 429
    public_message = "AI provider rate limit or quota exceeded. Please try again in a moment."


class ProviderResponseError(ProviderError):
    public_message = "The AI provider returned an unusable response. Please try again."


class ProviderTimeoutError(ProviderError):
    status_code = 504
    public_message = "The AI provider took too long to respond. Please try again."


class UnsupportedFormatError(MenuServiceError):
    status_code = 415
    public_message = "Unsupported file type. Please upload a PDF, DOCX, or TXT file."


class InsufficientContentError(MenuServiceError):
    status_code = 422
    public_message = "Could not extract enough text from the file. Please check the file content."


async def _handle_menu_service_error(request: Request, exc: MenuServiceError) -> JSONResponse:
    if not exc.expose_detail:
        logger.warning(
            "%s on %s %s: %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            exc.message,
            extra={"endpoint": request.url.path, "method": request.method, "status_code": exc.status_code},
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def _handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def _handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    message = str(first.get("msg") or "Invalid input").removeprefix("Value error, ")
    payload = {"message": message}
    if location:
        payload["field"] = ".".join(location)
    return JSONResponse(status_code=400, content=payload)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MenuServiceError, _handle_menu_service_error)
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)
    app.add_exception_handler(RequestValidationError, _handle_request_validation_error)
