"""
Domain exceptions and their HTTP rendering.

Services raise these; the handlers registered in ``main.create_application``
turn them into ``{"detail": ..., "error_code": ...}`` JSON responses.
"""

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)


class AppError(Exception):
    """Base exception for application errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "internal_error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message or self.__class__.__doc__ or ""


class ValidationError(AppError):
    """Input failed validation."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "validation_error"


class AuthenticationError(AppError):
    """Missing, invalid or expired credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "authentication_error"


class AuthorizationError(AppError):
    """Caller is not permitted to perform this action."""

    status_code = status.HTTP_403_FORBIDDEN
    error_code = "authorization_error"


class NotFoundError(AppError):
    """Resource not found."""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "not_found"


class ConflictError(AppError):
    """Resource already exists or was modified concurrently."""

    status_code = status.HTTP_409_CONFLICT
    error_code = "conflict"


class StateError(AppError):
    """Operation is not allowed in the resource's current state."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "invalid_state"


class ConfigurationError(AppError):
    """Required related data is missing (e.g. no representative for a constituency)."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "configuration_error"


class GatewayError(AppError):
    """The document store could not be reached."""

    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "gateway_error"


# =============================================================================
# Exception Handlers
# =============================================================================


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render an AppError as JSON."""
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, error_code=exc.error_code, error=exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error_code": exc.error_code},
        headers=headers,
    )


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request schema failures as 400 validation errors."""
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    message = errors[0]["message"] if errors else "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": message, "error_code": ValidationError.error_code, "errors": errors},
    )


def register_exception_handlers(application: FastAPI) -> None:
    """Attach the domain exception handlers to the application."""
    application.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    application.add_exception_handler(RequestValidationError, request_validation_error_handler)  # type: ignore[arg-type]
