"""Custom exception classes and error handling."""
from typing import Any, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from billharmony.config.sentry import add_breadcrumb, capture_exception, settings
from billharmony.utils.logger import get_logger

logger = get_logger(__name__)


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        code: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code or "APP_ERROR"
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppError):
    """Structurally invalid input (missing income, empty query, ...)."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            code="VALIDATION_ERROR",
            details=details or {},
        )


class NotFoundError(AppError):
    """Requested catalog entity does not exist."""

    def __init__(self, resource: str, identifier: Optional[str] = None):
        message = f"{resource} not found"
        if identifier:
            message += f" (id: {identifier})"
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            code="NOT_FOUND",
        )


class CatalogError(AppError):
    """Reference data could not be loaded or normalized."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            code="CATALOG_ERROR",
            details=details or {},
        )


def _request_context(request: Request) -> dict:
    return {"path": request.url.path, "method": request.method}


def _error_body(code: str, message: str, details: Any = None) -> dict:
    body = {"error": code, "message": message}
    if details is not None:
        body["details"] = details
    return body


def _should_alert(status_code: int) -> bool:
    """Server errors alert whenever alerts are on; client errors only on opt-in."""
    if not settings.enable_alerts:
        return False
    return status_code >= 500 or settings.alert_on_errors


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render an AppError as a JSON error body."""
    context = _request_context(request)
    add_breadcrumb(
        message=f"Application error: {exc.code}",
        category="error",
        level="warning" if exc.status_code < 500 else "error",
        data={**context, "status_code": exc.status_code},
    )

    log = logger.error if exc.status_code >= 500 else logger.warning
    log("Application error", error=exc.code, message=exc.message, status_code=exc.status_code, **context)

    if _should_alert(exc.status_code):
        # details stay out of Sentry; validation details can name household fields
        capture_exception(
            exc,
            level="error" if exc.status_code >= 500 else "warning",
            context={"request": context, "error": {"code": exc.code, "message": exc.message}},
            tags={"error_type": exc.code, "status_code": str(exc.status_code)},
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.code, exc.message, exc.details),
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request body validation failures without echoing submitted values."""
    context = _request_context(request)
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    add_breadcrumb(message="Request validation failed", category="validation", level="warning", data=context)

    logger.warning(
        "Validation error",
        fields=[".".join(str(part) for part in err["loc"]) for err in errors],
        **context,
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_error_body("VALIDATION_ERROR", "Request validation failed", errors),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    context = _request_context(request)
    add_breadcrumb(
        message=f"Unexpected error: {type(exc).__name__}",
        category="exception",
        level="error",
        data=context,
    )

    logger.error(
        "Unexpected error",
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=True,
        **context,
    )

    if _should_alert(status.HTTP_500_INTERNAL_SERVER_ERROR):
        capture_exception(
            exc,
            level="error",
            context={"request": context},
            tags={"error_type": type(exc).__name__},
        )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("INTERNAL_ERROR", "An unexpected error occurred"),
    )
