"""
Error types and the handlers that turn them into uniform JSON responses

Every failure leaves the API as {"success": false, "message": ..., "error": kind}.
"""

import uuid
import traceback
import logging
from typing import Optional, List, Dict, Any
from datetime import datetime, timezone
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

FILL_FULL_FORM = "Please Fill Full Form!"
INTERNAL_ERROR_MESSAGE = "Internal Server Error"

# pydantic error types that mean "the field was not filled in"
_MISSING_ERROR_TYPES = {"missing", "string_too_short"}


class ErrorContext:
    """Context object for tracking error information across the request lifecycle"""

    def __init__(self, request: Request):
        self.request_id = str(uuid.uuid4())
        self.request = request
        self.endpoint = str(request.url.path)
        self.method = request.method
        self.client_ip = self._get_client_ip()
        self.user_agent = request.headers.get("user-agent")
        self.timestamp = datetime.now(timezone.utc)

    def _get_client_ip(self) -> Optional[str]:
        """Extract client IP from request headers"""
        if "x-forwarded-for" in self.request.headers:
            return self.request.headers["x-forwarded-for"].split(",")[0].strip()
        elif "x-real-ip" in self.request.headers:
            return self.request.headers["x-real-ip"]
        elif self.request.client:
            return self.request.client.host
        return None


class AppError(Exception):
    """Base class for errors that map to a known HTTP status"""
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return type(self).__name__


class ValidationError(AppError):
    status_code = 400


class ConflictError(AppError):
    status_code = 400


class AuthenticationError(AppError):
    status_code = 400


class AuthorizationError(AppError):
    status_code = 403


class UpstreamError(AppError):
    status_code = 500

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(message)


class InternalError(AppError):
    status_code = 500


class DatabaseError(InternalError):
    """Storage failure; the original exception is kept for the server log only"""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(message)

    @property
    def kind(self) -> str:
        return "InternalError"


def validation_message(errors: List[Dict[str, Any]]) -> str:
    """Collapse pydantic errors into the single message shown to the client"""
    if not errors or any(_is_unfilled(err) for err in errors):
        return FILL_FULL_FORM

    first = errors[0]
    cause = (first.get("ctx") or {}).get("error")
    if isinstance(cause, Exception):
        return str(cause)
    return str(first.get("msg", FILL_FULL_FORM)).removeprefix("Value error, ")


def _is_unfilled(error: Dict[str, Any]) -> bool:
    if error.get("type") in _MISSING_ERROR_TYPES:
        return True
    value = error.get("input")
    return value is None or (isinstance(value, str) and not value.strip())


class ErrorHandler:
    """Centralized error handling service"""

    @staticmethod
    def create_error_response(error_context: ErrorContext, kind: str, message: str,
                              status_code: int) -> JSONResponse:
        """Create a standardized error response"""
        content = {
            "success": False,
            "message": message,
            "error": kind,
        }
        # Server-side failures carry an id the client can quote to match the log entry
        if status_code >= 500:
            content["request_id"] = error_context.request_id

        return JSONResponse(status_code=status_code, content=content)

    @staticmethod
    def _log_error(error_context: ErrorContext, error: Exception, status_code: int):
        """Log error with comprehensive context"""
        logger.error(
            f"Error {error_context.request_id}: {type(error).__name__} in {error_context.method} {error_context.endpoint}",
            extra={
                "request_id": error_context.request_id,
                "endpoint": error_context.endpoint,
                "method": error_context.method,
                "status_code": status_code,
                "client_ip": error_context.client_ip,
                "user_agent": error_context.user_agent,
                "error_type": type(error).__name__,
                "error_message": str(error),
                "stack_trace": "".join(traceback.format_exception(type(error), error, error.__traceback__)),
            },
        )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    error_context = ErrorContext(request)
    message = exc.message

    if exc.status_code >= 500:
        ErrorHandler._log_error(error_context, getattr(exc, "original_error", None) or exc, exc.status_code)
        if isinstance(exc, InternalError):
            message = INTERNAL_ERROR_MESSAGE
    else:
        logger.info(f"{exc.kind} on {error_context.method} {error_context.endpoint}: {exc.message}")

    return ErrorHandler.create_error_response(error_context, exc.kind, message, exc.status_code)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error_context = ErrorContext(request)
    message = validation_message(exc.errors())
    logger.info(f"ValidationError on {error_context.method} {error_context.endpoint}: {message}")
    return ErrorHandler.create_error_response(error_context, "ValidationError", message, 400)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    error_context = ErrorContext(request)
    return ErrorHandler.create_error_response(error_context, "HTTPError", str(exc.detail), exc.status_code)


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    error_context = ErrorContext(request)
    logger.warning(f"Rate limit hit by {error_context.client_ip} on {error_context.endpoint}")
    response = ErrorHandler.create_error_response(
        error_context, "RateLimitError", f"Rate limit exceeded: {exc.detail}", 429
    )
    return request.app.state.limiter._inject_headers(response, request.state.view_rate_limit)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    error_context = ErrorContext(request)
    ErrorHandler._log_error(error_context, exc, 500)
    return ErrorHandler.create_error_response(error_context, "InternalError", INTERNAL_ERROR_MESSAGE, 500)


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Answers unexpected exceptions inside the CORS layer so 500s keep their CORS headers"""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            return await unhandled_exception_handler(request, exc)


def register_exception_handlers(app) -> None:
    """Route every failure on the app through the handlers above

    Call before adding CORSMiddleware: the last middleware added is the outermost.
    """
    app.add_middleware(UnhandledErrorMiddleware)
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
