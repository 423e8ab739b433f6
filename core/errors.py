"""Error envelope and exception handlers shared by all routers"""

import logging
import uuid
from typing import Any, Dict, Iterable, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Raised by the service layer; carries the HTTP status and error code"""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details


class ValidationFailed(ServiceError):
    """Client input failed validation; lists every issue found"""

    def __init__(self, issues: Iterable[Any], message: str = "Invalid query parameters", status_code: int = 400):
        self.issues = list(issues)
        super().__init__(
            message,
            "INVALID_INPUT",
            status_code,
            {"issues": [{"path": i.path, "message": i.message} for i in self.issues]},
        )


def error_body(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = jsonable_encoder(details)
    return {"error": error}


def _internal_error(request: Request, exc: Exception, code: str, message: str) -> JSONResponse:
    trace_id = uuid.uuid4().hex
    logger.error(
        f"[{request.method} {request.url.path}] {code} trace_id={trace_id}: {type(exc).__name__}",
        exc_info=exc,
    )
    return JSONResponse(
        error_body(code, message, {"trace_id": trace_id}),
        status_code=500,
    )


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        if exc.status_code >= 500:
            return _internal_error(request, exc, exc.code, "An unexpected error occurred")
        return JSONResponse(
            error_body(exc.code, exc.message, exc.details),
            status_code=exc.status_code,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        issues = [
            {
                "path": ".".join(str(part) for part in err.get("loc", ()) if part not in ("path", "query", "body")),
                "message": err.get("msg", "Invalid value"),
            }
            for err in exc.errors()
        ]
        return JSONResponse(
            error_body("INVALID_INPUT", "Invalid request", {"issues": issues}),
            status_code=400,
        )

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
        return JSONResponse(
            error_body("RATE_LIMIT_EXCEEDED", f"Rate limit exceeded: {exc.detail}"),
            status_code=429,
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        return _internal_error(request, exc, "INTERNAL_ERROR", "An unexpected error occurred")
