"""
Request tracking and error rendering.

Every response carries an ``X-Request-ID``. Failures are rendered as::

    {"success": false, "message": "...", "request_id": "...", "details": {...}}

``AppException`` subclasses, request validation errors and Starlette HTTP
errors are handled by registered exception handlers; anything else that
escapes an endpoint is logged with its traceback and answered with a
generic 500 by ``ErrorHandlerMiddleware``.
"""

import logging
import time
import uuid
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from photoshelf.core.exceptions import AppException

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


def error_body(
    message: str,
    request_id: str,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "success": False,
        "message": message,
        "request_id": request_id,
    }
    if details:
        body["details"] = details
    return body


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Assign a request id, log each request and catch unhandled errors."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                f"Unhandled error on {request.method} {request.url.path} "
                f"(request_id={request_id})"
            )
            response = JSONResponse(
                status_code=500,
                content=error_body("Internal server error", request_id),
            )

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.debug(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"in {elapsed_ms:.1f}ms (request_id={request_id})"
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the envelope-rendering handlers on ``app``."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__}: {exc.message} (request_id={_request_id(request)})")
        else:
            logger.info(f"{exc.status_code} {exc.message} on {request.url.path}")
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.message, _request_id(request), exc.details),
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=422,
            content=error_body("Validation error", _request_id(request), {"errors": errors}),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request,
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail), _request_id(request)),
            headers=getattr(exc, "headers", None),
        )
