"""
API Middleware
Request ids, error handling and request logging
"""
import uuid
from datetime import datetime
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from cmdb.utils.logger import setup_logger
from api.exceptions import create_error_response

logger = setup_logger(__name__)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Assigns a request id and turns unhandled exceptions into a 500 envelope

    Domain errors never reach this point; their handlers are registered on
    the app. What arrives here is a bug or an infrastructure failure.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())[:8]
        request.state.request_id = request_id

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"Unexpected error [{request_id}] in {request.url.path}: {e}", exc_info=True)

            # Don't expose internal error details to clients
            response = create_error_response(
                error_type="internal_server_error",
                message="An unexpected error occurred. Please try again later.",
                status_code=500,
                request_id=request_id
            )

        response.headers["X-Request-Id"] = request_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for request/response logging

    Logs all API requests with timing information
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = datetime.now()
        request_id = getattr(request.state, 'request_id', 'unknown')

        logger.info(f"[{request_id}] → {request.method} {request.url.path}")

        response = await call_next(request)

        duration = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"[{request_id}] ← {request.method} {request.url.path} - "
            f"{response.status_code} ({duration:.2f}s)"
        )

        return response
