# common/logger/logger_middleware/logger_middleware.py
"""
Request logging middleware for FastAPI.

Every request gets an ``X-Request-ID`` (taken from the incoming header or
generated), a RequestTimer in ``request_timer_context_var`` that the DB
layer fills in, and one structured log line when the response is ready.

Usage:
    app.add_middleware(
        RequestLoggingMiddleware,
        expose_performance_headers=True,
        slow_request_threshold=500,
    )
"""

from typing import Callable, Awaitable, Optional
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
from common.context_vars import request_timer_context_var
import time
import uuid

from ..logger import get_app_logger
from .request_timer import RequestTimer
from .middleware_types import (
    RequestMetadata,
    RequestDetails,
    RequestLogEntry,
    PerformanceBreakdown,
)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for structured request logging.

    Log level follows the outcome: ERROR for 5xx, WARNING for 4xx and slow
    requests, INFO otherwise.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        expose_performance_headers: Optional[bool] = False,
        log_details: bool = True,
        slow_request_threshold: float = 1000.0,
        log_query_params: bool = True,
        log_client_info: bool = True,
        logger_name: Optional[str] = None,
    ):
        """
        Args:
            app: ASGI application
            expose_performance_headers: Add a Server-Timing header to every response
            log_details: Whether to log extended details (client IP, path params, etc.)
            slow_request_threshold: Milliseconds above which a request is flagged slow
            log_query_params: Whether to include query parameters
            log_client_info: Whether to log client IP and User-Agent
            logger_name: Custom logger name (defaults to module name)
        """
        super().__init__(app)
        self.log_details = log_details
        self.slow_request_threshold = slow_request_threshold
        self.log_query_params = log_query_params
        self.log_client_info = log_client_info
        self.expose_performance_headers = expose_performance_headers

        self.logger = get_app_logger(
            name=logger_name or __name__, persist=True, track_timing=True
        )

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        timer = RequestTimer()
        token = request_timer_context_var.set(timer)
        start_time = time.perf_counter()

        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        try:
            with timer.capture("app"):
                response = await call_next(request)
        finally:
            request_timer_context_var.reset(token)

        duration_ms = (time.perf_counter() - start_time) * 1000
        perf_data = PerformanceBreakdown(
            total_ms=round(duration_ms, 2),
            app_logic_ms=round(timer.timings.get("app", 0), 2),
            db_session_total_ms=round(timer.timings.get("db", 0), 2),
            sql_execution_total_ms=round(timer.timings.get("sql", 0), 2),
            query_count=int(timer.timings.get("query_count", 0)),
        )

        response.headers["X-Request-ID"] = request_id

        expose = self.expose_performance_headers or getattr(
            request.state, "expose_perf", False
        )
        if expose:
            response.headers["Server-Timing"] = (
                f"{timer.format_server_timing()}, total;dur={duration_ms:.2f}"
            )

        self._log_request(
            self._build_log_entry(
                request=request,
                response=response,
                duration_ms=duration_ms,
                request_id=request_id,
                perf_data=perf_data,
            )
        )
        return response

    def _build_log_entry(
        self,
        request: Request,
        response: Response,
        duration_ms: float,
        request_id: str,
        perf_data: Optional[PerformanceBreakdown] = None,
    ) -> RequestLogEntry:
        metadata = RequestMetadata(
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
        )

        details = None
        if self.log_details:
            details = RequestDetails(
                request_id=request_id,
                client_host=(
                    request.client.host
                    if self.log_client_info and request.client
                    else None
                ),
                user_agent=(
                    request.headers.get("user-agent") if self.log_client_info else None
                ),
                query_params=(
                    dict(request.query_params)
                    if self.log_query_params and request.query_params
                    else None
                ),
                path_params=request.path_params or None,
                content_length=int(response.headers.get("content-length", 0)) or None,
            )

        return RequestLogEntry(
            metadata=metadata,
            details=details,
            performance=perf_data,
            slow_threshold_ms=self.slow_request_threshold,
        )

    def _log_request(self, log_entry: RequestLogEntry) -> None:
        log_data = log_entry.model_dump(mode="json", exclude_none=True)

        if log_entry.is_error:  # type: ignore[truthy-function]
            self.logger.error("Request failed with server error", **log_data)
        elif log_entry.is_slow:  # type: ignore[truthy-function]
            self.logger.warning(
                f"Slow request detected ({log_entry.metadata.duration_ms}ms)",
                **log_data,
            )
        elif log_entry.metadata.status_code >= 400:
            self.logger.warning("Request failed with client error", **log_data)
        else:
            self.logger.info("Request completed", **log_data)


async def enable_perf_headers(request: Request) -> None:
    """
    Dependency that exposes the Server-Timing header for one route or router,
    even when the middleware has it switched off.

        @router.get("/{appointment_id}", dependencies=[Depends(enable_perf_headers)])
    """
    request.state.expose_perf = True


__all__ = [
    "RequestLoggingMiddleware",
    "enable_perf_headers",
]
