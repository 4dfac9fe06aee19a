from .logger_middleware import RequestLoggingMiddleware, enable_perf_headers
from .request_timer import RequestTimer

__all__ = ["RequestLoggingMiddleware", "enable_perf_headers", "RequestTimer"]
