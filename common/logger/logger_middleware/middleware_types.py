# common/logger/logger_middleware/middleware_types.py
"""
Type definitions for request logging middleware.
"""

from typing import Optional, Dict, Any
from datetime import datetime
from pydantic import BaseModel, Field, computed_field

# Above this many statements per request something is probably looping
_HIGH_QUERY_COUNT = 5


class PerformanceBreakdown(BaseModel):
    """Breakdown of where time was spent during the request."""

    total_ms: float
    app_logic_ms: float
    db_session_total_ms: float
    sql_execution_total_ms: float
    query_count: int = Field(0, description="Number of SQL statements executed")

    @property
    def db_overhead_ms(self) -> float:
        """Time spent in DB session management (pooling, commits) NOT executing SQL."""
        return round(self.db_session_total_ms - self.sql_execution_total_ms, 2)


class RequestMetadata(BaseModel):
    """
    Core request metadata - always captured.
    """

    method: str = Field(..., description="HTTP method (GET, POST, etc.)")
    path: str = Field(..., description="Request path without query params")
    status_code: int = Field(..., ge=100, le=599, description="HTTP status code")
    duration_ms: float = Field(
        ..., ge=0, description="Request duration in milliseconds"
    )

    model_config = {"frozen": True}


class RequestDetails(BaseModel):
    """
    Extended request details - optional, configurable.
    """

    client_host: Optional[str] = Field(None, description="Client IP address")
    user_agent: Optional[str] = Field(None, description="User-Agent header")
    query_params: Optional[Dict[str, Any]] = Field(None, description="Query parameters")
    path_params: Optional[Dict[str, Any]] = Field(None, description="Path parameters")
    request_id: Optional[str] = Field(None, description="Unique request ID")
    content_length: Optional[int] = Field(
        None, ge=0, description="Response size in bytes"
    )

    model_config = {"frozen": True}


class RequestLogEntry(BaseModel):
    """
    Complete request log entry combining metadata and optional details.
    Serializes cleanly to JSON for structured logging.
    """

    timestamp: datetime = Field(default_factory=datetime.now)
    metadata: RequestMetadata
    details: Optional[RequestDetails] = None
    performance: Optional[PerformanceBreakdown] = None
    slow_threshold_ms: float = Field(1000.0, exclude=True)

    model_config = {"frozen": True}

    @computed_field
    def is_slow(self) -> bool:
        return self.metadata.duration_ms > self.slow_threshold_ms

    @computed_field
    def is_error(self) -> bool:
        """Flag error responses (5xx)."""
        return self.metadata.status_code >= 500

    @computed_field
    def warnings(self) -> list[str]:
        warns: list[str] = []
        if not self.performance:
            return warns

        if self.performance.query_count > _HIGH_QUERY_COUNT:
            warns.append(
                f"HIGH_QUERY_COUNT: {self.performance.query_count} statements in one request"
            )
        if self.performance.sql_execution_total_ms > self.slow_threshold_ms:
            warns.append(
                f"SLOW_SQL: {self.performance.sql_execution_total_ms:.0f}ms executing SQL"
            )
        return warns


__all__ = [
    "RequestMetadata",
    "RequestDetails",
    "RequestLogEntry",
    "PerformanceBreakdown",
]
