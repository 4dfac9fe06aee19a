# main.py
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from datetime import datetime
from pydantic import BaseModel, Field
from dotenv import load_dotenv
from common.config import initialize_config, get_config, is_configured, Environment
from common.logger import get_app_logger, shutdown_persistence
from common.logger.logger_middleware import RequestLoggingMiddleware
from common.api_error import ConfigurationError, AppError
from typing import Any, Optional
from ibotika.db import DbManager
from ibotika.api.v1 import appointment_router
from ibotika.services.v1 import PrescriptionStorage
from contextlib import asynccontextmanager
from fastapi.responses import JSONResponse

load_dotenv()
try:
    initialize_config()
except ConfigurationError as e:
    # Can't use logger yet, but that's OK - this is a fatal startup error
    print(f"FATAL: Configuration error:\n{e}")
    import sys

    sys.exit(1)

config = get_config()
logger = get_app_logger(
    name=__name__,
    track_timing=True,
    persist=True,
)

app_title = config.app_title
app_version = config.app_version


@asynccontextmanager
async def lifespan(app: FastAPI):
    _db_config = config.database
    if not _db_config:
        raise RuntimeError("Database configuration required")

    logger.info("Database configuration loaded", **_db_config.to_dict_safe())

    db_manager = DbManager.from_config(_db_config)
    await db_manager.verify_connection()

    # Ensure migrations are up-to-date (fail fast if not)
    try:
        revision = await db_manager.verify_migrations_current()
        logger.info("All migrations applied", revision=revision)
    except RuntimeError as e:
        logger.error("Migration check failed", error=str(e))
        logger.error("Run 'alembic upgrade head' before starting the server")
        await db_manager.dispose()
        raise

    app.state.db_manager = db_manager

    yield
    logger.info("shutting down")
    await db_manager.dispose()
    shutdown_persistence()


app = FastAPI(
    title=app_title,
    version=app_version,
    description=f"Running in {config.environment} environment",
    lifespan=lifespan,
)
app.add_middleware(
    RequestLoggingMiddleware,
    expose_performance_headers=config.environment.lower()
    != Environment.PRODUCTION.value.lower(),
)

# Created at import so the /uploads mount has a directory to serve
app.state.prescription_storage = PrescriptionStorage.from_config(config.uploads)
app.mount(
    "/uploads",
    StaticFiles(directory=app.state.prescription_storage.directory),
    name="uploads",
)
app.include_router(appointment_router)


def _error_body(code: str, message: str) -> dict[str, str]:
    return {
        "error": code,
        "message": message,
        "timestamp": datetime.now().isoformat(),
    }


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"Domain Error: {exc.code}",
        path=request.url.path,
        method=request.method,
        error_code=exc.code,
        message=exc.message,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.code, exc.message),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {"loc": (), "msg": "Invalid request"}
    field = ".".join(str(part) for part in first["loc"] if part not in ("body", "path"))
    message = f"Invalid {field}: {first['msg']}" if field else first["msg"]

    logger.warning(
        "Request validation failed",
        path=request.url.path,
        method=request.method,
        errors=[{"loc": list(e["loc"]), "msg": e["msg"]} for e in errors],
    )
    return JSONResponse(
        status_code=400,
        content=_error_body("VALIDATION_ERROR", message),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.critical(
        "Unhandled exception",
        exc_info=exc,
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )
    return JSONResponse(
        status_code=500,
        content=_error_body("INTERNAL_ERROR", "Unexpected server error"),
    )


class HealthCheckResponse(BaseModel):
    status: str = Field(..., description="Current system health status")
    timestamp: datetime = Field(..., description="Server time in ISO 8601 format")
    version: str = Field(..., description="Application version")
    logging_configured: bool = Field(..., description="Logging configuration status")
    log_level: str = Field(..., description="Application log level")
    database: Optional[dict[str, Any]] = Field(
        default=None, description="Database connectivity, when a database is attached"
    )


class HealthErrorResponse(BaseModel):
    error: str = Field(..., description="Error message describing the failure")
    timestamp: datetime = Field(..., description="Server time when the error occurred")


@app.get(
    "/health",
    response_model=HealthCheckResponse,
    responses={
        200: {"description": "System is healthy", "model": HealthCheckResponse},
        503: {"description": "System is unhealthy", "model": HealthErrorResponse},
    },
)
async def check_health(request: Request) -> HealthCheckResponse:
    if not app_version:
        logger.error("Version not found", endpoint="/health", app_title=app_title)
        err = HealthErrorResponse(error="version not found", timestamp=datetime.now())
        raise HTTPException(status_code=503, detail=err.model_dump(mode="json"))

    database: Optional[dict[str, Any]] = None
    db_manager: Optional[DbManager] = getattr(request.app.state, "db_manager", None)
    if db_manager is not None:
        database = await db_manager.health_check()
        if not database["healthy"]:
            logger.error("Database unreachable", endpoint="/health", **database)
            err = HealthErrorResponse(
                error=f"database unreachable: {database.get('error')}",
                timestamp=datetime.now(),
            )
            raise HTTPException(status_code=503, detail=err.model_dump(mode="json"))

    logger.info("Health check passed", version=app_version, endpoint="/health")
    return HealthCheckResponse(
        status="Healthy",
        timestamp=datetime.now(),
        version=app_version,
        logging_configured=is_configured(),
        log_level=get_config().logging.level_value,
        database=database,
    )


@app.get("/metrics")
async def metrics(request: Request) -> dict[str, Any]:
    """Logging performance metrics, plus pool settings when a database is attached."""
    from common.logger.persistence import get_persistence_metrics
    from common.logger.log_backends import get_all_metrics

    db_manager: Optional[DbManager] = getattr(request.app.state, "db_manager", None)
    return {
        "logger": logger.get_timing_stats(),
        "persistence": get_persistence_metrics(),
        "backends": get_all_metrics(),
        "database": db_manager.get_config_snapshot() if db_manager else None,
    }


__all__ = ["app", "config"]
