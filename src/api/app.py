"""FastAPI application: HTTP surface of the log pipeline."""

import logging
from contextlib import asynccontextmanager
from typing import Any, Generator, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.api.models import (
    CategoryCountResponse,
    LogEntryResponse,
    LogQuery,
    LogStatsResponse,
    SuccessResponse,
    TimeBucketResponse,
)
from src.core.config import Settings, configure_logging
from src.core.exceptions import ArcadeError, LogValidationError, StorageError
from src.db.database import Database
from src.db.sql_repository import SQLLogRepository
from src.services.log_service import LogService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/logs", tags=["logs"])


def get_log_service(request: Request) -> Generator[LogService, None, None]:
    """One session per request, closed when the response has been sent."""
    database: Database = request.app.state.database
    sessions = database.get_db()
    db = next(sessions)
    try:
        yield LogService(SQLLogRepository(db))
    finally:
        sessions.close()


@router.get("", response_model=list[LogEntryResponse])
def list_logs(
    query: LogQuery = Depends(), service: LogService = Depends(get_log_service)
) -> list[LogEntryResponse]:
    return service.list_logs(query)


@router.post("", response_model=SuccessResponse)
def create_log(
    payload: dict[str, Any] = Body(...),
    service: LogService = Depends(get_log_service),
) -> SuccessResponse:
    return service.create_log(payload)


@router.delete("", response_model=SuccessResponse)
def clear_logs(service: LogService = Depends(get_log_service)) -> SuccessResponse:
    return service.clear_logs()


@router.get("/stats", response_model=LogStatsResponse)
def log_stats(service: LogService = Depends(get_log_service)) -> LogStatsResponse:
    return service.log_stats()


@router.get("/dashboard/time-series", response_model=list[TimeBucketResponse])
def time_series(service: LogService = Depends(get_log_service)) -> list[TimeBucketResponse]:
    return service.time_series()


@router.get("/dashboard/categories", response_model=list[CategoryCountResponse])
def error_distribution(
    service: LogService = Depends(get_log_service),
) -> list[CategoryCountResponse]:
    return service.error_distribution()


# --- ERROR HANDLERS ---
async def validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": str(exc)})


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """A body that is not a JSON object (or not JSON at all) is a rejected log entry like any other."""
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": f"Invalid request: {problems}"})


async def storage_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={"error": f"Error handling {request.method} {request.url.path}", "details": str(exc)},
    )


def create_app(
    settings: Optional[Settings] = None, database: Optional[Database] = None
) -> FastAPI:
    """
    Build the app around an explicit database handle.
    The handle is opened on startup and closed on shutdown; pass one in to share it with other code (or tests).
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)
    database = database or Database(settings.database_url, echo=settings.echo_sql)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.open()
        logger.info("Log API startup complete (db=%s)", database.url)
        yield
        database.close()

    app = FastAPI(title="Arcade Log API", version="1.0.0", lifespan=lifespan)
    app.state.database = database
    app.include_router(router)
    app.add_exception_handler(LogValidationError, validation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(StorageError, storage_error_handler)
    app.add_exception_handler(ArcadeError, storage_error_handler)
    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
