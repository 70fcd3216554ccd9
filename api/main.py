"""
FastAPI application initialization
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from api.routes import health, imports
from api.middleware import RequestContextMiddleware
from core.config import settings
from core.database import async_session_maker
from core.exceptions import (
    ImportPipelineError,
    PreflightError,
    JobNotFoundError,
    JobAlreadyExistsError,
)
from core.logging import setup_logging
from importer.processor import BatchProcessor
from importer.scheduler import OrphanedJobMonitor
from importer.stores.postgres_store import PostgresJobStore, PostgresItemStore
from importer.worker import ImportWorker
import logging

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Bulk Import Service",
    description="Chunked bulk import of assets, purchase order lines and asset patches",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestContextMiddleware)

# Pipeline wiring
app.state.job_store = PostgresJobStore(async_session_maker)
app.state.item_store = PostgresItemStore(async_session_maker)
app.state.worker = ImportWorker(BatchProcessor(app.state.job_store, app.state.item_store))
app.state.monitor = OrphanedJobMonitor(app.state.job_store, worker=app.state.worker)

app.include_router(health.router)
app.include_router(imports.router)


def _error_response(status_code: int, error: ImportPipelineError) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error.message})


@app.exception_handler(PreflightError)
async def preflight_error_handler(request: Request, exc: PreflightError):
    logger.warning(f"Import rejected: {exc}")
    return _error_response(400, exc)


@app.exception_handler(JobAlreadyExistsError)
async def job_exists_handler(request: Request, exc: JobAlreadyExistsError):
    logger.warning(f"Duplicate import submission: {exc}")
    return _error_response(409, exc)


@app.exception_handler(JobNotFoundError)
async def job_not_found_handler(request: Request, exc: JobNotFoundError):
    return _error_response(404, exc)


@app.exception_handler(ImportPipelineError)
async def pipeline_error_handler(request: Request, exc: ImportPipelineError):
    logger.error(f"Unhandled pipeline error: {exc}", extra={"error_context": exc.to_dict()})
    return _error_response(500, exc)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"Invalid request: {location}: {first.get('msg', 'malformed body')}" if location \
        else f"Invalid request: {first.get('msg', 'malformed body')}"
    return JSONResponse(status_code=400, content={"success": False, "error": message})


@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    setup_logging()
    logger.info("Starting Bulk Import Service")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Database: {settings.DATABASE_URL.split('@')[1] if '@' in settings.DATABASE_URL else 'configured'}")

    app.state.monitor.start()


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event"""
    logger.info("Shutting down Bulk Import Service")
    await app.state.worker.shutdown()
    app.state.monitor.stop()


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Bulk Import Service",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "imports": "/imports"
        }
    }
