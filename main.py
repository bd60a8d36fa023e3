"""Main entrypoint and application factory for the kakeibo-sync API.

This module initializes the FastAPI application, configures logging, creates the database
tables, starts the background worker and the nightly sync scheduler, and exposes the Scalar API
reference endpoint for interactive OpenAPI documentation. It also includes the main entrypoint
for running the app with Uvicorn.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import HTMLResponse
from scalar_fastapi import get_scalar_api_reference
from sqlalchemy.exc import SQLAlchemyError

from kakeibo.api.routes import router
from kakeibo.core.db import SessionLocal, engine, init_db
from kakeibo.core.settings import get_settings
from kakeibo.core.utils import get_logger
from kakeibo.workers.bootstrap import build_background_services

logger = get_logger("kakeibo")


# --- Logging Setup ---
def setup_logging() -> None:
    """Configure logging to file and console, and ensure the log directory exists."""
    log_dir = Path(get_settings().log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    logger.setLevel(logging.INFO)
    # Add file handler for persistent logs (not colorized)
    if not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        file_handler = logging.FileHandler(log_dir / "kakeibo.log")
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(file_handler)
    logger.propagate = False


setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create tables, then run the worker and scheduler for the lifetime of the app."""
    _ = app  # Silence unused argument warning
    settings = get_settings()
    try:
        init_db(engine)
    except SQLAlchemyError:
        logger.exception("Failed to create database tables")
        raise
    background = None
    if settings.background_enabled:
        background = build_background_services(settings, SessionLocal)
        background.start()
    try:
        yield
    finally:
        if background is not None:
            background.stop()


app = FastAPI(
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    title="kakeibo-sync API",
    description="""
    The kakeibo-sync API queues background jobs that log into banking sites, ingest new
    statement rows as categorized ledger transactions, and refresh account balances.

    **Endpoints:**
    - `POST /api/jobs`: Submit a `SCRAPE_ALL` or `SCRAPE_SPECIFIC` job.
    - `POST /api/jobs/sync`: Trigger a full sync now.
    - `GET /api/jobs`: List recent jobs.
    - `GET /api/jobs/{{job_id}}`: Check the status of a job.
    - `GET /api/scrapers`: List account names with a registered scraper.
    - `PATCH /api/transactions/{{transaction_id}}`: Edit a transaction; a category change learns an auto rule.
    - `GET /health`: Health check endpoint.
    - `GET /scalar`: Interactive Scalar OpenAPI documentation.
    """,
    version="1.0.0",
)
app.include_router(router)


@app.get("/scalar", include_in_schema=False)
async def scalar_docs() -> HTMLResponse:
    """Return Scalar API reference."""
    return get_scalar_api_reference(openapi_url=app.openapi_url, title=app.title)


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("main:app", host=settings.server_host, port=settings.server_port, reload=True)
