"""FastAPI endpoints for kakeibo-sync jobs and transaction edits.

This module defines the routes for submitting scrape jobs, triggering an immediate sync,
checking job status, listing recent jobs and supported scrapers, editing transactions (which
teaches the keyword rules), and health checks. Jobs are
only enqueued here; the background worker picks them up.
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from kakeibo.api.dependencies import get_job_service, get_learning_service, get_registry, get_scheduler
from kakeibo.core.errors import CategoryNotFoundError, JobNotFoundError, TransactionNotFoundError
from kakeibo.core.models import JobCreate, JobRead, TransactionRead, TransactionUpdate
from kakeibo.core.utils import get_logger
from kakeibo.scrapers import ScraperRegistry
from kakeibo.services.job_service import JobService
from kakeibo.services.learning_service import TransactionWithLearning
from kakeibo.workers.scheduler import JobScheduler

router = APIRouter()
logger = get_logger("kakeibo.api")

JOB_EXAMPLE = {
    "id": "123e4567-e89b-12d3-a456-426614174000",
    "type": "SCRAPE_ALL",
    "status": "pending",
    "target_account_id": None,
    "error_message": None,
    "created_at": "2026-01-15T03:00:00Z",
    "updated_at": "2026-01-15T03:00:00Z",
}


@router.post(
    "/api/jobs",
    status_code=202,
    response_model=JobRead,
    summary="Submit a scraping job",
    description=(
        "Enqueue a background scraping job. The worker processes pending jobs one at a time, "
        "oldest first.\n\n"
        "**Request body:**\n"
        "- `type`: `SCRAPE_ALL` or `SCRAPE_SPECIFIC`.\n"
        "- `target_account_id`: required for `SCRAPE_SPECIFIC`.\n\n"
        "**Response:**\n"
        "- 202 Accepted: the pending job.\n"
        "- 422 Unprocessable Entity: invalid body."
    ),
    responses={
        202: {"description": "Job accepted.", "content": {"application/json": {"example": JOB_EXAMPLE}}},
        422: {"description": "Validation error."},
    },
)
async def create_job(body: JobCreate, service: JobService = Depends(get_job_service)) -> JobRead:
    """Create a pending job."""
    try:
        job = service.create(body.type, body.target_account_id)
    except ValueError as exc:
        raise HTTPException(400, str(exc)) from exc
    return JobRead.model_validate(job)


@router.post(
    "/api/jobs/sync",
    status_code=202,
    response_model=JobRead,
    summary="Sync all accounts now",
    description="Enqueue a `SCRAPE_ALL` job immediately, outside the nightly schedule.",
    responses={202: {"description": "Job accepted.", "content": {"application/json": {"example": JOB_EXAMPLE}}}},
)
async def sync_now(scheduler: JobScheduler = Depends(get_scheduler)) -> JobRead:
    """Trigger a full sync."""
    job = scheduler.trigger_now()
    logger.info(f"Manual sync requested: job_id={job.id}")
    return JobRead.model_validate(job)


@router.get(
    "/api/jobs",
    response_model=list[JobRead],
    summary="List recent jobs",
    description="Return the most recent jobs, newest first. `limit` defaults to 20.",
)
async def list_jobs(
    limit: int = Query(20, gt=0, le=500),
    service: JobService = Depends(get_job_service),
) -> list[JobRead]:
    """List recent jobs."""
    return [JobRead.model_validate(job) for job in service.get_recent(limit)]


@router.get(
    "/api/jobs/{job_id}",
    response_model=JobRead,
    summary="Get job status",
    description=(
        "Check the status of a job by id.\n\n"
        "**Response:**\n"
        "- 200 OK: the job, including `error_message` when it failed.\n"
        "- 404 Not Found: unknown job id."
    ),
    responses={
        200: {"description": "Job found.", "content": {"application/json": {"example": JOB_EXAMPLE}}},
        404: {
            "description": "Job not found.",
            "content": {"application/json": {"example": {"detail": "Job not found"}}},
        },
    },
)
async def get_job(job_id: str, service: JobService = Depends(get_job_service)) -> JobRead:
    """Get a job by id."""
    try:
        job = service.get_by_id(job_id)
    except JobNotFoundError as exc:
        raise HTTPException(404, "Job not found") from exc
    return JobRead.model_validate(job)


@router.patch(
    "/api/transactions/{transaction_id}",
    response_model=TransactionRead,
    summary="Edit a transaction",
    description=(
        "Change the amount, category or memo of a transaction. Moving a transaction to another "
        "category also creates or updates the auto rule keyed by its description, so future "
        "scrapes of the same entry land in that category.\n\n"
        "**Response:**\n"
        "- 200 OK: the updated transaction.\n"
        "- 400 Bad Request: unknown category.\n"
        "- 404 Not Found: unknown transaction id."
    ),
)
async def update_transaction(
    transaction_id: int,
    body: TransactionUpdate,
    service: TransactionWithLearning = Depends(get_learning_service),
) -> TransactionRead:
    """Update a transaction and learn from category changes."""
    try:
        txn = service.update_with_learning(
            transaction_id, amount=body.amount, category_id=body.category_id, memo=body.memo
        )
    except TransactionNotFoundError as exc:
        raise HTTPException(404, "Transaction not found") from exc
    except CategoryNotFoundError as exc:
        raise HTTPException(400, "Category not found") from exc
    return TransactionRead.model_validate(txn)


@router.get(
    "/api/scrapers",
    summary="List supported accounts",
    description="Account display names that have a registered scraper.",
)
async def list_scrapers(registry: ScraperRegistry = Depends(get_registry)) -> dict:
    """List account names that can be scraped."""
    return {"accounts": registry.get_supported_account_names()}


@router.get(
    "/health",
    summary="Health check",
    description="Simple health check endpoint. Returns status ok.",
    response_description="Status ok.",
    responses={200: {"description": "API is healthy.", "content": {"application/json": {"example": {"status": "ok"}}}}},
)
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}
