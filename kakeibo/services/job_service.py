"""Durable job store: creation, FIFO lookup and status transitions."""

import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from kakeibo.core.db import Job
from kakeibo.core.errors import InvalidJobTransitionError, JobNotFoundError
from kakeibo.core.models import JobStatus, JobType
from kakeibo.core.utils import get_logger, utcnow

logger = get_logger("kakeibo.jobs")

ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    JobStatus.PENDING: {JobStatus.RUNNING},
    JobStatus.RUNNING: {JobStatus.COMPLETED, JobStatus.FAILED},
    JobStatus.COMPLETED: set(),
    JobStatus.FAILED: set(),
}


class JobService:
    """Job persistence on top of a SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        """Initialize the JobService with a SQLAlchemy session."""
        self.session = session

    def create(self, job_type: JobType | str, target_account_id: int | None = None) -> Job:
        """Create a pending job."""
        job_type = JobType(job_type)
        if job_type == JobType.SCRAPE_SPECIFIC and target_account_id is None:
            msg = "SCRAPE_SPECIFIC jobs require a target account"
            raise ValueError(msg)
        now = utcnow()
        job = Job(
            id=str(uuid.uuid4()),
            type=job_type.value,
            status=JobStatus.PENDING.value,
            target_account_id=target_account_id,
            created_at=now,
            updated_at=now,
        )
        self.session.add(job)
        self.session.commit()
        self.session.refresh(job)
        logger.info(f"Created job {job.id} (type={job.type}, target={target_account_id})")
        return job

    def get_by_id(self, job_id: str) -> Job:
        """Return a job by id, raising JobNotFoundError when it does not exist."""
        job = self.session.get(Job, job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    def get_next_pending(self) -> Job | None:
        """Return the oldest pending job, if any."""
        stmt = (
            select(Job)
            .where(Job.status == JobStatus.PENDING.value)
            .order_by(Job.created_at.asc())
            .limit(1)
        )
        return self.session.execute(stmt).scalars().first()

    def has_running_job(self) -> bool:
        """Whether any job is currently marked running."""
        stmt = select(Job.id).where(Job.status == JobStatus.RUNNING.value).limit(1)
        return self.session.execute(stmt).first() is not None

    def update_status(self, job_id: str, status: JobStatus | str, error_message: str | None = None) -> Job:
        """Move a job to a new status; unknown ids and illegal transitions raise."""
        status = JobStatus(status)
        job = self.session.get(Job, job_id, populate_existing=True)
        if job is None:
            raise JobNotFoundError(job_id)
        if status not in ALLOWED_TRANSITIONS[JobStatus(job.status)]:
            raise InvalidJobTransitionError(job_id, job.status, status.value)
        job.status = status.value
        job.error_message = error_message
        job.updated_at = utcnow()
        self.session.commit()
        self.session.refresh(job)
        return job

    def get_recent(self, limit: int) -> list[Job]:
        """Return up to ``limit`` jobs, newest first."""
        stmt = select(Job).order_by(Job.created_at.desc()).limit(limit)
        return list(self.session.execute(stmt).scalars())

    def rollback(self) -> None:
        """Discard uncommitted work left in the session by a failed execution."""
        self.session.rollback()
