"""Tests for the job store: creation, FIFO lookup and status transitions."""

import pytest
from sqlalchemy.orm import Session

from kakeibo.core.errors import InvalidJobTransitionError, JobNotFoundError
from kakeibo.core.models import JobStatus, JobType
from kakeibo.services.job_service import JobService


def test_create_starts_pending(session: Session) -> None:
    """A new job is pending with no error and the requested target."""
    job = JobService(session).create(JobType.SCRAPE_SPECIFIC, 7)
    if job.status != JobStatus.PENDING:
        msg = f"Expected status 'pending', got '{job.status}'"
        raise AssertionError(msg)
    if job.target_account_id != 7 or job.error_message is not None:
        msg = f"Unexpected job fields: target={job.target_account_id}, error={job.error_message}"
        raise AssertionError(msg)
    if not job.id or job.created_at is None:
        msg = "Expected an id and a creation timestamp"
        raise AssertionError(msg)


def test_create_specific_requires_target(session: Session) -> None:
    """SCRAPE_SPECIFIC without a target account is rejected."""
    with pytest.raises(ValueError, match="target account"):
        JobService(session).create(JobType.SCRAPE_SPECIFIC)


def test_get_by_id_unknown_raises(session: Session) -> None:
    """Unknown ids raise JobNotFoundError with kind NOT_FOUND."""
    with pytest.raises(JobNotFoundError) as excinfo:
        JobService(session).get_by_id("missing")
    if excinfo.value.error_type != "NOT_FOUND":
        msg = f"Expected error type NOT_FOUND, got {excinfo.value.error_type}"
        raise AssertionError(msg)


def test_get_next_pending_is_fifo_and_skips_non_pending(session: Session) -> None:
    """The oldest pending job is returned; running and terminal jobs never are."""
    service = JobService(session)
    first = service.create(JobType.SCRAPE_ALL)
    second = service.create(JobType.SCRAPE_ALL)
    third = service.create(JobType.SCRAPE_ALL)

    if service.get_next_pending().id != first.id:
        msg = "Expected the first job to be next"
        raise AssertionError(msg)

    service.update_status(first.id, JobStatus.RUNNING)
    if service.get_next_pending().id != second.id:
        msg = "Expected the second job once the first is running"
        raise AssertionError(msg)

    service.update_status(first.id, JobStatus.FAILED, "boom")
    service.update_status(second.id, JobStatus.RUNNING)
    service.update_status(second.id, JobStatus.COMPLETED)
    if service.get_next_pending().id != third.id:
        msg = "Expected the third job after the others finished"
        raise AssertionError(msg)

    service.update_status(third.id, JobStatus.RUNNING)
    if service.get_next_pending() is not None:
        msg = "Expected no pending job"
        raise AssertionError(msg)


def test_has_running_job(session: Session) -> None:
    """has_running_job reflects the running state only."""
    service = JobService(session)
    job = service.create(JobType.SCRAPE_ALL)
    if service.has_running_job():
        msg = "Expected no running job for a pending job"
        raise AssertionError(msg)
    service.update_status(job.id, JobStatus.RUNNING)
    if not service.has_running_job():
        msg = "Expected a running job"
        raise AssertionError(msg)
    service.update_status(job.id, JobStatus.COMPLETED)
    if service.has_running_job():
        msg = "Expected no running job after completion"
        raise AssertionError(msg)


def test_update_status_records_error_message(session: Session) -> None:
    """Failing a job stores its message."""
    service = JobService(session)
    job = service.create(JobType.SCRAPE_ALL)
    service.update_status(job.id, JobStatus.RUNNING)
    failed = service.update_status(job.id, JobStatus.FAILED, "Network down")
    if failed.status != JobStatus.FAILED or failed.error_message != "Network down":
        msg = f"Unexpected failed job: {failed.status}, {failed.error_message}"
        raise AssertionError(msg)


def test_update_status_unknown_id_raises(session: Session) -> None:
    """Updating a missing job fails loudly."""
    with pytest.raises(JobNotFoundError):
        JobService(session).update_status("missing", JobStatus.RUNNING)


@pytest.mark.parametrize(
    ("path", "illegal"),
    [
        ([], JobStatus.COMPLETED),
        ([JobStatus.RUNNING], JobStatus.PENDING),
        ([JobStatus.RUNNING, JobStatus.COMPLETED], JobStatus.RUNNING),
        ([JobStatus.RUNNING, JobStatus.FAILED], JobStatus.COMPLETED),
    ],
)
def test_update_status_rejects_illegal_transitions(
    session: Session, path: list[JobStatus], illegal: JobStatus
) -> None:
    """Statuses only move pending -> running -> terminal."""
    service = JobService(session)
    job = service.create(JobType.SCRAPE_ALL)
    for status in path:
        service.update_status(job.id, status)
    with pytest.raises(InvalidJobTransitionError):
        service.update_status(job.id, illegal)


def test_get_recent_is_newest_first_and_limited(session: Session) -> None:
    """Recent jobs come back newest first, capped by limit."""
    service = JobService(session)
    ids = [service.create(JobType.SCRAPE_ALL).id for _ in range(4)]
    recent = [job.id for job in service.get_recent(3)]
    if recent != list(reversed(ids))[:3]:
        msg = f"Expected {list(reversed(ids))[:3]}, got {recent}"
        raise AssertionError(msg)
