"""Single-flight background worker that polls the job store."""

import threading
from typing import Protocol

from kakeibo.core.db import Job
from kakeibo.core.models import JobStatus
from kakeibo.core.utils import get_logger
from kakeibo.services.job_service import JobService

logger = get_logger("kakeibo.worker")

DEFAULT_POLL_INTERVAL_MS = 5000
UNKNOWN_ERROR = "Unknown error"


class JobExecutor(Protocol):
    """Does the actual work of a job; raising marks the job failed."""

    def execute(self, job: Job) -> None:
        """Run the job to completion."""
        ...


class BackgroundWorker:
    """Polls for the oldest pending job and runs it when nothing else is running.

    There is no claim beyond the ``has_running_job`` check, so only one worker should run
    against a given database.
    """

    def __init__(
        self,
        job_service: JobService,
        executor: JobExecutor,
        poll_interval_ms: int | None = None,
        shutdown_timeout: float = 30.0,
    ) -> None:
        """Initialize the worker with its job store, executor and poll interval."""
        self.job_service = job_service
        self.executor = executor
        self.poll_interval_ms = poll_interval_ms or DEFAULT_POLL_INTERVAL_MS
        self.shutdown_timeout = shutdown_timeout
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()

    def start(self) -> None:
        """Start polling on a daemon thread; no-op when already running.

        Raises RuntimeError when a previous thread outlived its stop() and is still finishing a job.
        """
        if self._thread is not None:
            if not self._stop_event.is_set():
                return
            if self._thread.is_alive():
                msg = "Previous worker thread is still finishing a job"
                raise RuntimeError(msg)
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run, args=(self._stop_event,), name="kakeibo-worker", daemon=True
        )
        self._thread.start()
        logger.info(f"Started with poll interval: {self.poll_interval_ms}ms")

    def stop(self) -> bool:
        """Stop polling and wait for the in-flight tick.

        Returns False when the thread is still busy after ``shutdown_timeout``; it then exits after its
        current job and the worker keeps the reference until it has.
        """
        if self._thread is None:
            return True
        self._stop_event.set()
        self._thread.join(timeout=self.shutdown_timeout)
        if self._thread.is_alive():
            logger.warning("Worker thread still busy after shutdown timeout")
            return False
        self._thread = None
        logger.info("Stopped")
        return True

    def is_running(self) -> bool:
        """Whether a polling thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.poll_interval_ms / 1000):
            try:
                self.process_next_job()
            except Exception:
                logger.exception("Error processing job")

    def process_next_job(self) -> Job | None:
        """Run one polling tick; returns the job that was processed, if any."""
        if self.job_service.has_running_job():
            return None
        job = self.job_service.get_next_pending()
        if job is None:
            return None

        job_id = job.id
        job = self.job_service.update_status(job_id, JobStatus.RUNNING)
        logger.info(f"Job {job_id} ({job.type}) running")
        try:
            self.executor.execute(job)
        except Exception as exc:
            message = str(exc) or UNKNOWN_ERROR
            logger.exception(f"Job {job_id} failed: {message}")
            self.job_service.rollback()
            return self.job_service.update_status(job_id, JobStatus.FAILED, message)
        logger.info(f"Job {job_id} completed")
        return self.job_service.update_status(job_id, JobStatus.COMPLETED)
