"""Cron-triggered creation of full-sync jobs."""

import threading
from collections.abc import Callable
from datetime import datetime

from croniter import croniter

from kakeibo.core.db import Job, SessionFactory
from kakeibo.core.models import JobType
from kakeibo.core.utils import get_logger
from kakeibo.services.job_service import JobService

logger = get_logger("kakeibo.scheduler")

DEFAULT_CRON_EXPRESSION = "0 3 * * *"


class JobScheduler:
    """Enqueues a SCRAPE_ALL job on a cron schedule; the worker consumes it."""

    def __init__(
        self,
        session_factory: SessionFactory,
        cron_expression: str | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize with a session factory, a five-field cron expression and a local-time clock."""
        self.session_factory = session_factory
        self.cron_expression = cron_expression or DEFAULT_CRON_EXPRESSION
        if not croniter.is_valid(self.cron_expression):
            msg = f"Invalid cron expression: {self.cron_expression}"
            raise ValueError(msg)
        self.clock = clock
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()

    def start(self) -> None:
        """Start the schedule thread; no-op when already started."""
        if self._thread is not None:
            return
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run, args=(self._stop_event,), name="kakeibo-scheduler", daemon=True
        )
        self._thread.start()
        logger.info(f"Started with cron expression: {self.cron_expression}")

    def stop(self) -> None:
        """Stop the schedule thread; no-op when not started."""
        if self._thread is None:
            return
        self._stop_event.set()
        self._thread.join()
        self._thread = None
        logger.info("Stopped")

    def is_running(self) -> bool:
        """Whether the schedule thread has been started."""
        return self._thread is not None

    def next_run_at(self, now: datetime | None = None) -> datetime:
        """Return the next fire time after ``now`` (local time)."""
        return croniter(self.cron_expression, now or self.clock()).get_next(datetime)

    def trigger_now(self) -> Job:
        """Create a SCRAPE_ALL job immediately and return it."""
        logger.info("Triggering SCRAPE_ALL job")
        session = self.session_factory()
        try:
            return JobService(session).create(JobType.SCRAPE_ALL)
        finally:
            session.close()

    def _run(self, stop_event: threading.Event) -> None:
        next_run = self.next_run_at()
        while not stop_event.wait(max((next_run - self.clock()).total_seconds(), 0)):
            try:
                self.trigger_now()
            except Exception:
                logger.exception("Scheduled trigger failed")
            # Advance from the slot just fired; an early wake-up must not fire it twice
            next_run = self.next_run_at(max(next_run, self.clock()))
