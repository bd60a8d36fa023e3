"""Workers package: job polling worker, cron scheduler, and the scraping job executor."""

from .scheduler import JobScheduler  # noqa: F401
from .scrape_executor import ScrapeExecutor  # noqa: F401
from .worker import BackgroundWorker, JobExecutor  # noqa: F401
