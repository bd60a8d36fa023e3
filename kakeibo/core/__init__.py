"""Core package: provides models, database helpers, settings, and shared utilities."""

from .db import Base, SessionLocal, init_db  # noqa: F401
from .models import JobStatus, JobType  # noqa: F401
from .settings import Settings, get_settings  # noqa: F401
from .utils import get_logger  # noqa: F401
