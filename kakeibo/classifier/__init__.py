"""Classifier package: rule/AI/fallback category cascade and its Groq client."""

from kakeibo.core.settings import Settings

from .groq_client import GroqCategoryClient
from .service import CategoryClient, ClassifierService  # noqa: F401


def build_category_client(settings: Settings) -> GroqCategoryClient | None:
    """Create the Groq-backed client, or None when no API key is configured."""
    if not settings.groq_api_key:
        return None
    from groq import Groq

    return GroqCategoryClient(Groq(api_key=settings.groq_api_key), settings)
