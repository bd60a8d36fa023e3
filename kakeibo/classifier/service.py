"""Classification cascade: keyword rule, then AI suggestion, then fallback category."""

from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from kakeibo.core.db import Category
from kakeibo.core.models import ClassificationResult, ClassificationSource
from kakeibo.core.utils import get_logger
from kakeibo.services.auto_rule_service import AutoRuleService

logger = get_logger("kakeibo.classifier")

DEFAULT_FALLBACK_CATEGORY = "uncategorized"


class CategoryClient(Protocol):
    """External capability that suggests a category name for a description."""

    def classify(self, description: str, categories: list[str]) -> str | None:
        """Return one of ``categories`` (or any text, or None)."""
        ...


class ClassifierService:
    """Assigns a category to each transaction description."""

    def __init__(
        self,
        session: Session,
        ai_client: CategoryClient | None,
        fallback_category_name: str = DEFAULT_FALLBACK_CATEGORY,
        auto_rule_service: AutoRuleService | None = None,
    ) -> None:
        """Initialize with a session, an optional AI client and the fallback category name."""
        self.session = session
        self.ai_client = ai_client
        self.fallback_category_name = fallback_category_name
        self.auto_rule_service = auto_rule_service or AutoRuleService(session)

    def classify(self, description: str) -> ClassificationResult:
        """Classify one description."""
        rule = self.auto_rule_service.find_matching_rule(description)
        if rule is not None:
            return ClassificationResult(
                category_id=rule.category_id,
                category_name=rule.category.name,
                source=ClassificationSource.RULE,
            )

        categories = list(self.session.execute(select(Category).order_by(Category.id)).scalars())
        if self.ai_client is not None:
            try:
                suggestion = self.ai_client.classify(description, [c.name for c in categories])
            except Exception:
                logger.exception(f"AI classification failed for '{description}'")
                suggestion = None
            if suggestion and suggestion.strip():
                wanted = suggestion.strip()
                for category in categories:
                    if category.name == wanted:
                        return ClassificationResult(
                            category_id=category.id,
                            category_name=category.name,
                            source=ClassificationSource.AI,
                        )
                logger.info(f"AI suggested unknown category '{wanted}' for '{description}'")

        return self._fallback(categories)

    def classify_batch(self, descriptions: list[str]) -> list[ClassificationResult]:
        """Classify each description in order."""
        if not descriptions:
            return []
        return [self.classify(description) for description in descriptions]

    def _fallback(self, categories: list[Category]) -> ClassificationResult:
        category = next((c for c in categories if c.name == self.fallback_category_name), None)
        if category is None:
            logger.info(f"Creating fallback category '{self.fallback_category_name}'")
            category = Category(name=self.fallback_category_name)
            self.session.add(category)
            self.session.commit()
            self.session.refresh(category)
        return ClassificationResult(
            category_id=category.id,
            category_name=category.name,
            source=ClassificationSource.FALLBACK,
        )
