"""Transaction edits that teach the keyword rules.

When a user moves a transaction to another category, its description becomes (or re-points) an
auto rule, so the next scrape of the same merchant is classified by the rule pass.
"""

from kakeibo.core.db import Transaction
from kakeibo.core.utils import get_logger
from kakeibo.services.auto_rule_service import AutoRuleService
from kakeibo.services.transaction_service import TransactionService

logger = get_logger("kakeibo.learning")


class TransactionWithLearning:
    """Updates transactions and learns a rule from every category change."""

    def __init__(self, transaction_service: TransactionService, auto_rule_service: AutoRuleService) -> None:
        """Initialize with the transaction and auto-rule services."""
        self.transaction_service = transaction_service
        self.auto_rule_service = auto_rule_service

    def update_with_learning(
        self,
        transaction_id: int,
        *,
        amount: int | None = None,
        category_id: int | None = None,
        memo: str | None = None,
    ) -> Transaction:
        """Update a transaction; a changed category upserts a rule keyed by its description."""
        existing = self.transaction_service.get_by_id(transaction_id)
        previous_category_id = existing.category_id
        description = existing.description

        updated = self.transaction_service.update(transaction_id, amount=amount, category_id=category_id, memo=memo)

        if category_id is not None and category_id != previous_category_id:
            if not description.strip():
                logger.info(f"Transaction {transaction_id} has no description; nothing to learn")
                return updated
            rule = self.auto_rule_service.create_or_update(description, category_id)
            logger.info(f"Learned rule '{rule.keyword}' -> category {category_id}")
        return updated
