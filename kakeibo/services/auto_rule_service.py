"""Keyword rules that map transaction descriptions to categories."""

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from kakeibo.core.db import AutoRule, Category
from kakeibo.core.errors import CategoryNotFoundError


class AutoRuleService:
    """Service for keyword-to-category rules."""

    def __init__(self, session: Session) -> None:
        """Initialize the AutoRuleService with a SQLAlchemy session."""
        self.session = session

    def get_all(self) -> list[AutoRule]:
        """Return every rule in match order: longest keyword first, then alphabetical."""
        stmt = select(AutoRule).order_by(func.length(AutoRule.keyword).desc(), AutoRule.keyword.asc())
        return list(self.session.execute(stmt).scalars().unique())

    def find_by_keyword(self, keyword: str) -> AutoRule | None:
        """Return the rule for an exact keyword, if any."""
        return self.session.execute(select(AutoRule).where(AutoRule.keyword == keyword)).scalars().first()

    def find_matching_rule(self, description: str) -> AutoRule | None:
        """Return the first rule whose keyword occurs in the description."""
        for rule in self.get_all():
            if rule.keyword in description:
                return rule
        return None

    def create_or_update(self, keyword: str, category_id: int) -> AutoRule:
        """Point a keyword at a category, creating the rule if needed."""
        trimmed = keyword.strip()
        if not trimmed:
            msg = "Keyword is required"
            raise ValueError(msg)
        if self.session.get(Category, category_id) is None:
            raise CategoryNotFoundError(category_id)
        rule = self.find_by_keyword(trimmed)
        if rule is None:
            rule = AutoRule(keyword=trimmed, category_id=category_id)
            self.session.add(rule)
        else:
            rule.category_id = category_id
        self.session.commit()
        self.session.refresh(rule)
        return rule

    def delete(self, rule_id: int) -> bool:
        """Delete a rule; returns False when it did not exist."""
        rule = self.session.get(AutoRule, rule_id)
        if rule is None:
            return False
        self.session.delete(rule)
        self.session.commit()
        return True
