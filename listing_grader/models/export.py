"""
Export models - the persisted rules file shared by the batch job and the grader.
"""
import logging
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .rules import CategoryRules, FALLBACK_RULES


logger = logging.getLogger(__name__)


class RulesFileMetadata(BaseModel):
    """Metadata for a batch run that produced a rules file."""
    generated_at: datetime
    corpus_size: int = 0
    selection: str = Field(default="top 20", description="Exemplar selection method used")

    total_categories: int = 0
    total_exemplars: int = 0
    exemplar_counts: dict[str, int] = Field(default_factory=dict)

    # Categories present in the corpus but graded with fallback rules
    fallback_categories: list[str] = Field(default_factory=list)
    confidence_distribution: dict[str, int] = Field(
        default_factory=lambda: {"high": 0, "medium": 0, "low": 0}
    )

    # Schema version
    schema_version: str = "1.0.0"


class RulesFile(BaseModel):
    """
    Category rules keyed by category plus the fallback.
    Loaded once by the hosting service and reused until the next batch run.
    """
    metadata: RulesFileMetadata
    rules: dict[str, CategoryRules] = Field(default_factory=dict)
    fallback_rules: CategoryRules = Field(default_factory=lambda: FALLBACK_RULES)

    def rules_for(self, category: Optional[str]) -> CategoryRules:
        """
        Resolve the rules for a category.
        Tries an exact match, a case-insensitive match, then the nearest
        ancestor in the category path before settling on the fallback.
        A category the batch run put on fallback rules stops the walk,
        so its listings never borrow a parent's rules.
        """
        if not category:
            return self.fallback_rules

        category = category.strip().strip("/")
        if category in self.rules:
            return self.rules[category]

        lowered = {name.lower(): name for name in self.rules}
        floored = {name.lower() for name in self.metadata.fallback_categories}
        parts = category.split("/")
        while parts:
            candidate = "/".join(parts).lower()
            if candidate in floored:
                logger.debug(f"'{category}' had too few exemplars, using fallback")
                return self.fallback_rules
            if candidate in lowered:
                match = lowered[candidate]
                if match.lower() != category.lower():
                    logger.debug(f"Using ancestor rules '{match}' for '{category}'")
                return self.rules[match]
            parts.pop()

        logger.debug(f"No category rules for '{category}', using fallback")
        return self.fallback_rules

    def categories(self) -> list[str]:
        return list(self.rules)
