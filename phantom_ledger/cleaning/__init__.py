"""Description cleaning: rule catalog and cleaner strategies."""

from .rules import CLEANING_RULES, MERCHANT_ALIASES, CleaningRule, clean_description
from .cleaner import (
    DescriptionCleaner,
    RuleBasedCleaner,
    AIAssistedCleaner,
    build_cleaner,
)

__all__ = [
    "CLEANING_RULES",
    "MERCHANT_ALIASES",
    "CleaningRule",
    "clean_description",
    "DescriptionCleaner",
    "RuleBasedCleaner",
    "AIAssistedCleaner",
    "build_cleaner",
]
