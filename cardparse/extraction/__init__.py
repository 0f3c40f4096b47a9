from .fields import (
    FieldCandidate,
    extract_address,
    extract_company,
    extract_email,
    extract_name,
    extract_phones,
    extract_position,
)
from .parser import BusinessCardParser, normalize_text
from .rules import ENGLISH_RULES, JAPANESE_RULES, LanguageRules, rules_for

__all__ = [
    "BusinessCardParser",
    "ENGLISH_RULES",
    "FieldCandidate",
    "JAPANESE_RULES",
    "LanguageRules",
    "extract_address",
    "extract_company",
    "extract_email",
    "extract_name",
    "extract_phones",
    "extract_position",
    "normalize_text",
    "rules_for",
]
