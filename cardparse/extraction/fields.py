"""
Heuristic field extractors.

Every extractor takes the normalized card text plus a ``LanguageRules``
table and returns ``(value, confidence)``. Lines are filtered, scored with
weighted signals and ranked; the best candidate above the field threshold
wins and its score, divided by the field ceiling, becomes the confidence.
E-mail and phone use fixed confidence tiers instead.
"""

import logging
import re
from typing import Iterable, List, NamedTuple, Optional, Tuple

from .. import phone
from ..models import MAX_PHONES
from .rules import ENGLISH_RULES, LanguageRules

logger = logging.getLogger(__name__)

# Score ceilings (score / ceiling = confidence)
NAME_CEILING = 20
POSITION_CEILING = 25
COMPANY_CEILING = 25
ADDRESS_CEILING = 30

# Minimum winning scores
NAME_THRESHOLD = 3
POSITION_THRESHOLD = 10
COMPANY_THRESHOLD = 6
ADDRESS_MIN_INDICATORS = 2

NAME_WINDOW = 7
ADDRESS_MAX_SPAN = 4
ADDRESS_BARE_LINE_PENALTY = 3

EMAIL_CONFIDENCE = 0.98
EMAIL_MULTIPLE_CONFIDENCE = 0.95
EMAIL_REPAIRED_CONFIDENCE = 0.85
NAME_FROM_EMAIL_CONFIDENCE = 0.4
NAME_WEAK_CONFIDENCE = 0.3
PHONE_CONFIDENCE = 0.95
PHONE_DIGITS_CONFIDENCE = 0.6
PHONE_IMPLAUSIBLE_CONFIDENCE = 0.3
PHONE_PLAUSIBLE_DIGITS = 13


class FieldCandidate(NamedTuple):
    score: float
    text: str
    line_index: int


# =========================
# SHARED PATTERNS
# =========================

_EMAIL = re.compile(r"(?<![^\s:;,<(\[：])[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
_EMAIL_VALID = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)*\.[A-Za-z]{2,}$")
_AT_WORD = re.compile(r"\s*[\[(]\s*at\s*[\])]\s*", re.IGNORECASE)
_DOT_WORD = re.compile(r"\s*[\[(]\s*dot\s*[\])]\s*", re.IGNORECASE)
_SPACED_AT = re.compile(r"\s*[@＠]\s*")
_SPLIT_EMAIL = re.compile(r"([A-Za-z0-9._%+-]+)@([A-Za-z0-9.-]+(?:\s+[a-z]{2,4}){0,2})")
_CORN = re.compile(r"\.?corn$")
_REPEATED_DOTS = re.compile(r"\.{2,}")
_EMAIL_LOCAL_SPLIT = re.compile(r"[._-]+")

_PHONE_LABEL = re.compile(r"\b(?:tel|fax|mobile|mob|cell|phone)\b|電話|携帯|ＴＥＬ|ＦＡＸ", re.IGNORECASE)
_CONTACT_LABEL = re.compile(r"\b(?:e-?mail|web|website|url)\b|メール", re.IGNORECASE)
_URLISH = re.compile(r"www|http", re.IGNORECASE)
_DIGIT = re.compile(r"\d")

_NAME_TOKEN = re.compile(r"^[A-Z][a-z]+$|^[A-Z]\.$")
_NON_NAME_CHARS = re.compile(r"[^A-Za-z\s\-'.]")
_LEADING_JUNK = re.compile(r"^[•\s«»\-_\d]")
_NON_NAME_MARKERS = re.compile(
    r"\b(?:tel|fax|e-?mail|phone|suite|street|avenue|road)\b|\b(?:st|ave|rd)\.",
    re.IGNORECASE
)
_CAPS_BUSINESS = re.compile(r"\b(?:national|international|corp|inc|ltd|llc)\b", re.IGNORECASE)

_TITLE_SHAPE = re.compile(r"^[A-Z][A-Za-z\s&.,/-]{2,40}$")
_COMPANY_SHAPE = re.compile(r"^[A-Z0-9][A-Za-z0-9\s&.,'-]{2,50}$")
_PERSON_SHAPE = re.compile(r"^[A-Z][A-Za-z]+\s+[A-Z][A-Za-z]+$")


# =========================
# HELPERS
# =========================

def split_lines(text: str) -> List[str]:
    return [line.strip() for line in (text or "").split("\n") if line.strip()]


def best_candidate(candidates: Iterable[FieldCandidate], threshold: float) -> Optional[FieldCandidate]:
    """Highest score wins; ties keep the earliest candidate (stable sort)."""
    ranked = sorted(candidates, key=lambda candidate: candidate.score, reverse=True)
    if ranked and ranked[0].score >= threshold:
        return ranked[0]
    return None


def confidence(score: float, ceiling: float) -> float:
    return min(max(score / ceiling, 0.0), 1.0)


def has_digits(line: str) -> bool:
    return bool(_DIGIT.search(line))


def is_email_line(line: str) -> bool:
    return "@" in line or "＠" in line


def is_phone_line(line: str, rules: LanguageRules) -> bool:
    return bool(_PHONE_LABEL.search(line)) or bool(phone.scan(line, rules.phone_region))


def is_urlish(line: str) -> bool:
    return bool(_URLISH.search(line))


def _is_contact_noise(line: str, rules: LanguageRules) -> bool:
    """Lines that can never be a name, position or company."""
    return (
        is_email_line(line)
        or is_phone_line(line, rules)
        or not rules.letter.search(line)
        or is_urlish(line)
    )


def _address_score(text: str, rules: LanguageRules) -> Tuple[int, int]:
    """Return (weighted score, number of indicators present)."""
    score = 0
    count = 0
    for indicator in rules.address_indicators:
        if indicator.pattern.search(text):
            score += indicator.weight
            count += 1
    return score, count


def _is_address_like(line: str, rules: LanguageRules) -> bool:
    return _address_score(line, rules)[1] >= ADDRESS_MIN_INDICATORS


# =========================
# EMAIL
# =========================

def repair_email(line: str, rules: LanguageRules = ENGLISH_RULES) -> Optional[str]:
    """Rebuild an e-mail address OCR split or obfuscated on one line.

    Handles ``[at]``/``[dot]``, spaces around ``@``, a TLD separated by
    whitespace (``name@host com``), ``corn`` read for ``com`` and the
    language's glyph substitution table.
    """
    fixed = _AT_WORD.sub("@", line)
    fixed = _DOT_WORD.sub(".", fixed)
    if not is_email_line(fixed):
        return None

    for wrong, right in rules.email_glyphs:
        fixed = fixed.replace(wrong, right)
    fixed = _SPACED_AT.sub("@", fixed)

    match = _SPLIT_EMAIL.search(fixed)
    if not match:
        return None

    local, domain = match.groups()
    domain = ".".join(domain.split())
    domain = _CORN.sub(".com", domain)
    domain = _REPEATED_DOTS.sub(".", domain).strip(".")
    candidate = f"{local}@{domain}"

    if _EMAIL_VALID.match(candidate):
        return candidate
    return None


def extract_email(text: str, rules: LanguageRules = ENGLISH_RULES) -> Tuple[Optional[str], float]:
    found = []
    for match in _EMAIL.finditer(text or ""):
        email = match.group(0).rstrip(".")
        if _EMAIL_VALID.match(email) and email not in found:
            found.append(email)

    if found:
        return found[0], EMAIL_CONFIDENCE if len(found) == 1 else EMAIL_MULTIPLE_CONFIDENCE

    for line in split_lines(text):
        repaired = repair_email(line, rules)
        if repaired:
            logger.debug(f"Repaired e-mail from OCR line: {repaired}")
            return repaired, EMAIL_REPAIRED_CONFIDENCE

    return None, 0.0


# =========================
# PHONES
# =========================

def extract_phones(text: str, rules: LanguageRules = ENGLISH_RULES) -> Tuple[List[str], float]:
    matches = phone.scan(text, rules.phone_region)[:MAX_PHONES]
    if not matches:
        return [], 0.0

    primary = matches[0]
    if len(primary.digits) > PHONE_PLAUSIBLE_DIGITS:
        score = PHONE_IMPLAUSIBLE_CONFIDENCE
    elif primary.kind == phone.DIGITS:
        score = PHONE_DIGITS_CONFIDENCE
    else:
        score = PHONE_CONFIDENCE

    return [match.number for match in matches], score


# =========================
# NAME
# =========================

def _name_like_tokens(line: str) -> bool:
    tokens = _NON_NAME_CHARS.sub("", line).split()
    return 2 <= len(tokens) <= 3 and all(_NAME_TOKEN.match(token) for token in tokens)


def _is_person_pattern(line: str, rules: LanguageRules) -> bool:
    matches_shape = any(pattern.match(line) for pattern in rules.person_patterns)
    return matches_shape and not rules.job_title.search(line)


def _is_email_like(line: str, rules: LanguageRules) -> bool:
    """Literal ``@`` or an address ``repair_email`` can rebuild."""
    return is_email_line(line) or repair_email(line, rules) is not None


def _looks_like_non_name(line: str, rules: LanguageRules) -> bool:
    return (
        len(line) < rules.min_name_length
        or bool(_LEADING_JUNK.match(line))
        or bool(_NON_NAME_MARKERS.search(line))
        or (line.isupper() and bool(_CAPS_BUSINESS.search(line)))
    )


def _score_name(line: str, index: int, rules: LanguageRules) -> int:
    score = 0
    if _name_like_tokens(line):
        score += 5
    if _is_person_pattern(line, rules):
        score += 8
    if not has_digits(line):
        score += 2
    if 3 <= len(line) <= 40:
        score += 1
    if index < 3:
        score += 2
    if is_urlish(line):
        score -= 5
    if rules.address_hint.search(line):
        score -= 4
    return score


def name_from_email(email: Optional[str]) -> Optional[str]:
    """john.doe@example.com -> "John Doe"."""
    if not email or "@" not in email:
        return None
    local = email.split("@", 1)[0]
    parts = [part for part in _EMAIL_LOCAL_SPLIT.split(local) if part]
    if not parts:
        return None
    return " ".join(part.capitalize() for part in parts)


def extract_name(text: str, rules: LanguageRules = ENGLISH_RULES) -> Tuple[Optional[str], float]:
    lines = split_lines(text)

    candidates = []
    for index, line in enumerate(lines[:NAME_WINDOW]):
        if (
            _is_email_like(line, rules)
            or is_phone_line(line, rules)
            or not rules.letter.search(line)
            or rules.role_or_company.search(line)
            or _looks_like_non_name(line, rules)
        ):
            continue
        # A line needs a name shape before it can compete
        if not (_name_like_tokens(line) or _is_person_pattern(line, rules)):
            continue
        candidates.append(FieldCandidate(_score_name(line, index, rules), line, index))

    best = best_candidate(candidates, NAME_THRESHOLD)
    if best:
        return best.text, confidence(best.score, NAME_CEILING)

    email, _ = extract_email(text, rules)
    derived = name_from_email(email)
    if derived:
        return derived, NAME_FROM_EMAIL_CONFIDENCE

    for line in lines:
        if _is_email_like(line, rules) or is_phone_line(line, rules) or rules.role_or_company.search(line):
            continue
        if _name_like_tokens(line):
            return line, NAME_WEAK_CONFIDENCE

    return None, 0.0


# =========================
# POSITION
# =========================

def extract_position(text: str, rules: LanguageRules = ENGLISH_RULES) -> Tuple[Optional[str], float]:
    if not rules.guess_organization:
        return None, 0.0

    candidates = []
    for index, line in enumerate(split_lines(text)):
        if _is_contact_noise(line, rules):
            continue

        score = 0
        if rules.position_keywords.search(line):
            score += 12
        if rules.seniority_keywords.search(line):
            score += 3
        if _TITLE_SHAPE.match(line) and 1 <= len(line.split()) <= 4:
            score += 4
        if not has_digits(line):
            score += 2
        if index < 4:
            score += 2
        if rules.legal_suffixes.search(line):
            score -= 6
        if _is_address_like(line, rules):
            score -= 8

        candidates.append(FieldCandidate(score, line, index))

    best = best_candidate(candidates, POSITION_THRESHOLD)
    if best:
        return best.text, confidence(best.score, POSITION_CEILING)
    return None, 0.0


# =========================
# COMPANY
# =========================

def extract_company(text: str, rules: LanguageRules = ENGLISH_RULES) -> Tuple[Optional[str], float]:
    if not rules.guess_organization:
        return None, 0.0

    candidates = []
    for index, line in enumerate(split_lines(text)):
        if _is_contact_noise(line, rules):
            continue

        words = line.split()
        legal = bool(rules.legal_suffixes.search(line))
        industry = bool(rules.industry_keywords.search(line))
        has_keyword = legal or industry

        score = 0
        if legal:
            score += 14
        if industry:
            score += 6
        if _COMPANY_SHAPE.match(line) and 1 <= len(words) <= 5:
            score += 3
        if not has_digits(line):
            score += 2
        if line.isupper() and len(words) >= 2:
            score += 2
        if _PERSON_SHAPE.match(line) and not has_keyword:
            score -= 5
        if len(line) <= 4 and " " not in line and has_keyword:
            score -= 15
        if _is_address_like(line, rules):
            score -= 20
        if rules.position_keywords.search(line):
            score -= 6

        candidates.append(FieldCandidate(score, line, index))

    best = best_candidate(candidates, COMPANY_THRESHOLD)
    if best:
        return best.text, confidence(best.score, COMPANY_CEILING)
    return None, 0.0


# =========================
# ADDRESS
# =========================

def _address_lines(lines: List[str], rules: LanguageRules) -> List[str]:
    kept = []
    for line in lines:
        if is_email_line(line) or is_phone_line(line, rules) or _CONTACT_LABEL.search(line):
            continue
        # Short all-caps lines are logos or company names
        if line.isupper() and len(line) < 20 and not has_digits(line):
            continue
        if len(line) <= 4 and " " not in line and not has_digits(line):
            continue
        kept.append(line)
    return kept


def extract_address(text: str, rules: LanguageRules = ENGLISH_RULES) -> Tuple[Optional[str], float]:
    lines = _address_lines(split_lines(text), rules)
    line_scores = [_address_score(line, rules) for line in lines]

    candidates = []
    for index, (line, (score, count)) in enumerate(zip(lines, line_scores)):
        if count >= ADDRESS_MIN_INDICATORS:
            candidates.append(FieldCandidate(score, line, index))

    # Street / city / zip are often split over consecutive lines
    for start in range(len(lines)):
        for end in range(start + 1, min(start + ADDRESS_MAX_SPAN, len(lines))):
            joined = ", ".join(lines[start:end + 1])
            score, count = _address_score(joined, rules)
            if count < ADDRESS_MIN_INDICATORS:
                continue
            bare = sum(1 for _, line_count in line_scores[start:end + 1] if line_count == 0)
            candidates.append(
                FieldCandidate(score - ADDRESS_BARE_LINE_PENALTY * bare, joined, start)
            )

    best = best_candidate(candidates, 1)
    if best:
        return best.text, confidence(best.score, ADDRESS_CEILING)
    return None, 0.0


EXTRACTORS = (
    ("email", extract_email),
    ("phones", extract_phones),
    ("name", extract_name),
    ("company", extract_company),
    ("position", extract_position),
    ("address", extract_address),
)
