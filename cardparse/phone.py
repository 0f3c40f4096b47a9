"""
Phone number detection and formatting.

Numbers are found with an ordered set of patterns (North American local,
explicit international, regional trunk-prefixed, bare digit runs), formatted
into ``+<cc> <area> <prefix> <suffix>`` style strings, de-duplicated by their
digits and kept only when they carry 10-15 digits. Validation is purely
digit-count based because OCR output is too noisy for anything stricter.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

MIN_DIGITS = 10
MAX_DIGITS = 15

# Match kinds, in scan order
LOCAL = "local"
INTERNATIONAL = "international"
TRUNK = "trunk"
DIGITS = "digits"

_US_PATTERN = re.compile(r"(?<![\w+])(\+?1[-.\s]?)?\(?(\d{3})\)?[-.\s]?(\d{3})[-.\s]?(\d{4})(?!\d)")
_INTERNATIONAL_PATTERN = re.compile(r"\+\d{1,3}[-.\s]?\d{1,4}[-.\s]?\d{3,4}[-.\s]?\d{3,4}(?!\d)")
_UK_PATTERN = re.compile(r"(?<![\d+])0\d{2,3}[-.\s]?\d{3,4}[-.\s]?\d{3,4}(?!\d)")
_JP_PATTERN = re.compile(r"(?<![\d+])(0\d{1,4})[-\s](\d{1,4})[-\s](\d{4})(?!\d)")
_DIGITS_ONLY_PATTERN = re.compile(r"(?<![\d+])\d{10,15}(?!\d)")

_SEPARATORS = re.compile(r"[-.\s]+")
_NON_DIGITS = re.compile(r"\D")
_NON_PHONE_CHARS = re.compile(r"[^\d+\-().\s]")
_SPACES = re.compile(r"\s+")

# Trunk-prefixed national numbers ("0..."). A US default keeps the UK
# convention, matching how cards were read before regions existed.
_TRUNK_BY_REGION = {
    "US": "GB",
    "GB": "GB",
    "JP": "JP",
}

_COUNTRY_PREFIXES = [
    ("+1", "US"),
    ("+44", "GB"),
    ("+81", "JP"),
]


class InvalidPhoneNumber(ValueError):
    """Raised when a string does not contain a usable phone number."""


@dataclass(frozen=True)
class PhoneMatch:
    """A formatted phone number and the pattern family that found it."""
    number: str
    kind: str

    @property
    def digits(self) -> str:
        return digits_of(self.number)


def digits_of(phone: str) -> str:
    return _NON_DIGITS.sub("", phone or "")


def _format_us(match: re.Match) -> str:
    country, area, prefix, suffix = match.groups()
    country_digits = digits_of(country or "")
    if country_digits in ("", "1"):
        return f"+1 {area} {prefix} {suffix}"
    return f"+{country_digits} {area} {prefix} {suffix}"


def _format_international(match: re.Match) -> str:
    return _SEPARATORS.sub(" ", match.group(0)).strip()


def _format_uk(match: re.Match) -> str:
    national = _SEPARATORS.sub(" ", match.group(0)).strip()
    return "+44 " + national[1:]


def _format_jp(match: re.Match) -> str:
    area, prefix, suffix = match.groups()
    return f"+81 {area[1:]} {prefix} {suffix}"


def _format_digits(match: re.Match) -> str:
    digits = match.group(0)
    if len(digits) == 10:
        return f"+1 {digits[0:3]} {digits[3:6]} {digits[6:10]}"
    if len(digits) == 11 and digits.startswith("1"):
        return f"+1 {digits[1:4]} {digits[4:7]} {digits[7:11]}"
    return f"+{digits}"


_TRUNK_PATTERNS = {
    "GB": (_UK_PATTERN, _format_uk),
    "JP": (_JP_PATTERN, _format_jp),
}


def _patterns(default_region: str):
    trunk_pattern, trunk_formatter = _TRUNK_PATTERNS[
        _TRUNK_BY_REGION.get((default_region or "US").upper(), "GB")
    ]
    return [
        (LOCAL, _US_PATTERN, _format_us),
        (INTERNATIONAL, _INTERNATIONAL_PATTERN, _format_international),
        (TRUNK, trunk_pattern, trunk_formatter),
        (DIGITS, _DIGITS_ONLY_PATTERN, _format_digits),
    ]


def scan(text: str, default_region: str = "US") -> List[PhoneMatch]:
    """Find every valid, unique phone number in ``text`` in scan order.

    Args:
        text: Text to search
        default_region: Region used for trunk-prefixed numbers ("US", "GB", "JP")

    Returns:
        List of PhoneMatch, pattern order first, then position in text
    """
    if not text:
        return []

    seen = set()
    matches = []
    for kind, pattern, formatter in _patterns(default_region):
        for match in pattern.finditer(text):
            number = formatter(match)
            digits = digits_of(number)
            if digits in seen or not MIN_DIGITS <= len(digits) <= MAX_DIGITS:
                continue
            seen.add(digits)
            matches.append(PhoneMatch(number=number, kind=kind))
    return matches


def extract_all(text: str, default_region: str = "US") -> List[str]:
    """Extract all phone numbers from text in international format."""
    return [match.number for match in scan(text, default_region)]


def extract_primary_and_secondary(
    text: str,
    default_region: str = "US"
) -> Tuple[Optional[str], Optional[str]]:
    """Return at most two numbers; the first one found is the primary."""
    phones = extract_all(text, default_region)
    primary = phones[0] if phones else None
    secondary = phones[1] if len(phones) > 1 else None
    return primary, secondary


def is_valid(phone: str) -> bool:
    """A phone is valid when it carries 10-15 digits."""
    return MIN_DIGITS <= len(digits_of(phone)) <= MAX_DIGITS


def format_international(phone: str, default_region: str = "US") -> str:
    """Format a phone string as ``+<cc> ...``.

    Raises:
        InvalidPhoneNumber: If no valid number can be read from the string
    """
    phones = extract_all(phone, default_region)
    if not phones:
        raise InvalidPhoneNumber(f"Not a phone number: {phone!r}")
    return phones[0]


def format_national(phone: str, default_region: str = "US") -> str:
    """Format a phone string the way it is dialled inside its country.

    Raises:
        InvalidPhoneNumber: If no valid number can be read from the string
    """
    international = format_international(phone, default_region)
    if international.startswith("+1 "):
        return international[3:]
    if international.startswith("+44 ") or international.startswith("+81 "):
        return "0" + international[4:]
    return international.lstrip("+")


def get_country_code(phone: str) -> str:
    """Best-effort ISO region for a phone string ("US", "GB", "JP" or "UNKNOWN").

    Raises:
        InvalidPhoneNumber: If the string is not a valid phone number
    """
    if not is_valid(phone):
        raise InvalidPhoneNumber(f"Not a phone number: {phone!r}")
    compact = _SPACES.sub("", phone.strip())
    for prefix, region in _COUNTRY_PREFIXES:
        if compact.startswith(prefix):
            return region
    if compact.startswith("+"):
        return "UNKNOWN"
    return "US"


def clean(phone: str) -> str:
    """Strip everything that cannot be part of a written phone number."""
    cleaned = _NON_PHONE_CHARS.sub("", phone or "")
    return _SPACES.sub(" ", cleaned).strip()
