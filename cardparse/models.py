from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Any

FIELDS = ("name", "email", "phones", "company", "position", "address")

MAX_PHONES = 2


def empty_confidence() -> Dict[str, float]:
    return {key: 0.0 for key in FIELDS}


# =========================
# DATA MODEL
# =========================

@dataclass(frozen=True)
class ExtractedRecord:
    """Structured contact record recovered from one card's OCR text.

    Confidence always carries the six field keys. A field without a value
    reports 0.0 and every score is clamped to [0, 1].
    """
    name: Optional[str] = None
    email: Optional[str] = None
    phones: Tuple[str, ...] = ()
    company: Optional[str] = None
    position: Optional[str] = None
    address: Optional[str] = None
    language: str = "eng"
    raw_text: str = ""
    confidence: Dict[str, float] = field(default_factory=empty_confidence)

    def __post_init__(self):
        phones = tuple(dict.fromkeys(self.phones or ()))[:MAX_PHONES]
        object.__setattr__(self, "phones", phones)

        confidence = empty_confidence()
        for key in FIELDS:
            value = getattr(self, key)
            if not value:
                continue
            score = float(self.confidence.get(key, 0.0) or 0.0)
            confidence[key] = min(max(score, 0.0), 1.0)
        object.__setattr__(self, "confidence", confidence)

    @property
    def primary_phone(self) -> Optional[str]:
        return self.phones[0] if self.phones else None

    @property
    def secondary_phone(self) -> Optional[str]:
        return self.phones[1] if len(self.phones) > 1 else None

    @property
    def overall_confidence(self) -> float:
        """Arithmetic mean of the six field confidences."""
        return sum(self.confidence[key] for key in FIELDS) / len(FIELDS)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "email": self.email,
            "phones": list(self.phones),
            "primary_phone": self.primary_phone,
            "secondary_phone": self.secondary_phone,
            "company": self.company,
            "position": self.position,
            "address": self.address,
            "language": self.language,
            "raw_text": self.raw_text,
            "confidence": {key: round(value, 2) for key, value in self.confidence.items()},
            "overall_confidence": round(self.overall_confidence, 2),
        }
