"""
Business card parser.

Normalizes raw OCR text, picks the rule set for the card language and runs
the six field extractors concurrently. Each extractor is isolated: a fault
or a timeout only blanks its own field.
"""

import logging
import re
import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Dict, Tuple, Any

from .. import telemetry
from ..models import FIELDS, ExtractedRecord
from .fields import EXTRACTORS
from .rules import rules_for

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 2000

_LINE_BREAKS = re.compile(r"\r\n?")


def normalize_text(text: str) -> str:
    """Unify line breaks, trim and drop blank lines."""
    text = _LINE_BREAKS.sub("\n", text or "").strip()
    return "\n".join(line for line in text.split("\n") if line.strip())


class BusinessCardParser:
    """Turns OCR text into an ExtractedRecord with per-field confidence."""

    def __init__(self, timeout_ms: int = DEFAULT_TIMEOUT_MS, extractors=None):
        """
        Args:
            timeout_ms: Per-field extraction budget in milliseconds
            extractors: Optional (field, function) pairs replacing the defaults
        """
        self.timeout_ms = timeout_ms
        self.extractors = tuple(extractors or EXTRACTORS)

    def parse(self, raw_text: str, language: str = "eng") -> ExtractedRecord:
        """
        Parse business card text.

        Args:
            raw_text: Text as returned by the OCR backend
            language: OCR language tag; anything containing "jpn" selects
                the Japanese rules

        Returns:
            ExtractedRecord (never raises on malformed input)
        """
        language = language or "eng"
        rules = rules_for(language)
        text = normalize_text(raw_text)

        start = time.perf_counter()
        results = self._run_extractors(text, rules)

        record = ExtractedRecord(
            name=results["name"][0],
            email=results["email"][0],
            phones=tuple(results["phones"][0] or ()),
            company=results["company"][0],
            position=results["position"][0],
            address=results["address"][0],
            language=language,
            raw_text=text,
            confidence={field: score for field, (_, score) in results.items()},
        )

        logger.debug(
            f"Parsed card in {(time.perf_counter() - start) * 1000:.1f}ms "
            f"with {rules.name} rules"
        )

        measurements = dict(record.confidence)
        measurements["overall"] = record.overall_confidence
        telemetry.emit(
            telemetry.CARD_PARSE,
            measurements,
            {"language": language, "parser": rules.name},
        )
        return record

    def _run_extractors(self, text: str, rules) -> Dict[str, Tuple[Any, float]]:
        results = {field: (None, 0.0) for field in FIELDS}
        timeout = self.timeout_ms / 1000

        executor = ThreadPoolExecutor(max_workers=len(self.extractors), thread_name_prefix="card-field")
        try:
            futures = {
                executor.submit(extractor, text, rules): field
                for field, extractor in self.extractors
            }
            done, not_done = wait(futures, timeout=timeout)

            for future in done:
                field = futures[future]
                try:
                    results[field] = future.result()
                except Exception as e:
                    logger.warning(f"Extractor for {field} failed: {e}", exc_info=True)

            for future in not_done:
                logger.warning(f"Extractor for {futures[future]} timed out after {self.timeout_ms}ms")
        finally:
            # A stuck extractor must not hold up the caller
            executor.shutdown(wait=False, cancel_futures=True)

        return results
