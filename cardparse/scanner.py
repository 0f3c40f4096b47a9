"""
Business Card Scanner
Routes OCR through the resilient gateway and parses the text into a contact record.

FLOW:
1. OCR backend call, admitted or rejected by the gateway
2. If the gateway reports an error and a fallback backend is configured → fallback text
3. Field extraction with per-field confidence
"""

import logging
import time
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .backends.base import OCRBackend, clean_base64_data
from .extraction import BusinessCardParser
from .gateway import GatewayResult, OCRGateway
from .models import ExtractedRecord

logger = logging.getLogger(__name__)


class CardScanner:
    """Complete scan flow for one OCR backend."""

    def __init__(
        self,
        backend: OCRBackend,
        gateway: Optional[OCRGateway] = None,
        parser: Optional[BusinessCardParser] = None,
        fallback: Optional[OCRBackend] = None,
        language: str = "eng"
    ):
        """
        Args:
            backend: Primary OCR backend
            gateway: Circuit breaker / rate limiter guarding the backend
            parser: Field extraction engine
            fallback: Backend used when the gateway returns an error
            language: Default OCR language tag
        """
        self.backend = backend
        self.gateway = gateway or OCRGateway()
        self.parser = parser or BusinessCardParser()
        self.fallback = fallback
        self.language = language

        logger.info(
            f"CardScanner initialized - backend: {backend.name}, "
            f"fallback: {fallback.name if fallback else None}"
        )

    # ======================================================
    # OCR
    # ======================================================

    def extract_text(
        self,
        image: str,
        language: Optional[str] = None,
        file_type: str = "jpg"
    ) -> GatewayResult:
        """Run the backend through the gateway. Never raises."""
        language = language or self.language
        data = clean_base64_data(image)
        return self.gateway.call(
            lambda: self.backend.parse_image(data, language=language, file_type=file_type),
            backend_name=self.backend.name,
            language=language,
        )

    # ======================================================
    # SCAN
    # ======================================================

    def scan(self, image: str, language: Optional[str] = None, file_type: str = "jpg") -> Dict[str, Any]:
        """
        Scan a base64 encoded business card image.

        Args:
            image: Base64 image, data-URI prefix allowed
            language: OCR language tag, defaults to the scanner language
            file_type: Image type hint for the backend

        Returns:
            Result envelope with ``success``, ``contact_data`` and error details
        """
        start_time = time.time()
        language = language or self.language

        result = self.extract_text(image, language=language, file_type=file_type)
        ocr_method = self.backend.name
        used_fallback = False

        if not result.success and self.fallback is not None:
            logger.warning(
                f"OCR gateway returned {result.error.code} - using {self.fallback.name} fallback"
            )
            try:
                fallback_result = self.fallback.parse_image(
                    clean_base64_data(image), language=language, file_type=file_type
                )
                result = GatewayResult.ok(fallback_result.text, fallback_result.meta)
                ocr_method = self.fallback.name
                used_fallback = True
            except Exception as e:
                logger.error(f"Fallback OCR failed: {e}")

        if not result.success:
            return {
                "success": False,
                "error": str(result.error),
                "error_code": result.error.code,
                "ocr_method": ocr_method,
                "processing_time_ms": int((time.time() - start_time) * 1000),
            }

        record = self.parser.parse(result.text, language=language)
        envelope = self._envelope(record, ocr_method, start_time)
        envelope["ocr_meta"] = result.meta or {}
        envelope["fallback"] = used_fallback
        return envelope

    def parse_text(self, text: str, language: Optional[str] = None) -> Dict[str, Any]:
        """Parse text that was already extracted elsewhere."""
        start_time = time.time()
        record = self.parser.parse(text, language=language or self.language)
        return self._envelope(record, "text", start_time)

    def _envelope(self, record: ExtractedRecord, ocr_method: str, start_time: float) -> Dict[str, Any]:
        total_time = time.time() - start_time
        logger.info(f"Card processed in {total_time:.2f}s ({ocr_method})")
        return {
            "success": True,
            "contact_data": record.to_dict(),
            "raw_text": record.raw_text,
            "confidence": round(record.overall_confidence, 2),
            "field_confidence": record.to_dict()["confidence"],
            "ocr_method": ocr_method,
            "processing_time_ms": int(total_time * 1000),
            "processed_at": datetime.now(timezone.utc).isoformat(),
        }

    # ======================================================
    # STATUS
    # ======================================================

    def get_status(self) -> Dict[str, Any]:
        """Get scanner status information."""
        return {
            "ocr_backend": self.backend.name,
            "fallback_backend": self.fallback.name if self.fallback else None,
            "language": self.language,
            "extraction_timeout_ms": self.parser.timeout_ms,
            "gateway": self.gateway.get_state().to_dict(),
            "gateway_config": asdict(self.gateway.config),
        }
