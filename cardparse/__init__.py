"""
Business card OCR: resilient OCR gateway plus heuristic field extraction.
"""

from .errors import (
    ApiFailure,
    BackendError,
    CircuitOpen,
    GatewayError,
    RateLimitExceeded,
)
from .extraction import BusinessCardParser
from .gateway import CircuitBreakerConfig, CircuitBreakerState, GatewayResult, OCRGateway
from .models import ExtractedRecord
from .scanner import CardScanner

__all__ = [
    "ApiFailure",
    "BackendError",
    "BusinessCardParser",
    "CardScanner",
    "CircuitBreakerConfig",
    "CircuitBreakerState",
    "CircuitOpen",
    "ExtractedRecord",
    "GatewayError",
    "GatewayResult",
    "OCRGateway",
    "RateLimitExceeded",
]
