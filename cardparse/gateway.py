"""
Resilient OCR gateway: a circuit breaker plus fixed-window rate limiter in
front of any OCR backend call.

All state lives in one ``OCRGateway`` instance and is only touched while
holding its lock, so concurrent callers are serialized and window resets
and phase transitions never interleave.
"""

import logging
import threading
import time
from dataclasses import dataclass, asdict, replace
from typing import Any, Callable, Dict, Optional

from . import telemetry
from .errors import ApiFailure, BackendError, CircuitOpen, GatewayError, RateLimitExceeded

logger = logging.getLogger(__name__)

CLOSED = "closed"
OPEN = "open"
HALF_OPEN = "half_open"


@dataclass(frozen=True)
class CircuitBreakerConfig:
    failure_threshold: int = 5
    recovery_timeout_ms: int = 60_000
    half_open_max_calls: int = 3
    max_requests: int = 500
    window_ms: int = 3_600_000


@dataclass
class CircuitBreakerState:
    phase: str = CLOSED
    failure_count: int = 0
    success_count: int = 0
    request_count: int = 0
    window_start: float = 0.0
    last_failure_time: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class GatewayResult:
    """Tagged outcome of a gateway call. Exactly one of text/error is set."""
    success: bool
    text: Optional[str] = None
    meta: Optional[Dict[str, Any]] = None
    error: Optional[GatewayError] = None

    @classmethod
    def ok(cls, text: str, meta: Optional[Dict[str, Any]] = None) -> "GatewayResult":
        return cls(success=True, text=text, meta=meta or {})

    @classmethod
    def failed(cls, error: GatewayError) -> "GatewayResult":
        return cls(success=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "text": self.text,
            "meta": self.meta,
            "error": self.error.to_dict() if self.error else None,
        }


def monotonic_ms() -> float:
    return time.monotonic() * 1000


class OCRGateway:
    """Admit-or-reject guard around one logical OCR backend."""

    def __init__(
        self,
        config: Optional[CircuitBreakerConfig] = None,
        clock: Optional[Callable[[], float]] = None
    ):
        """
        Args:
            config: Thresholds; defaults apply when omitted
            clock: Returns the current time in milliseconds (monotonic)
        """
        self.config = config or CircuitBreakerConfig()
        self._clock = clock or monotonic_ms
        self._lock = threading.Lock()
        self._state = CircuitBreakerState(window_start=self._clock())

    # =========================
    # PUBLIC API
    # =========================

    def call(
        self,
        backend_fn: Callable[[], Any],
        backend_name: str = "unknown",
        language: str = "eng"
    ) -> GatewayResult:
        """
        Run ``backend_fn`` if the rate window and circuit allow it.

        ``backend_fn`` returns ``(text, meta)`` or an object with ``text`` and
        ``meta`` attributes, and may raise. This method never raises.

        Args:
            backend_fn: Zero-argument callable performing the OCR request
            backend_name: Reported in telemetry
            language: Reported in telemetry

        Returns:
            GatewayResult
        """
        started = time.perf_counter()
        with self._lock:
            result = self._call_locked(backend_fn)

        telemetry.emit(
            telemetry.OCR_CALL,
            {"duration_ms": (time.perf_counter() - started) * 1000},
            {
                "backend": backend_name,
                "language": language,
                "success": result.success,
                "error": result.error.code if result.error else None,
            },
        )
        return result

    def get_state(self) -> CircuitBreakerState:
        """Snapshot of the breaker state; mutating it has no effect."""
        with self._lock:
            return replace(self._state)

    def reset(self) -> None:
        """Close the circuit and zero every counter, including the rate window."""
        with self._lock:
            self._state = CircuitBreakerState(window_start=self._clock())
        logger.info("Circuit breaker reset")

    # =========================
    # STATE MACHINE
    # =========================

    def _call_locked(self, backend_fn) -> GatewayResult:
        state = self._state
        config = self.config
        now = self._clock()

        # 1. Rate window
        if now - state.window_start > config.window_ms:
            state.request_count = 0
            state.window_start = now
        if state.request_count >= config.max_requests:
            logger.warning(
                f"Rate limit exceeded - {state.request_count}/{config.max_requests} "
                f"requests in current window"
            )
            return GatewayResult.failed(RateLimitExceeded(
                f"Rate limit of {config.max_requests} requests per {config.window_ms}ms exceeded"
            ))
        state.request_count += 1

        # 2. Circuit
        if state.phase == OPEN:
            if now - state.last_failure_time > config.recovery_timeout_ms:
                state.phase = HALF_OPEN
                state.success_count = 0
                logger.info("Circuit breaker half-open, probing OCR backend")
            else:
                return GatewayResult.failed(CircuitOpen("Circuit breaker is open"))

        if state.phase == HALF_OPEN and state.success_count >= config.half_open_max_calls:
            state.phase = CLOSED
            state.failure_count = 0
            state.success_count = 0
            logger.info("Circuit breaker closed, OCR backend recovered")

        # 3. Invoke
        try:
            text, meta = _unpack(backend_fn())
        except BackendError as e:
            logger.warning(f"OCR backend error: {e}")
            self._record_failure()
            return GatewayResult.failed(e)
        except Exception as e:
            logger.error(f"OCR backend raised unexpectedly: {e}", exc_info=True)
            self._record_failure()
            return GatewayResult.failed(ApiFailure(f"OCR backend call failed: {e}", original_error=e))

        # 4. Success
        if state.phase == HALF_OPEN:
            state.success_count += 1
        else:
            state.failure_count = 0
        return GatewayResult.ok(text, meta)

    def _record_failure(self) -> None:
        state = self._state
        state.failure_count += 1
        state.last_failure_time = self._clock()
        state.success_count = 0
        if state.failure_count >= self.config.failure_threshold and state.phase != OPEN:
            state.phase = OPEN
            logger.warning(
                f"Circuit breaker opened after {state.failure_count} failures"
            )


def _unpack(value):
    if isinstance(value, tuple) and len(value) == 2:
        return value
    return value.text, value.meta
