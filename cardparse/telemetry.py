"""
In-process telemetry events for OCR calls and card parsing.

Events emitted:
- ``ocr.call``    after every gateway call attempt
- ``card.parse``  after every full parse, with per-field confidences

Sinks (log lines, Prometheus, tests) subscribe with ``attach``; the core
only ever calls ``emit``.
"""

import logging
import threading
from typing import Any, Callable, Dict, Iterable, List, Tuple

logger = logging.getLogger(__name__)

OCR_CALL = "ocr.call"
CARD_PARSE = "card.parse"

LOW_CONFIDENCE_THRESHOLD = 0.5

Handler = Callable[[str, Dict[str, Any], Dict[str, Any]], None]

_handlers: Dict[str, Tuple[Tuple[str, ...], Handler]] = {}
_lock = threading.Lock()


def attach(handler_id: str, events: Iterable[str], handler: Handler) -> None:
    """Subscribe ``handler`` to ``events``.

    Args:
        handler_id: Unique id, used to detach later
        events: Event names to receive
        handler: Callable taking (event, measurements, metadata)

    Raises:
        ValueError: If ``handler_id`` is already attached
    """
    with _lock:
        if handler_id in _handlers:
            raise ValueError(f"Telemetry handler already attached: {handler_id}")
        _handlers[handler_id] = (tuple(events), handler)


def detach(handler_id: str) -> bool:
    """Remove a handler. Returns False if it was not attached."""
    with _lock:
        return _handlers.pop(handler_id, None) is not None


def detach_all() -> None:
    with _lock:
        _handlers.clear()


def attached() -> List[str]:
    with _lock:
        return list(_handlers)


def emit(event: str, measurements: Dict[str, Any], metadata: Dict[str, Any]) -> None:
    """Deliver an event to every handler subscribed to it.

    A handler that raises is logged and skipped; emitting never fails.
    """
    with _lock:
        targets = [
            (handler_id, handler)
            for handler_id, (events, handler) in _handlers.items()
            if event in events
        ]

    for handler_id, handler in targets:
        try:
            handler(event, measurements, metadata)
        except Exception:
            logger.exception(f"Telemetry handler {handler_id} failed on {event}")


def log_handler(event: str, measurements: Dict[str, Any], metadata: Dict[str, Any]) -> None:
    """Default sink: one log line per event."""
    if event == OCR_CALL:
        message = (
            f"OCR call - backend: {metadata.get('backend')}, "
            f"language: {metadata.get('language')}, "
            f"duration_ms: {measurements.get('duration_ms', 0):.1f}"
        )
        if metadata.get("success"):
            logger.info(message + " - ok")
        else:
            logger.warning(message + f" - failed ({metadata.get('error')})")

    elif event == CARD_PARSE:
        overall = measurements.get("overall", 0.0)
        fields = ", ".join(
            f"{key}: {value:.2f}" for key, value in measurements.items() if key != "overall"
        )
        logger.info(
            f"Business card parsed - language: {metadata.get('language')}, "
            f"parser: {metadata.get('parser')}, overall_confidence: {overall:.2f}, {fields}"
        )
        if overall < LOW_CONFIDENCE_THRESHOLD:
            logger.warning(
                f"Low confidence business card - overall_confidence: {overall:.2f}, "
                f"language: {metadata.get('language')}, parser: {metadata.get('parser')}"
            )


def attach_default_handlers() -> None:
    """Attach the logging sink once; safe to call repeatedly."""
    if "cardparse-log" not in attached():
        attach("cardparse-log", (OCR_CALL, CARD_PARSE), log_handler)
