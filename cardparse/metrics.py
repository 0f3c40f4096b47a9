from prometheus_client import Counter, Gauge, Histogram

from . import telemetry

# -----------------------
# OCR gateway metrics
# -----------------------

OCR_CALLS_TOTAL = Counter(
    "cardparse_ocr_calls_total",
    "OCR gateway call attempts",
    ["backend", "language", "outcome"]
)

OCR_CALL_LATENCY_MS = Histogram(
    "cardparse_ocr_call_latency_ms",
    "OCR gateway call latency (ms)",
    ["backend"],
    buckets=(5, 50, 100, 300, 500, 1000, 2000, 5000, 10000, 30000)
)

# -----------------------
# Extraction quality
# -----------------------

CARD_CONFIDENCE = Histogram(
    "cardparse_card_confidence",
    "Per-field extraction confidence",
    ["field", "parser"],
    buckets=(0.0, 0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0)
)

CARD_CONFIDENCE_LAST = Gauge(
    "cardparse_card_confidence_last",
    "Overall confidence of the most recent parse"
)

LOW_CONFIDENCE_TOTAL = Counter(
    "cardparse_low_confidence_cards_total",
    "Cards parsed with overall confidence below threshold",
    ["parser"]
)

HANDLER_ID = "cardparse-prometheus"


def record_event(event, measurements, metadata):
    if event == telemetry.OCR_CALL:
        outcome = "success" if metadata.get("success") else (metadata.get("error") or "failure")
        OCR_CALLS_TOTAL.labels(
            backend=metadata.get("backend", "unknown"),
            language=metadata.get("language", "unknown"),
            outcome=outcome
        ).inc()
        OCR_CALL_LATENCY_MS.labels(backend=metadata.get("backend", "unknown")).observe(
            measurements.get("duration_ms", 0.0)
        )

    elif event == telemetry.CARD_PARSE:
        parser = metadata.get("parser", "unknown")
        for field, value in measurements.items():
            if field == "overall":
                continue
            CARD_CONFIDENCE.labels(field=field, parser=parser).observe(value)
        overall = measurements.get("overall", 0.0)
        CARD_CONFIDENCE_LAST.set(overall)
        if overall < telemetry.LOW_CONFIDENCE_THRESHOLD:
            LOW_CONFIDENCE_TOTAL.labels(parser=parser).inc()


def install():
    """Feed telemetry events into the Prometheus registry."""
    if HANDLER_ID not in telemetry.attached():
        telemetry.attach(HANDLER_ID, (telemetry.OCR_CALL, telemetry.CARD_PARSE), record_event)
