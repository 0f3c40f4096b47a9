"""Shared fixtures for the test suite."""

import pytest

from cardparse import telemetry


ENGLISH_CARD_TEXT = (
    "John Doe\n"
    "Software Engineer\n"
    "Example Corp\n"
    "john.doe@example.com\n"
    "+1 (555) 123-4567"
)

JAPANESE_CARD_TEXT = (
    "田中太郎\n"
    "営業部長\n"
    "株式会社サンプル\n"
    "tanaka@sample.co.jp\n"
    "03-1234-5678"
)


class FakeClock:
    """Manually advanced millisecond clock for gateway tests."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture(autouse=True)
def clean_telemetry():
    """Every test starts and ends with no telemetry handlers attached."""
    telemetry.detach_all()
    yield
    telemetry.detach_all()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def events():
    """Collect every telemetry event as (event, measurements, metadata)."""
    collected = []
    telemetry.attach(
        "test-collector",
        (telemetry.OCR_CALL, telemetry.CARD_PARSE),
        lambda event, measurements, metadata: collected.append((event, measurements, metadata))
    )
    return collected


@pytest.fixture
def english_card():
    return ENGLISH_CARD_TEXT


@pytest.fixture
def japanese_card():
    return JAPANESE_CARD_TEXT
