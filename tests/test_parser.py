"""
Tests for BusinessCardParser.

Tests the parsing of OCR text into ExtractedRecord instances.
"""

import threading

import pytest

from cardparse import telemetry
from cardparse.extraction import BusinessCardParser, normalize_text
from cardparse.extraction.fields import EXTRACTORS
from cardparse.models import FIELDS, ExtractedRecord


def _replace_extractor(field, function):
    return [(name, fn) for name, fn in EXTRACTORS if name != field] + [(field, function)]


class TestBusinessCardParser:
    """Test cases for BusinessCardParser."""

    @pytest.fixture
    def parser(self):
        """Create parser instance."""
        return BusinessCardParser()

    def test_example_card(self, parser, english_card):
        """Test the reference English card."""
        record = parser.parse(english_card, language="eng")

        assert record.name == "John Doe"
        assert record.email == "john.doe@example.com"
        assert record.position == "Software Engineer"
        assert record.company == "Example Corp"
        assert record.phones == ("+1 555 123 4567",)
        assert record.primary_phone == "+1 555 123 4567"
        assert record.secondary_phone is None
        assert record.address is None
        assert record.language == "eng"

    def test_example_card_confidence(self, parser, english_card):
        record = parser.parse(english_card)

        assert record.confidence["name"] == pytest.approx(0.9)
        assert record.confidence["email"] == pytest.approx(0.98)
        assert record.confidence["phones"] == pytest.approx(0.95)
        assert record.confidence["address"] == 0.0

    def test_no_email(self, parser):
        record = parser.parse("Jane Smith\nAcme Technologies\n555-123-4567")

        assert record.email is None
        assert record.confidence["email"] == 0.0

    def test_three_numbers_keep_two(self, parser):
        record = parser.parse("John Doe\n555-111-2222\n555-333-4444\n555-555-6666")
        assert record.phones == ("+1 555 111 2222", "+1 555 333 4444")

    def test_idempotent(self, parser, english_card):
        first = parser.parse(english_card, language="eng")
        second = parser.parse(english_card, language="eng")
        assert first == second

    @pytest.mark.parametrize("text", [
        "",
        "   \n\n  ",
        "@@@ 1234567890123456789",
        "ACME HOLDINGS LTD\nChief Technology Officer\n123 Main Street\nSpringfield, IL 62704",
        "田中太郎\n〒100-0001 東京都千代田区千代田1-1",
    ])
    def test_confidence_bounds(self, parser, text):
        record = parser.parse(text)

        assert set(record.confidence) == set(FIELDS)
        for value in record.confidence.values():
            assert 0.0 <= value <= 1.0
        expected = sum(record.confidence.values()) / 6
        assert record.overall_confidence == pytest.approx(expected)

    def test_empty_text(self, parser):
        record = parser.parse("")

        assert record.name is None
        assert record.phones == ()
        assert record.overall_confidence == 0.0

    def test_raw_text_normalized(self, parser):
        record = parser.parse("John Doe\r\n\r\nExample Corp\r")
        assert record.raw_text == "John Doe\nExample Corp"

    def test_language_defaults_to_english(self, parser, english_card):
        assert parser.parse(english_card, language=None).language == "eng"

    def test_faulting_extractor_is_isolated(self, english_card):
        def broken(text, rules):
            raise RuntimeError("boom")

        parser = BusinessCardParser(extractors=_replace_extractor("name", broken))
        record = parser.parse(english_card)

        assert record.name is None
        assert record.confidence["name"] == 0.0
        assert record.email == "john.doe@example.com"
        assert record.company == "Example Corp"

    def test_slow_extractor_times_out(self, english_card):
        release = threading.Event()

        def stuck(text, rules):
            release.wait(5)
            return "Too Late", 1.0

        parser = BusinessCardParser(timeout_ms=200, extractors=_replace_extractor("company", stuck))
        try:
            record = parser.parse(english_card)
        finally:
            release.set()

        assert record.company is None
        assert record.confidence["company"] == 0.0
        assert record.name == "John Doe"

    def test_emits_parse_event(self, parser, english_card, events):
        record = parser.parse(english_card)

        parse_events = [e for e in events if e[0] == telemetry.CARD_PARSE]
        assert len(parse_events) == 1
        _, measurements, metadata = parse_events[0]
        assert measurements["overall"] == pytest.approx(record.overall_confidence)
        assert set(measurements) == set(FIELDS) | {"overall"}
        assert metadata == {"language": "eng", "parser": "english"}


class TestNormalizeText:

    def test_normalize_text(self):
        assert normalize_text("  a\r\n\r\nb\rc  ") == "a\nb\nc"
        assert normalize_text(None) == ""


class TestExtractedRecord:

    def test_phones_deduplicated_then_capped(self):
        record = ExtractedRecord(phones=("+1 1", "+1 1", "+1 2", "+1 3"))
        assert record.phones == ("+1 1", "+1 2")

    def test_confidence_clamped(self):
        record = ExtractedRecord(name="Jane", confidence={"name": 1.7})
        assert record.confidence["name"] == 1.0

    def test_empty_field_has_zero_confidence(self):
        record = ExtractedRecord(email=None, confidence={"email": 0.9})
        assert record.confidence["email"] == 0.0

    def test_missing_keys_filled(self):
        record = ExtractedRecord(name="Jane", confidence={"name": 0.5})
        assert set(record.confidence) == set(FIELDS)
        assert record.overall_confidence == pytest.approx(0.5 / 6)

    def test_immutable(self):
        record = ExtractedRecord(name="Jane")
        with pytest.raises(AttributeError):
            record.name = "John"

    def test_to_dict(self):
        record = ExtractedRecord(
            name="Jane",
            phones=("+1 555 123 4567",),
            confidence={"name": 0.333, "phones": 0.95}
        )
        data = record.to_dict()

        assert data["primary_phone"] == "+1 555 123 4567"
        assert data["phones"] == ["+1 555 123 4567"]
        assert data["confidence"]["name"] == 0.33
        assert data["overall_confidence"] == round((0.333 + 0.95) / 6, 2)
