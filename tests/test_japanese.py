"""
Tests for the Japanese extraction rules.
"""

import pytest

from cardparse.extraction import BusinessCardParser
from cardparse.extraction.fields import (
    EMAIL_REPAIRED_CONFIDENCE,
    extract_address,
    extract_company,
    extract_email,
    extract_name,
    extract_phones,
    extract_position,
    repair_email,
)
from cardparse.extraction.rules import ENGLISH_RULES, JAPANESE_RULES, rules_for


class TestRuleSelection:

    @pytest.mark.parametrize("language,expected", [
        ("jpn", JAPANESE_RULES),
        ("eng,jpn", JAPANESE_RULES),
        ("JPN", JAPANESE_RULES),
        ("eng", ENGLISH_RULES),
        ("", ENGLISH_RULES),
        (None, ENGLISH_RULES),
    ])
    def test_rules_for(self, language, expected):
        assert rules_for(language) is expected


class TestJapaneseFields:

    def test_kanji_name(self, japanese_card):
        name, score = extract_name(japanese_card, JAPANESE_RULES)
        assert name == "田中太郎"
        assert score == pytest.approx(0.65)

    def test_spaced_name(self):
        name, _ = extract_name("山田 花子\n部長", JAPANESE_RULES)
        assert name == "山田 花子"

    def test_titles_are_not_names(self):
        name, _ = extract_name("代表取締役社長\n株式会社サンプル", JAPANESE_RULES)
        assert name is None

    def test_trunk_phone(self, japanese_card):
        assert extract_phones(japanese_card, JAPANESE_RULES) == (["+81 3 1234 5678"], 0.95)

    def test_email(self, japanese_card):
        assert extract_email(japanese_card, JAPANESE_RULES) == ("tanaka@sample.co.jp", 0.98)

    def test_fullwidth_at_sign(self):
        assert extract_email("tanaka＠sample.co.jp", JAPANESE_RULES) == (
            "tanaka@sample.co.jp", EMAIL_REPAIRED_CONFIDENCE
        )

    def test_glyph_table_applies_only_to_japanese(self):
        line = "離ee＠example.com"
        assert repair_email(line, JAPANESE_RULES) == "lee@example.com"
        assert repair_email(line, ENGLISH_RULES) == "ee@example.com"

    def test_position_and_company_not_guessed(self, japanese_card):
        assert extract_position(japanese_card, JAPANESE_RULES) == (None, 0.0)
        assert extract_company(japanese_card, JAPANESE_RULES) == (None, 0.0)

    def test_address(self):
        address, score = extract_address("〒100-0001 東京都千代田区千代田1-1", JAPANESE_RULES)
        assert address == "〒100-0001 東京都千代田区千代田1-1"
        assert score == pytest.approx(26 / 30)


class TestJapaneseCard:

    def test_parse(self, japanese_card):
        record = BusinessCardParser().parse(japanese_card, language="jpn")

        assert record.language == "jpn"
        assert record.name == "田中太郎"
        assert record.email == "tanaka@sample.co.jp"
        assert record.phones == ("+81 3 1234 5678",)
        assert record.company is None
        assert record.position is None
        assert record.confidence["company"] == 0.0
        assert record.confidence["position"] == 0.0
