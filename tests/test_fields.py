"""
Tests for the English field extractors.

Tests scoring of OCR text lines into contact fields.
"""

import pytest

from cardparse.extraction import fields
from cardparse.extraction.fields import (
    FieldCandidate,
    best_candidate,
    extract_address,
    extract_company,
    extract_email,
    extract_name,
    extract_phones,
    extract_position,
    name_from_email,
    repair_email,
)
from cardparse.extraction.rules import keywords


class TestHelpers:

    def test_best_candidate_prefers_earliest_on_tie(self):
        candidates = [
            FieldCandidate(5, "first", 0),
            FieldCandidate(7, "second", 1),
            FieldCandidate(7, "third", 2),
        ]
        assert best_candidate(candidates, 3).text == "second"

    def test_best_candidate_threshold(self):
        assert best_candidate([FieldCandidate(2, "weak", 0)], 3) is None
        assert best_candidate([], 3) is None

    def test_confidence_clamped(self):
        assert fields.confidence(40, 20) == 1.0
        assert fields.confidence(-5, 20) == 0.0
        assert fields.confidence(10, 20) == 0.5

    def test_keywords_match_whole_words(self):
        pattern = keywords(["co", "inc"])
        assert pattern.search("Nicole Brown") is None
        assert pattern.search("Acme Co") is not None
        assert pattern.search("ACME INC.") is not None


class TestEmail:

    def test_extract_email(self):
        """Test email extraction."""
        test_cases = [
            ("Contact: john.doe@example.com", "john.doe@example.com"),
            ("Email:test@company.org", "test@company.org"),
            ("user.name+tag@domain.co.uk", "user.name+tag@domain.co.uk"),
        ]

        for text, expected in test_cases:
            email, score = extract_email(text)
            assert email == expected, f"Failed for: {text}"
            assert score == fields.EMAIL_CONFIDENCE

    def test_no_at_sign(self):
        assert extract_email("John Doe\nExample Corp\n555-123-4567") == (None, 0.0)

    def test_multiple_emails(self):
        email, score = extract_email("a@example.com\nb@example.org")
        assert email == "a@example.com"
        assert score == fields.EMAIL_MULTIPLE_CONFIDENCE

    @pytest.mark.parametrize("line,expected", [
        ("john [at] example [dot] com", "john@example.com"),
        ("jane @ acme.c0m", "jane@acme.com"),
        ("name@host com", "name@host.com"),
        ("Email: john@examplecorn", "john@example.com"),
    ])
    def test_repaired_emails(self, line, expected):
        assert repair_email(line) == expected
        assert extract_email(line) == (expected, fields.EMAIL_REPAIRED_CONFIDENCE)

    def test_repair_rejects_non_email(self):
        assert repair_email("Just some text") is None
        assert repair_email("@@@") is None


class TestPhones:

    def test_structured_number(self):
        assert extract_phones("+1 (555) 123-4567") == (["+1 555 123 4567"], fields.PHONE_CONFIDENCE)

    def test_three_numbers_keep_two(self):
        numbers, score = extract_phones("555-111-2222\n555-333-4444\n555-555-6666")
        assert numbers == ["+1 555 111 2222", "+1 555 333 4444"]
        assert score == fields.PHONE_CONFIDENCE

    def test_digits_only(self):
        assert extract_phones("Tel 447700900123") == (["+447700900123"], fields.PHONE_DIGITS_CONFIDENCE)

    def test_implausible_length(self):
        numbers, score = extract_phones("12345678901234")
        assert numbers == ["+12345678901234"]
        assert score == fields.PHONE_IMPLAUSIBLE_CONFIDENCE

    def test_no_phone(self):
        assert extract_phones("John Doe") == ([], 0.0)


class TestName:

    def test_example_card(self, english_card):
        name, score = extract_name(english_card)
        assert name == "John Doe"
        assert score == pytest.approx(0.9)

    def test_titled_name(self):
        name, score = extract_name("Dr. Jane Smith\nAcme Technologies")
        assert name == "Dr. Jane Smith"
        assert score == pytest.approx(0.65)

    def test_job_titles_are_not_names(self):
        name, _ = extract_name("Senior Manager\nSales Director")
        assert name is None

    def test_falls_back_to_email(self):
        name, score = extract_name("Software Engineer\njohn.smith@acme.com")
        assert name == "John Smith"
        assert score == fields.NAME_FROM_EMAIL_CONFIDENCE

    def test_obfuscated_email_line_is_not_a_name(self):
        name, score = extract_name("john [at] example [dot] com")
        assert name == "John"
        assert score == fields.NAME_FROM_EMAIL_CONFIDENCE

        name, _ = extract_name("Jane Smith\njane [at] acme [dot] com")
        assert name == "Jane Smith"

    def test_one_word_logo_is_not_a_name(self):
        name, score = extract_name("ACME\njohn.smith@acme.com\n555 111 2222")
        assert name == "John Smith"
        assert score == fields.NAME_FROM_EMAIL_CONFIDENCE

    def test_name_from_email(self):
        assert name_from_email("mary_ann-lee@example.com") == "Mary Ann Lee"
        assert name_from_email(None) is None
        assert name_from_email("not-an-email") is None

    def test_empty_text(self):
        assert extract_name("") == (None, 0.0)


class TestPosition:

    def test_example_card(self, english_card):
        position, score = extract_position(english_card)
        assert position == "Software Engineer"
        assert score == pytest.approx(0.8)

    def test_senior_title(self):
        position, score = extract_position("Chief Technology Officer")
        assert position == "Chief Technology Officer"
        assert score == pytest.approx(23 / 25)

    def test_no_title(self):
        assert extract_position("John Doe\nExample Corp") == (None, 0.0)


class TestCompany:

    def test_example_card(self, english_card):
        company, score = extract_company(english_card)
        assert company == "Example Corp"
        assert score == pytest.approx(0.76)

    def test_industry_keyword(self):
        company, score = extract_company("Acme Technologies")
        assert company == "Acme Technologies"
        assert score == pytest.approx(11 / 25)

    def test_confidence_capped(self):
        company, score = extract_company("ACME HOLDINGS LTD")
        assert company == "ACME HOLDINGS LTD"
        assert score == 1.0

    def test_lone_suffix_rejected(self):
        assert extract_company("Inc") == (None, 0.0)

    def test_person_is_not_company(self):
        assert extract_company("John Doe") == (None, 0.0)


class TestAddress:

    def test_lines_are_joined(self):
        address, score = extract_address("123 Main Street\nSpringfield, IL 62704")
        assert address == "123 Main Street, Springfield, IL 62704"
        assert score == pytest.approx(26 / 30)

    def test_single_line(self):
        address, score = extract_address("John Doe\n500 Oak Avenue Suite 20")
        assert address == "500 Oak Avenue Suite 20"
        assert score == pytest.approx(16 / 30)

    def test_contact_lines_ignored(self, english_card):
        assert extract_address(english_card) == (None, 0.0)

    def test_single_indicator_is_not_an_address(self):
        assert extract_address("Main Street") == (None, 0.0)
