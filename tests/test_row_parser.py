"""
Tests for the row parser.

Each test documents one strategy in the chain: separator split, spaced
dash split, phone-pattern scan, digits-only line and name-only line.
"""

from phone_cleaner.models.phone import InputHints
from phone_cleaner.services.row_parser import parse_row, pick_phone_index


class TestPickPhoneIndex:
    def test_most_digits(self):
        assert pick_phone_index(["Ahmed", "0551234567", "Riyadh 12"]) == 1

    def test_first_wins_ties(self):
        assert pick_phone_index(["12345", "67890"]) == 0

    def test_no_digits_defaults_to_first(self):
        assert pick_phone_index(["Ahmed", "Ali"]) == 0


class TestSeparatorSplit:
    def test_comma(self):
        row = parse_row("Ahmed, 0551234567", 1)
        assert row.name == "Ahmed"
        assert row.phone_raw == "0551234567"

    def test_pipe_phone_first(self):
        row = parse_row("0551234567 | Ahmed | Riyadh", 1)
        assert row.phone_raw == "0551234567"
        assert row.name == "Ahmed Riyadh"

    def test_semicolon_with_empty_parts(self):
        row = parse_row(";;Ahmed;;+966 55 123 4567;", 1)
        assert row.name == "Ahmed"
        assert row.phone_raw == "+966 55 123 4567"

    def test_hint_without_separator_falls_through(self):
        """A csv hint on a line with no separator must not swallow the line."""
        row = parse_row("Ahmed 0551234567", 1, InputHints(csv_like=True))
        assert row.name == "Ahmed"
        assert row.phone_raw == "0551234567"


class TestDashSplit:
    def test_spaced_dash(self):
        row = parse_row("Ahmed - 0551234567", 1)
        assert row.name == "Ahmed"
        assert row.phone_raw == "0551234567"

    def test_em_dash(self):
        row = parse_row("Sara — +971501234567", 1)
        assert row.name == "Sara"
        assert row.phone_raw == "+971501234567"

    def test_multiple_name_parts(self):
        row = parse_row("Ahmed - Ali - 0551234567", 1)
        assert row.name == "Ahmed Ali"
        assert row.phone_raw == "0551234567"

    def test_unspaced_dash_stays_in_phone(self):
        row = parse_row("Ahmed 055-123-4567", 1)
        assert row.name == "Ahmed"
        assert row.phone_raw == "055-123-4567"


class TestPhonePattern:
    def test_arabic_digits_keep_original_glyphs(self):
        row = parse_row("أحمد ٠٥٥١٢٣٤٥٦٧", 1)
        assert row.name == "أحمد"
        assert row.phone_raw == "٠٥٥١٢٣٤٥٦٧"

    def test_phone_in_the_middle(self):
        row = parse_row("Call Ahmed on +966 55 123 4567 today", 1)
        assert row.phone_raw == "+966 55 123 4567"
        assert row.name == "Call Ahmed on today"

    def test_double_zero_prefix(self):
        row = parse_row("00966551234567", 1)
        assert row.phone_raw == "00966551234567"
        assert row.name == ""

    def test_longest_match_wins(self):
        row = parse_row("ext 123456 mobile 0551234567", 1)
        assert row.phone_raw == "0551234567"
        assert row.name == "ext 123456 mobile"

    def test_first_match_wins_ties(self):
        row = parse_row("123456 and 654321", 1)
        assert row.phone_raw == "123456"
        assert row.name == "and 654321"


class TestFallbacks:
    def test_short_digits_make_whole_line_the_phone(self):
        row = parse_row("Ahmed 12", 1)
        assert row.name == ""
        assert row.phone_raw == "Ahmed 12"

    def test_name_only(self):
        row = parse_row("  Ahmed   Ali ", 1)
        assert row.name == "Ahmed Ali"
        assert row.phone_raw == ""

    def test_blank_line(self):
        row = parse_row("   ", 4)
        assert row.name == ""
        assert row.phone_raw == ""
        assert row.raw == "   "
        assert row.index == 4

    def test_none_line(self):
        row = parse_row(None, 1)
        assert row.raw == ""
        assert row.phone_raw == ""

    def test_raw_and_index_preserved(self):
        row = parse_row("  Ahmed, 0551234567  ", 7)
        assert row.raw == "  Ahmed, 0551234567  "
        assert row.index == 7
