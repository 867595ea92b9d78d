"""Tests for ORP calculation and token classification."""

import pytest

from speedreader.models.enums import TokenType
from speedreader.services.tokenizer import (
    ORP_RATIO,
    ORPCalculator,
    calculate_orp_index,
    classify_token,
    split_by_orp,
    split_core,
    split_on_whitespace,
)


@pytest.fixture
def calculator():
    return ORPCalculator()


class TestORPCalculation:
    """Tests for ORP index placement."""

    def test_canonical_ratio(self):
        assert ORP_RATIO == 0.35

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("a", 0),
            ("at", 0),
            ("cat", 1),
            ("word", 1),
            ("hello", 1),
            ("running", 2),
            ("reading", 2),
            ("understanding", 4),
        ],
    )
    def test_plain_words(self, calculator, text, expected):
        assert calculator.calculate(text) == expected

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("running,", 2),  # trailing punctuation ignored
            ('"Hello', 2),  # leading quote shifts the index
            ("(a)", 1),
            ("...so", 3),
        ],
    )
    def test_punctuation_is_stripped_for_core(self, calculator, text, expected):
        assert calculator.calculate(text) == expected

    def test_empty_text(self, calculator):
        assert calculator.calculate("") == 0

    def test_custom_ratio(self):
        assert ORPCalculator(ratio=0.5).calculate("running") == 3

    def test_module_function_uses_canonical_ratio(self):
        assert calculate_orp_index("understanding") == 4


class TestORPSplit:
    """Tests for the display split."""

    def test_running_comma(self):
        split = split_by_orp("running,")

        assert split.orp_index == 2
        assert split.left_part == "ru"
        assert split.orp_char == "n"
        assert split.right_part == "ning,"

    @pytest.mark.parametrize("text", ["x", "—", "?", "7"])
    def test_single_character(self, text):
        split = split_by_orp(text)

        assert split.orp_index == 0
        assert split.orp_char == text
        assert split.left_part == ""
        assert split.right_part == ""

    def test_punctuation_only_run(self):
        """Test that a punctuation-only token still gets a valid split."""
        split = split_by_orp("...")

        assert split.orp_char == "."
        assert split.left_part + split.orp_char + split.right_part == "..."

    @pytest.mark.parametrize("text", ["word", "'quoted'", "—dash", "end.", "x", "!!"])
    def test_parts_rebuild_text(self, text):
        split = split_by_orp(text)

        assert split.left_part + split.orp_char + split.right_part == text
        assert text[split.orp_index] == split.orp_char


class TestClassifyToken:
    """Tests for token classification priority."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            (" ", TokenType.WHITESPACE),
            ("\t\n", TokenType.WHITESPACE),
            (".", TokenType.PUNCTUATION),
            ("—", TokenType.PUNCTUATION),
            ("–", TokenType.PUNCTUATION),
            ("…", TokenType.PUNCTUATION),
            ('"', TokenType.PUNCTUATION),
            ("([", TokenType.PUNCTUATION),
            ("-", TokenType.PUNCTUATION),
            ("42", TokenType.NUMBER),
            ("-7", TokenType.NUMBER),
            ("3.14", TokenType.NUMBER),
            ("1,5", TokenType.NUMBER),
            ("2024.", TokenType.NUMBER),
            ("word", TokenType.WORD),
            ("don't", TokenType.WORD),
            ("(aside)", TokenType.WORD),
            ("abc123", TokenType.WORD),
            ("日本", TokenType.OTHER),
            ("%", TokenType.OTHER),
            ("1.2.3", TokenType.OTHER),
        ],
    )
    def test_classification(self, text, expected):
        assert classify_token(text) == expected


class TestTextUtils:
    """Tests for core splitting and whitespace splitting."""

    def test_split_core(self):
        assert split_core('"running,"') == ('"', "running", ',"')

    def test_split_core_punctuation_only(self):
        assert split_core("?!") == ("?!", "", "")

    def test_split_on_whitespace_keeps_runs(self):
        assert split_on_whitespace("a  b\tc") == ["a", "  ", "b", "\t", "c"]

    def test_split_on_whitespace_drops_empty_parts(self):
        assert split_on_whitespace(" lead") == [" ", "lead"]
