"""
Tests for OCR text normalization.
"""

import pytest

from cardsnap.services.text_normalizer import TextNormalizer, normalize


class TestNormalize:
    """Cleaning individual strings"""

    def test_empty_and_none(self):
        assert normalize("") == ""
        assert normalize(None) == ""

    def test_whitespace_only(self):
        assert normalize("   \t  ") == ""

    def test_unicode_dashes_become_hyphens(self):
        assert normalize("555–123—4567") == "555-123-4567"
        assert normalize("Smith−Jones") == "Smith-Jones"

    def test_edge_bullets_removed(self):
        result = normalize("•••John@@@Smith•••")
        assert result == "John@@@Smith"
        assert "John" in result and "Smith" in result

    def test_edge_punctuation_removed(self):
        assert normalize("#hashtag!") == "hashtag"
        assert normalize("[[Jane Doe]]") == "Jane Doe"

    def test_garbage_punctuation_replaced(self):
        assert normalize("{Acme} | Corp") == "Acme Corp"
        assert normalize("Jane_Doe") == "Jane Doe"
        assert normalize("a/b\\c~d") == "a b c d"

    def test_plus_survives_for_country_codes(self):
        assert normalize("+1 (415) 555-2671") == "+1 415 555-2671"

    def test_repeated_dashes_collapse(self):
        assert normalize("Acme---Corp") == "Acme Corp"

    def test_non_ascii_removed(self):
        assert normalize("Café") == "Caf"
        assert normalize("日本語テキスト") == ""

    def test_disallowed_ascii_replaced(self):
        assert normalize("Jane * Doe") == "Jane Doe"

    def test_trailing_comma_kept(self):
        assert normalize("Smith,") == "Smith,"

    def test_single_newline_kept(self):
        assert normalize("John Smith\nAcme Inc") == "John Smith\nAcme Inc"

    def test_service_instance_matches_shortcut(self):
        assert TextNormalizer().normalize(" Jane  Doe ") == normalize(" Jane  Doe ")


@pytest.mark.parametrize("raw", [
    "",
    "   ",
    "•••John@@@Smith•••",
    "+1 (415) 555-2671",
    "Jane Doe\nAcme Inc\n\njane@acme.com",
    "{[ Weird ]} -- text __ here //",
    "Café Ñoño – Managér",
    "Smith, Jones,",
    "a_-_b",
    "tab\tseparated\r\nlines",
    "\x00\x01control\x7f",
    "日本語",
])
def test_normalize_is_idempotent(raw):
    once = normalize(raw)
    assert normalize(once) == once
