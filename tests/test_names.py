"""Tests for name normalization and display helpers."""

import pytest

from catalog.utils.names import derive_last_first, normalize_name


class TestNormalizeName:
    @pytest.mark.parametrize(
        "name",
        ["J.R.R. Tolkien", "J R R Tolkien", "jrr tolkien", "J. R. R. Tolkien", "JRRTOLKIEN"],
    )
    def test_variants_share_a_key(self, name):
        assert normalize_name(name) == "jrrtolkien"

    def test_strips_tabs_and_newlines(self):
        assert normalize_name("Brandon\tSanderson\n") == "brandonsanderson"

    def test_strips_unicode_spaces(self):
        assert normalize_name("Brandon\xa0Sanderson\u3000") == "brandonsanderson"

    def test_keeps_other_punctuation(self):
        assert normalize_name("O'Brian, Patrick") == "o'brian,patrick"

    def test_empty(self):
        assert normalize_name(" . ") == ""


class TestDeriveLastFirst:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Brandon Sanderson", "Sanderson, Brandon"),
            ("J. R. R. Tolkien", "Tolkien, J. R. R."),
            ("  Ursula   Le Guin ", "Guin, Ursula Le"),
            ("Homer", "Homer"),
            ("Tolkien, J. R. R.", "Tolkien, J. R. R."),
        ],
    )
    def test_derive(self, name, expected):
        assert derive_last_first(name) == expected
