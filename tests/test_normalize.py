"""Tests for text normalization, era-name cleaning and title decomposition."""

import re

import pytest

from trackerhub.normalize import clean_era_name, decompose_title, normalize_text


class TestNormalizeText:
    """Tests for normalize_text()."""

    def test_none_is_empty(self):
        assert normalize_text(None) == ""

    def test_collapses_whitespace(self):
        assert normalize_text("  Song \n\t Title  ") == "Song Title"

    def test_strips_replacement_char(self):
        assert normalize_text("Song\ufffd") == "Song"

    def test_strips_emoji_joiners(self):
        assert normalize_text("\u2b50\ufe0f Song") == "\u2b50 Song"
        assert normalize_text("a\u200db") == "ab"

    def test_nfc(self):
        assert normalize_text("Cafe\u0301") == "Caf\u00e9"

    @pytest.mark.parametrize("s", [
        "  Song \n Title ",
        "Cafe\u0301 \ufffd\ufe0f",
        "\u200d\u200d",
        "",
    ])
    def test_idempotent(self, s):
        once = normalize_text(s)
        assert normalize_text(once) == once


class TestCleanEraName:
    """Tests for clean_era_name()."""

    def test_collects_bracket_groups(self):
        result = clean_era_name("My Era (Alt1) [Alt2]")
        assert result.main_name == "My Era"
        assert result.alternate_names == ("Alt1", "Alt2")

    def test_numeric_group_dropped(self):
        assert clean_era_name("Graduation (2007)") == ("Graduation", ())

    def test_empty_becomes_unknown(self):
        assert clean_era_name("").main_name == "Unknown Era"
        assert clean_era_name(None).main_name == "Unknown Era"

    def test_only_brackets(self):
        result = clean_era_name("(Only Alt)")
        assert result.main_name == "Unknown Era"
        assert result.alternate_names == ("Only Alt",)

    def test_stray_open_bracket_truncates(self):
        assert clean_era_name("Broken (unclosed").main_name == "Broken"

    def test_stray_close_bracket_removed(self):
        assert clean_era_name("Name ) extra").main_name == "Name extra"

    def test_alternate_equal_to_main_excluded(self):
        assert clean_era_name("Yandhi (YANDHI)").alternate_names == ()

    @pytest.mark.parametrize("raw", [
        "A (B) [C", "((nested))", "[x] (y) z", "Era ( [ ",
    ])
    def test_main_name_never_has_brackets(self, raw):
        main = clean_era_name(raw).main_name
        assert "(" not in main
        assert "[" not in main


class TestDecomposeTitle:
    """Tests for the decompose_title() pipeline."""

    def test_plain_title(self):
        title = decompose_title("Stronger")
        assert title.main == "Stronger"
        assert title.features == ()
        assert title.producers == ()
        assert not title.is_unknown

    def test_feature_and_producer(self):
        title = decompose_title("Song (feat. Artist A, Artist B) (prod. Producer X)")
        assert title.main == "Song"
        assert title.features == ("Artist A", "Artist B")
        assert title.producers == ("Producer X",)

    def test_unbracketed_feature_ampersand(self):
        title = decompose_title("Song ft. A & B")
        assert title.main == "Song"
        assert title.features == ("A", "B")

    def test_produced_by(self):
        title = decompose_title("Song produced by X")
        assert title.main == "Song"
        assert title.producers == ("X",)

    def test_word_containing_ft_untouched(self):
        title = decompose_title("Left Behind")
        assert title.main == "Left Behind"
        assert title.features == ()

    def test_alternate_names(self):
        title = decompose_title("Song [V2] (Alt Title)")
        assert title.main == "Song"
        assert title.alternate_names == ("V2", "Alt Title")

    def test_mid_title_feature_group(self):
        title = decompose_title("Song (feat. A) [V2]")
        assert title.main == "Song"
        assert title.features == ("A",)
        assert title.alternate_names == ("V2",)

    def test_numeric_group_not_alternate(self):
        assert decompose_title("Song (2019)").alternate_names == ()

    def test_unknown_title(self):
        title = decompose_title("??? (Untitled)")
        assert title.is_unknown
        assert title.alternate_names == ("Untitled",)

    def test_decorative_emoji_stripped(self):
        assert decompose_title("\U0001F525 Song ⭐").main == "Song"

    def test_duplicate_features_collapsed(self):
        assert decompose_title("Song (feat. A) (feat. A)").features == ("A",)

    def test_credit_inside_larger_group_keeps_brackets_balanced(self):
        title = decompose_title("Song (Remix feat. A)")
        assert title.main == "Song"
        assert title.alternate_names == ("Remix feat. A",)
        assert title.features == ()

    @pytest.mark.parametrize("raw", [
        "Song (Remix feat. A)",
        "Song [Live prod. B]",
        "Song (Remix feat. A) (prod. B)",
    ])
    def test_main_title_never_has_brackets(self, raw):
        assert not re.search(r"[()\[\]]", decompose_title(raw).main)

    def test_bracketed_producer_after_remix_group(self):
        title = decompose_title("Song (Remix feat. A) (prod. B)")
        assert title.main == "Song"
        assert title.producers == ("B",)
        assert title.alternate_names == ("Remix feat. A",)

    def test_empty(self):
        title = decompose_title("")
        assert title.main == ""
        assert title.features == ()
