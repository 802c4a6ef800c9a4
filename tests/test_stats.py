"""Unit tests for text statistics.

WHY: The statistics feed the CLI --stats output, the GUI header and the
/stats endpoint, so each character class and the duration estimate must
be counted the same way everywhere.

HOW: Small hand-counted texts; phrases come from build_phrases so the
tests do not depend on either segmentation path.
"""

from bunsetsu_reader.core.fallback import FallbackSegmenter
from bunsetsu_reader.core.ir import build_phrases
from bunsetsu_reader.core.stats import compute_stats


class TestCharacterClasses:

    def test_mixed_script_counts(self):
        text = "漢字とカタカナ、abc 1。"
        stats = compute_stats(text, build_phrases([text]))
        assert stats.char_count == 14
        assert stats.non_space_char_count == 13
        assert stats.kanji_count == 2
        assert stats.hiragana_count == 1
        assert stats.katakana_count == 4
        assert stats.punctuation_count == 2
        assert stats.other_count == 4

    def test_iteration_mark_counts_as_kanji(self):
        assert compute_stats("人々", ()).kanji_count == 2

    def test_long_vowel_mark_counts_as_katakana(self):
        assert compute_stats("コーヒー", ()).katakana_count == 4

    def test_katakana_block_punctuation(self):
        stats = compute_stats("ジョン・スミス゠", ())
        assert stats.katakana_count == 6
        assert stats.punctuation_count == 2

    def test_brackets_are_punctuation(self):
        assert compute_stats("「」！？", ()).punctuation_count == 4

    def test_whitespace_only_counted_in_total(self):
        stats = compute_stats(" \n\t", ())
        assert stats.char_count == 3
        assert stats.non_space_char_count == 0


class TestPhraseFigures:

    def test_empty(self):
        stats = compute_stats("", ())
        assert stats.phrase_count == 0
        assert stats.average_phrase_length == 0.0
        assert stats.estimated_duration_s == 0.0

    def test_average_is_rounded(self):
        stats = compute_stats("犬が走る。", build_phrases(["犬が", "走る。", ""]))
        assert stats.phrase_count == 2
        assert stats.average_phrase_length == 2.5

    def test_average_two_decimals(self):
        stats = compute_stats("あいうえおか", build_phrases(["あ", "い", "うえおか"]))
        assert stats.average_phrase_length == 2.0
        stats = compute_stats("あいうえ", build_phrases(["あ", "い", "うえ"]))
        assert stats.average_phrase_length == 1.33

    def test_duration_follows_interval(self):
        phrases = FallbackSegmenter().segment("犬が走る。猫は寝る。")
        stats = compute_stats("犬が走る。猫は寝る。", phrases, interval_ms=500)
        assert stats.phrase_count == len(phrases)
        assert stats.estimated_duration_s == len(phrases) * 0.5

    def test_to_dict_has_every_field(self):
        data = compute_stats("犬", build_phrases(["犬"])).to_dict()
        assert set(data) == {
            "char_count", "non_space_char_count", "phrase_count",
            "kanji_count", "hiragana_count", "katakana_count",
            "punctuation_count", "other_count",
            "average_phrase_length", "estimated_duration_s",
        }
