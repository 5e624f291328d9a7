"""Tests for lexical signal primitives."""

import pytest

from synergi.agent.router.lexical import (
    STOPWORDS,
    bigrams,
    detect_emotion,
    edit_distance,
    filter_stopwords,
    fuzzy_match,
    fuzzy_match_any,
    fuzzy_tolerance,
    ngrams,
    phrase_grams,
    tokenize,
    trigrams,
)
from synergi.agent.router.models import Emotion


class TestTokenize:
    """Test tokenize."""

    def test_lowercases_and_strips_punctuation(self):
        assert tokenize("What is the WEATHER?!") == ["what", "is", "the", "weather"]

    def test_keeps_internal_hyphens_and_apostrophes(self):
        assert tokenize("it's a real-time feed") == ["it's", "a", "real-time", "feed"]

    def test_normalizes_curly_quotes(self):
        assert tokenize("What’s up") == ["what's", "up"]

    def test_drops_empty_tokens(self):
        assert tokenize("  ...  ,, ") == []


class TestEditDistance:
    """Test edit_distance."""

    def test_known_values(self):
        assert edit_distance("kitten", "sitting") == 3
        assert edit_distance("wether", "weather") == 1
        assert edit_distance("", "abc") == 3

    def test_identity(self):
        for word in ["", "a", "forecast", "thunderstorm"]:
            assert edit_distance(word, word) == 0

    def test_symmetry(self):
        pairs = [("rain", "ruin"), ("sunny", "snowy"), ("abc", "")]
        for a, b in pairs:
            assert edit_distance(a, b) == edit_distance(b, a)

    def test_triangle_inequality(self):
        words = ["weather", "wether", "whether", "feather", "leather"]
        for a in words:
            for b in words:
                for c in words:
                    assert edit_distance(a, c) <= edit_distance(a, b) + edit_distance(b, c)


class TestFuzzyMatch:
    """Test fuzzy matching with length-scaled tolerance."""

    @pytest.mark.parametrize("target,expected", [
        ("hot", 0),
        ("rain", 1),
        ("sunny", 1),
        ("weather", 2),
        ("forecast", 2),
        ("temperature", 3),
    ])
    def test_tolerance(self, target, expected):
        assert fuzzy_tolerance(target) == expected

    def test_typo_matches(self):
        assert fuzzy_match("wether", "weather") is True
        assert fuzzy_match("forcast", "forecast") is True
        assert fuzzy_match("temprature", "temperature") is True

    def test_short_targets_require_exact_match(self):
        assert fuzzy_match("cat", "dog") is False
        assert fuzzy_match("a", "an") is False
        assert fuzzy_match("hat", "hot") is False
        assert fuzzy_match("hot", "hot") is True

    def test_length_difference_rejects(self):
        assert fuzzy_match("ra", "rain") is False

    def test_match_any_credits_each_keyword_once(self):
        hits = fuzzy_match_any(["wether", "weather", "wheather"], ["weather", "snow"])
        assert hits == ["weather"]


class TestStopwords:
    """Stop-words never reach fuzzy matching."""

    def test_filter(self):
        assert filter_stopwords(["what", "is", "the", "weather", "in", "delhi"]) == ["weather", "delhi"]

    def test_false_positive_words_are_stopwords(self):
        assert "new" in STOPWORDS
        assert "in" in STOPWORDS


class TestNgrams:
    """Test ngrams."""

    def test_bigrams(self):
        assert ngrams(["will", "it", "rain"], 2) == ["will it", "it rain"]

    def test_trigrams(self):
        assert ngrams(["will", "it", "rain", "today"], 3) == ["will it rain", "it rain today"]

    def test_too_short(self):
        assert ngrams(["one"], 2) == []
        assert ngrams(["one", "two"], 3) == []
        assert ngrams(["one"], 0) == []

    def test_bigrams_and_trigrams(self):
        tokens = ["will", "it", "rain"]
        assert bigrams(tokens) == ["will it", "it rain"]
        assert trigrams(tokens) == ["will it rain"]
        assert phrase_grams(tokens) == {"will it", "it rain", "will it rain"}


class TestVocabulary:
    """Known keywords only match themselves."""

    def test_keyword_word_skips_other_keywords(self):
        assert fuzzy_match_any(["founder"], ["thunder"], frozenset({"founder", "thunder"})) == []

    def test_keyword_word_matches_itself(self):
        assert fuzzy_match_any(["storm"], ["storm", "stormy"], frozenset({"storm", "stormy"})) == ["storm"]

    def test_without_vocabulary_typos_match(self):
        assert fuzzy_match_any(["founder"], ["thunder"]) == ["thunder"]


class TestDetectEmotion:
    """Test emotion detection."""

    def test_neutral_default(self):
        signal = detect_emotion("the sky")
        assert signal.emotion == Emotion.NEUTRAL
        assert signal.intensity == 0.0

    def test_gratitude(self):
        signal = detect_emotion("thanks, this is perfect")
        assert signal.emotion == Emotion.GRATITUDE
        assert signal.intensity == pytest.approx(0.4)

    def test_greeting(self):
        assert detect_emotion("hello there").emotion == Emotion.GREETING

    def test_additional_cues_raise_intensity(self):
        signal = detect_emotion("ugh this is broken!!")
        assert signal.emotion == Emotion.FRUSTRATION
        assert signal.intensity == pytest.approx(0.85)

    def test_intensity_capped(self):
        signal = detect_emotion("ugh it's not working!!!")
        assert 0.0 < signal.intensity <= 1.0
