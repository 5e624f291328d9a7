"""Lexical signal primitives for the deterministic classifier.

Pure functions only: tokenizing, stop-word filtering, edit-distance
fuzzy matching, n-gram construction and emotion detection.
"""

import re
from typing import Sequence

from .models import Emotion, EmotionSignal


# Common English words excluded from fuzzy keyword matching.
# Without this "new" fuzzy-matches "news", "in" matches "win", etc.
STOPWORDS = frozenset({
    # Determiners / articles
    "a", "an", "the", "this", "that", "these", "those",
    # Pronouns
    "i", "me", "my", "we", "us", "our", "you", "your", "he", "she", "it", "they", "them",
    # Prepositions
    "in", "on", "at", "to", "for", "of", "by", "from", "with", "about", "into",
    # Conjunctions
    "and", "or", "but", "nor", "so", "yet",
    # Auxiliaries / modals
    "is", "am", "are", "was", "were", "be", "been", "being",
    "do", "does", "did", "will", "would", "shall", "should",
    "can", "could", "may", "might", "must",
    "have", "has", "had", "having",
    # Adverbs / fillers
    "not", "no", "yes", "very", "just", "also", "too", "really", "please",
    "now", "then", "here", "there", "when", "where", "while",
    # Question words participate in patterns, not fuzzy matching
    "what", "which", "who", "whom", "whose",
    # Short high-frequency words with known false positives
    "new", "old", "big", "small", "get", "got", "let", "go", "going",
    "make", "take", "come", "give", "tell", "say", "said",
    "if", "up", "out", "all", "some", "any", "each", "every",
    "much", "many", "more", "most", "other", "well",
    "its", "than", "like",
})

_CURLY_QUOTES = re.compile(r"[‘’]")
_PUNCTUATION = re.compile(r"[^\w\s'-]")
_WHITESPACE = re.compile(r"\s+")


def tokenize(text: str) -> list[str]:
    """Lowercase word tokens with punctuation stripped (hyphens and apostrophes kept)."""
    text = _CURLY_QUOTES.sub("'", text.lower())
    text = _PUNCTUATION.sub(" ", text)
    return [t for t in _WHITESPACE.split(text) if t]


def filter_stopwords(tokens: list[str]) -> list[str]:
    return [t for t in tokens if t not in STOPWORDS]


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance with unit insert/delete/substitute costs."""
    rows, cols = len(a) + 1, len(b) + 1
    dp = [[0] * cols for _ in range(rows)]
    for i in range(rows):
        dp[i][0] = i
    for j in range(cols):
        dp[0][j] = j
    for i in range(1, rows):
        for j in range(1, cols):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            dp[i][j] = min(
                dp[i - 1][j] + 1,
                dp[i][j - 1] + 1,
                dp[i - 1][j - 1] + cost,
            )
    return dp[-1][-1]


def fuzzy_tolerance(target: str) -> int:
    """Edits allowed for a target word, scaled by its length."""
    length = len(target)
    if length <= 3:
        return 0
    if length <= 5:
        return 1
    if length <= 8:
        return 2
    return 3


def fuzzy_match(word: str, target: str) -> bool:
    """True if `word` is within the length-scaled edit tolerance of `target`."""
    if word == target:
        return True
    tolerance = fuzzy_tolerance(target)
    # Edit distance is at least the length difference
    if abs(len(word) - len(target)) > tolerance:
        return False
    return edit_distance(word, target) <= tolerance


def fuzzy_match_any(
    words: list[str],
    keywords: list[str],
    vocabulary: frozenset[str] = frozenset(),
) -> list[str]:
    """
    Keywords matched by at least one word; each keyword credited once.

    A word that is itself in `vocabulary` only matches its exact keyword,
    so "founder" never counts as a typo of "thunder".
    """
    matched = []
    for keyword in keywords:
        for word in words:
            if word in vocabulary and word != keyword:
                continue
            if fuzzy_match(word, keyword):
                matched.append(keyword)
                break
    return matched


def ngrams(tokens: Sequence[str], n: int) -> list[str]:
    """["how", "hot", "is"], 2 -> ["how hot", "hot is"]"""
    if n <= 0:
        return []
    return [" ".join(tokens[i:i + n]) for i in range(len(tokens) - n + 1)]


def bigrams(tokens: Sequence[str]) -> list[str]:
    return ngrams(tokens, 2)


def trigrams(tokens: Sequence[str]) -> list[str]:
    return ngrams(tokens, 3)


def phrase_grams(tokens: Sequence[str]) -> set[str]:
    """Every bigram and trigram of `tokens`, the units phrases are matched against."""
    return set(bigrams(tokens)) | set(trigrams(tokens))


# ========== EMOTION DETECTION ==========

EMOTION_INTENSITY_STEP = 0.15

# (emotion, cues, base intensity); declaration order breaks intensity ties
EMOTION_PATTERNS: list[tuple[Emotion, list[re.Pattern], float]] = [
    (
        Emotion.FRUSTRATION,
        [
            re.compile(
                r"\b(ugh|damn|dammit|annoying|frustrated|angry|furious|hate|worst|terrible|"
                r"horrible|stupid|broken|sucks|wtf|smh)\b",
                re.IGNORECASE,
            ),
            re.compile(r"(!{2,})"),
            re.compile(
                r"\b(not working|doesn't work|won't work|can't get|keeps? failing)\b",
                re.IGNORECASE,
            ),
        ],
        0.7,
    ),
    (
        Emotion.URGENCY,
        [
            re.compile(
                r"\b(urgent|asap|immediately|right now|hurry|quickly|fast|emergency|critical|need .+ now)\b",
                re.IGNORECASE,
            ),
            re.compile(r"\b(please help|help me|i need|can someone)\b", re.IGNORECASE),
            re.compile(r"(!{2,})"),
        ],
        0.6,
    ),
    (
        Emotion.CURIOSITY,
        [
            re.compile(
                r"\b(how|why|what|when|where|who|which|wonder|curious|interested|fascinating)\b",
                re.IGNORECASE,
            ),
            re.compile(r"(\?+)"),
        ],
        0.3,
    ),
    (
        Emotion.GRATITUDE,
        [
            re.compile(
                r"\b(thanks|thank you|thx|ty|appreciate|grateful|awesome|perfect|great job|well done)\b",
                re.IGNORECASE,
            ),
        ],
        0.4,
    ),
    (
        Emotion.GREETING,
        [
            re.compile(
                r"^(hi|hello|hey|good (morning|afternoon|evening)|sup|yo|howdy)\b",
                re.IGNORECASE,
            ),
        ],
        0.3,
    ),
]


def detect_emotion(text: str) -> EmotionSignal:
    """Return the highest-intensity emotion matched in `text` (neutral if none)."""
    best = EmotionSignal()
    for emotion, cues, base_intensity in EMOTION_PATTERNS:
        hits = sum(1 for cue in cues if cue.search(text))
        if not hits:
            continue
        intensity = min(base_intensity + (hits - 1) * EMOTION_INTENSITY_STEP, 1.0)
        if intensity > best.intensity:
            best = EmotionSignal(emotion=emotion, intensity=intensity)
    return best
