"""Deterministic lexical classifier.

Scores a message against every intent cluster using four signal types
and picks the highest-scoring agent. Runs locally with no model calls,
so it doubles as an offline evaluator for the LLM router.
"""

from typing import Optional, Sequence

from loguru import logger

from .clusters import DEFAULT_CLUSTERS, IntentCluster
from .lexical import (
    detect_emotion,
    filter_stopwords,
    fuzzy_match_any,
    phrase_grams,
    tokenize,
)
from .models import AgentType, ClassificationResult, IntentScore, RoutingDecision


# Per-hit multipliers, applied on top of the cluster weight
PATTERN_WEIGHT = 3.0
PHRASE_WEIGHT = 2.5
FUZZY_WEIGHT = 1.5
SUBSTRING_WEIGHT = 0.5

# Keywords shorter than this never get substring credit
SUBSTRING_MIN_LENGTH = 5


def score_intent(
    tokens: list[str],
    raw_message: str,
    cluster: IntentCluster,
    vocabulary: frozenset[str] = frozenset(),
) -> IntentScore:
    """
    Score a message against one cluster.

    Signals:
        - regex pattern match        (3.0 x weight per pattern)
        - exact phrase match         (2.5 x weight per phrase)
        - fuzzy keyword match        (1.5 x weight per keyword)
        - substring keyword match    (0.5 x weight, keywords >= 5 chars
          not already credited by fuzzy matching)

    Args:
        tokens: Raw (unfiltered) tokens of the message
        raw_message: The original message text
        cluster: Cluster to score against
        vocabulary: Keywords of every cluster; a token that is one of them
            gets no fuzzy credit for a different keyword

    Returns:
        IntentScore with the composite score and signal trace
    """
    result = IntentScore(agent=cluster.agent)
    weight = cluster.weight

    for pattern in cluster.patterns:
        if pattern.search(raw_message):
            result.score += PATTERN_WEIGHT * weight
            result.signals.append(f"regex:{pattern.pattern[:30]}")

    grams = phrase_grams(tokens)
    for phrase in cluster.phrases:
        phrase = phrase.lower()
        if phrase in grams:
            result.score += PHRASE_WEIGHT * weight
            result.signals.append(f'phrase:"{phrase}"')

    fuzzy_hits = fuzzy_match_any(filter_stopwords(tokens), list(cluster.keywords), vocabulary)
    for hit in fuzzy_hits:
        result.score += FUZZY_WEIGHT * weight
        result.signals.append(f'fuzzy:"{hit}"')

    lowered = raw_message.lower()
    credited = set(fuzzy_hits)
    for keyword in cluster.keywords:
        if len(keyword) >= SUBSTRING_MIN_LENGTH and keyword not in credited and keyword in lowered:
            result.score += SUBSTRING_WEIGHT * weight
            result.signals.append(f'substr:"{keyword}"')

    return result


class LexicalClassifier:
    """Multi-signal keyword classifier over a fixed, ordered set of clusters."""

    layer = "lexical"

    def __init__(self, clusters: Optional[Sequence[IntentCluster]] = None):
        self.clusters = tuple(clusters) if clusters is not None else DEFAULT_CLUSTERS
        if not self.clusters:
            raise ValueError("LexicalClassifier needs at least one cluster")
        self.vocabulary = frozenset(kw for cluster in self.clusters for kw in cluster.keywords)

    def score(self, message: str) -> ClassificationResult:
        """Score every cluster and return the full trace."""
        tokens = tokenize(message)
        scores = [score_intent(tokens, message, cluster, self.vocabulary) for cluster in self.clusters]

        # Strictly greater wins, so the earliest cluster keeps ties
        best = scores[0]
        for candidate in scores[1:]:
            if candidate.score > best.score:
                best = candidate

        winner = best.agent if best.score > 0 else AgentType.GENERAL
        return ClassificationResult(
            winner=winner,
            scores=scores,
            emotion=detect_emotion(message),
        )

    async def classify(
        self,
        message: str,
        history: Optional[list[dict[str, str]]] = None,
    ) -> RoutingDecision:
        """Classify `message`; history is accepted for interface parity and ignored."""
        result = self.score(message)
        total = result.total

        if total <= 0:
            return RoutingDecision(
                agent=AgentType.GENERAL,
                confidence=0.5,
                reason="Fallback: no lexical signals",
                layer=self.layer,
                metadata={"emotion": result.emotion.emotion.value},
            )

        winning = next(s for s in result.scores if s.agent == result.winner)
        confidence = min(1.0, winning.score / total)
        logger.debug(
            f"Lexical classification: {result.winner.value} "
            f"(score {winning.score:.2f} of {total:.2f})"
        )
        return RoutingDecision(
            agent=result.winner,
            confidence=round(confidence, 3),
            reason=f"Lexical signals: {', '.join(winning.signals[:5])}",
            layer=self.layer,
            metadata={
                "scores": {s.agent.value: s.score for s in result.scores},
                "emotion": result.emotion.emotion.value,
                "emotion_intensity": result.emotion.intensity,
            },
        )


def classify_content(message: str) -> ClassificationResult:
    """Convenience wrapper using the default clusters."""
    return LexicalClassifier().score(message)
