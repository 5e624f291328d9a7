"""Data models for the agent router."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class AgentType(str, Enum):
    """Capabilities a message can be routed to."""
    WEATHER = "weather"
    WEB_SEARCH = "web_search"
    CODE_ASSISTANT = "code_assistant"
    GENERAL = "general"


class Emotion(str, Enum):
    """Emotional tone detected in a message."""
    FRUSTRATION = "frustration"
    URGENCY = "urgency"
    CURIOSITY = "curiosity"
    GRATITUDE = "gratitude"
    GREETING = "greeting"
    NEUTRAL = "neutral"


@dataclass
class EmotionSignal:
    """Strongest emotion found in a message and its intensity (0-1)."""

    emotion: Emotion = Emotion.NEUTRAL
    intensity: float = 0.0


@dataclass
class RoutingDecision:
    """Result of a routing classification."""

    agent: AgentType
    confidence: float
    reason: str
    extracted_city: Optional[str] = None
    layer: str = "llm"  # "llm" or "lexical"

    # Filled in by AgentRouter from the agent registry
    agent_name: str = ""

    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_fallback(self) -> bool:
        return self.reason.startswith("Fallback: ")

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the `agent_selected` stream event."""
        return {
            "agent": self.agent.value,
            "agentName": self.agent_name,
            "confidence": self.confidence,
            "reason": self.reason,
            "extractedCity": self.extracted_city,
        }


@dataclass
class IntentScore:
    """Composite score of one message against one intent cluster."""

    agent: AgentType
    score: float = 0.0
    signals: list[str] = field(default_factory=list)


@dataclass
class ClassificationResult:
    """Full trace of a lexical classification."""

    winner: AgentType
    scores: list[IntentScore]
    emotion: EmotionSignal

    @property
    def total(self) -> float:
        return sum(s.score for s in self.scores)

    def score_for(self, agent: AgentType) -> float:
        for s in self.scores:
            if s.agent == agent:
                return s.score
        return 0.0


@dataclass(frozen=True)
class AgentInfo:
    """Static display metadata for a registered agent."""

    id: AgentType
    name: str
    description: str
    is_active: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id.value,
            "name": self.name,
            "description": self.description,
            "isActive": self.is_active,
        }
