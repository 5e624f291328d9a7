"""
Agent router package.

Two interchangeable classifiers behind one interface:
1. LLMRouter - delegated model classification (default, live path)
2. LexicalClassifier - deterministic keyword/phrase/pattern scoring
"""

from .agent_router import AVAILABLE_AGENTS, AgentRouter, IntentClassifier, get_available_agents
from .classifier import LexicalClassifier, classify_content, score_intent
from .llm_router import LLMRouter
from .models import AgentInfo, AgentType, ClassificationResult, RoutingDecision

__all__ = [
    "AVAILABLE_AGENTS",
    "AgentInfo",
    "AgentRouter",
    "AgentType",
    "ClassificationResult",
    "IntentClassifier",
    "LLMRouter",
    "LexicalClassifier",
    "RoutingDecision",
    "classify_content",
    "get_available_agents",
    "score_intent",
]
