"""Intent clusters: the lexical signature of each routable agent.

Each cluster groups single-word keywords (fuzzy matched), multi-word
phrases (matched against message bigrams/trigrams) and regex patterns
(matched against the raw message), plus a relative weight.
"""

import re
from dataclasses import dataclass

from .models import AgentType


@dataclass(frozen=True)
class IntentCluster:
    """Keyword/phrase/pattern bundle for one agent."""

    agent: AgentType
    keywords: tuple[str, ...]
    phrases: tuple[str, ...]
    patterns: tuple[re.Pattern, ...]
    weight: float = 1.0

    def __post_init__(self):
        if self.weight <= 0:
            raise ValueError(f"Cluster weight must be positive, got {self.weight}")
        for phrase in self.phrases:
            if not 2 <= len(phrase.split()) <= 3:
                raise ValueError(f"Phrases are matched as bigrams or trigrams, got {phrase!r}")


def _patterns(*sources: str, flags: int = re.IGNORECASE) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(source, flags) for source in sources)


WEATHER_CLUSTER = IntentCluster(
    agent=AgentType.WEATHER,
    keywords=(
        # Core weather terms
        "weather", "forecast", "temperature", "climate",
        # Conditions, including compound forms
        "rain", "raining", "rainy", "rainfall",
        "snow", "snowing", "snowy", "snowfall", "snowstorm",
        "storm", "stormy", "thunderstorm", "lightning", "thunder",
        "sunny", "sunshine", "sun",
        "cloudy", "clouds", "overcast", "fog", "foggy", "haze", "hazy", "mist", "misty",
        "wind", "windy", "windspeed", "breeze", "breezy", "gust", "gusty",
        "humid", "humidity", "moisture",
        "drizzle", "sleet", "hail", "hailstorm",
        "freezing", "frost", "frosty", "chilly", "cold", "hot", "warm",
        # Metrics
        "celsius", "fahrenheit", "degrees",
        # Astronomy
        "sunrise", "sunset",
        # Gear
        "umbrella", "raincoat", "jacket",
    ),
    phrases=(
        "how hot", "how cold", "how warm", "how humid", "how windy",
        "is it raining", "is it snowing", "is it sunny", "is it cloudy",
        "will it rain", "will it snow", "will it snowfall",
        "going to rain", "going to snow", "chance of rain", "chance of snow",
        "do i need", "should i carry", "should i bring",
        "what's the temperature", "whats the temperature",
        "tell me weather", "the weather today",
        "weather update", "weather report", "weather today",
        "weather forecast", "weather condition", "weather conditions",
        "current temperature", "feels like",
    ),
    patterns=_patterns(
        r"\b(weather|forecast|temperature|rain\w*|snow\w*|storm|sunny|cloudy|humid\w*|wind\w*"
        r"|sunrise|sunset|hail\w*|frost\w*|freez\w*)\b",
        r"\b(how (hot|cold|warm|humid|windy|chilly|freezing))\b",
        r"\b(is it (raining|snowing|sunny|cloudy|windy|cold|hot|warm|freezing|chilly))\b",
        r"\b(will it (rain|snow|snowfall|hail|storm|freeze|be (cold|hot|warm|sunny|cloudy|rainy)))\b",
        r"\b(going to (rain|snow|storm|hail))\b",
        r"\b(do i need|should i (carry|bring|take)) .*(umbrella|jacket|raincoat|sweater|coat)\b",
    ),
    weight=1.0,
)

SEARCH_CLUSTER = IntentCluster(
    agent=AgentType.WEB_SEARCH,
    keywords=(
        # Explicit search
        "search", "google", "lookup", "look",
        # News & events
        "news", "headlines", "happening", "happened", "breaking",
        "announcement", "update", "updates",
        # Time-sensitive
        "latest", "newest", "recent", "current", "live", "trending",
        "realtime", "real-time",
        # Sports
        "score", "scores", "standings", "championship", "tournament",
        "match", "fixture", "fixtures", "league",
        # Finance
        "stock", "stocks", "shares", "crypto", "bitcoin", "ethereum",
        "solana", "market", "nasdaq", "sensex", "nifty",
        "price", "pricing", "rate", "rates",
        # People & entities
        "who", "founder", "ceo",
        # Products
        "released", "launched", "available", "buy", "purchase",
    ),
    phrases=(
        "look up", "find out", "look for", "search for",
        "what happened", "what's happening", "whats happening",
        "any news", "latest news", "breaking news",
        "right now", "just now",
        "this week", "this month",
        "stock price", "share price", "exchange rate",
        "who is", "who are", "who was", "who won",
        "how much does", "how much is",
    ),
    patterns=_patterns(
        r"\b(search|look up|find out|google|look for)\b",
        r"\b(latest|newest|recent|trending|breaking)\b",
        r"\b(news|headlines|happened|happening|announcement)\b",
        r"\b(today|yesterday|this week|this month|right now|recently)\b",
        r"\b(score|scores|standings|championship|tournament)\b",
        r"\b(stock|crypto|bitcoin|market|nasdaq|sensex|nifty)\b",
        r"\b(who (is|are|was|won|leads?|runs?|owns?|founded))\b",
        r"\b(what (is|are) (the )?(current|latest|recent|new))\b",
        r"\b(available|released|launched|out now)\b",
    ) + _patterns(r"\b(2024|2025|2026|2027)\b", flags=0),
    weight=1.0,
)

GENERAL_CLUSTER = IntentCluster(
    agent=AgentType.GENERAL,
    keywords=(
        # Creative
        "write", "create", "generate", "draft", "compose", "essay", "poem", "story",
        # Coding
        "code", "program", "function", "debug", "refactor", "script", "algorithm",
        "typescript", "javascript", "python", "java", "react", "html", "css",
        # Education
        "explain", "teach", "learn", "understand", "definition", "meaning", "concept",
        # Language
        "translate", "summarize", "paraphrase", "rewrite", "proofread",
        # Math
        "calculate", "compute", "solve", "math", "equation", "formula", "integral",
        # Analysis
        "review", "analyze", "compare", "evaluate", "critique",
        # Greetings (low signal)
        "hello", "hi", "hey", "thanks", "goodbye",
    ),
    phrases=(
        "help me understand", "how it works", "does it mean",
        "write a", "create a", "generate a", "make a", "draft a",
        "can you explain", "can you help", "can you write",
        "tell me about", "teach me",
        "fix this", "debug this", "refactor this",
        "translate this", "summarize this",
        "who are you", "what are you", "what can you",
    ),
    patterns=_patterns(
        r"\b(write|create|generate|make|draft|compose)\b",
        r"\b(explain|teach|help me understand)\b",
        r"\b(code|program|function|debug|fix|refactor|script)\b",
        r"\b(translate|summarize|paraphrase|rewrite|proofread)\b",
        r"\b(calculate|compute|solve|math|equation|formula)\b",
        r"\b(review|analyze|compare|evaluate|critique)\b",
        r"^(hi|hello|hey|thanks|thank you|who are you|what (are|can) you)",
    ),
    # Slightly lower so general only wins as a genuine fallback
    weight=0.9,
)

# Evaluation order; the first cluster wins ties
DEFAULT_CLUSTERS: tuple[IntentCluster, ...] = (
    WEATHER_CLUSTER,
    SEARCH_CLUSTER,
    GENERAL_CLUSTER,
)
