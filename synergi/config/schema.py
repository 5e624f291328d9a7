"""Configuration schema using Pydantic."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings


class Base(BaseModel):
    """Base model that accepts both camelCase and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProviderConfig(Base):
    """LLM gateway configuration."""
    api_key: str = ""
    api_base: str | None = None
    extra_headers: dict[str, str] | None = None


class ProvidersConfig(Base):
    """Configuration for LLM providers."""
    openrouter: ProviderConfig = Field(default_factory=ProviderConfig)
    default_model: str = "openrouter/auto"


class RoutingConfig(Base):
    """Intent classification settings."""
    strategy: Literal["llm", "lexical"] = "llm"
    model: str | None = None  # Falls back to providers.default_model
    timeout_ms: int = 8000


class AgentsConfig(Base):
    """Per-adapter generation settings."""
    general_model: str | None = None
    weather_model: str | None = None
    web_search_model: str = "openrouter/free"
    code_assistant_model: str = "openrouter/auto"
    max_tool_steps: int = 5
    max_search_results: int = 5
    temperature: float = 0.7
    max_tokens: int = 4096

    @field_validator("max_tool_steps", "max_search_results")
    @classmethod
    def _at_least_one(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be >= 1")
        return value


class WebSearchConfig(Base):
    """Web search tool configuration."""
    api_key: str = ""  # Tavily API key
    endpoint: str = "https://api.tavily.com/search"
    timeout: float = 15.0


class SandboxConfig(Base):
    """Code execution sandbox configuration."""
    timeout: float = 30.0
    python: str = "python3"
    javascript: str = "node"

    def interpreters(self) -> dict[str, tuple[str, str]]:
        return {
            "python": (self.python, "main.py"),
            "javascript": (self.javascript, "main.js"),
        }


class ToolsConfig(Base):
    """Tools configuration."""
    web_search: WebSearchConfig = Field(default_factory=WebSearchConfig)
    sandbox: SandboxConfig = Field(default_factory=SandboxConfig)


class WeatherConfig(Base):
    """Open-Meteo endpoints."""
    geocode_url: str = "https://geocoding-api.open-meteo.com/v1/search"
    forecast_url: str = "https://api.open-meteo.com/v1/forecast"
    hourly_slots: int = 6
    timeout: float = 10.0


class StorageConfig(Base):
    """Conversation store."""
    backend: Literal["sqlite", "memory"] = "sqlite"
    db_path: str = "~/.synergi/chat.db"

    @property
    def path(self) -> Path:
        return Path(self.db_path).expanduser()


class ServerConfig(Base):
    """HTTP server configuration."""
    host: str = "127.0.0.1"
    port: int = 5000
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])


class ChatConfig(Base):
    """Turn orchestration settings."""
    title_max_words: int = 6
    title_max_chars: int = 60
    serialize_turns: bool = True


class Config(BaseSettings):
    """Root configuration for synergi."""
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
    routing: RoutingConfig = Field(default_factory=RoutingConfig)
    agents: AgentsConfig = Field(default_factory=AgentsConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    weather: WeatherConfig = Field(default_factory=WeatherConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    chat: ChatConfig = Field(default_factory=ChatConfig)

    @property
    def router_model(self) -> str:
        return self.routing.model or self.providers.default_model

    model_config = ConfigDict(
        env_prefix="SYNERGI_",
        env_nested_delimiter="__"
    )
