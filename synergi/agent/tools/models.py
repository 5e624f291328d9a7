"""Typed tool arguments and results.

Each tool validates its arguments into one of the *Args models and
returns one of the *Result models, so downstream code matches on a
closed set of shapes.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Base(BaseModel):
    """Accepts both camelCase and snake_case keys; dumps camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


# ========== ARGUMENTS ==========

class SearchArgs(Base):
    query: str = Field(min_length=1)


class CodeExecArgs(Base):
    language: Literal["python", "javascript"]
    code: str = Field(min_length=1)


class UIGenArgs(Base):
    code: str = Field(min_length=1)
    framework: Literal["html", "react"] = "html"


class WeatherArgs(Base):
    city: str = Field(min_length=1)


# ========== RESULTS ==========

class ToolFailure(Base):
    """Generic failure, used when a call cannot be dispatched or validated."""
    success: Literal[False] = False
    error: str


class SearchHit(Base):
    title: str = ""
    url: str = ""
    content: str = ""


class SearchResult(Base):
    success: bool = True
    results: list[SearchHit] = Field(default_factory=list)
    error: Optional[str] = None


class CodeExecResult(Base):
    success: bool
    output: Optional[str] = None
    stdout: Optional[str] = None
    stderr: Optional[str] = None
    error: Optional[str] = None


class UIGenResult(Base):
    success: bool = True
    code: str
    framework: Literal["html", "react"]
    message: str


class HourlySlot(Base):
    label: str
    temp: str
    weather_code: int
    description: str


class WeatherData(Base):
    """Reshaped forecast payload, as rendered by the weather card."""
    city: str
    country: str
    temp: str
    feels_like: str
    description: str
    weather_code: int
    humidity: str
    windspeed: str
    high: str
    low: str
    sunrise: str
    sunset: str
    datetime: str
    hourly: list[HourlySlot] = Field(default_factory=list)


class WeatherResult(Base):
    success: bool = True
    data: Optional[WeatherData] = None
    error: Optional[str] = None


ToolArgs = SearchArgs | CodeExecArgs | UIGenArgs | WeatherArgs
ToolOutput = ToolFailure | SearchResult | CodeExecResult | UIGenResult | WeatherResult
