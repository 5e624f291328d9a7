"""Base class for agent tools."""

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from pydantic import BaseModel


class Tool(ABC):
    """
    A capability the model can invoke during a tool loop.

    Subclasses declare a JSON-schema `parameters` dict for the model and
    an `args_model` used to validate what the model actually sent.
    """

    args_model: ClassVar[type[BaseModel]]

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        pass

    @property
    @abstractmethod
    def parameters(self) -> dict[str, Any]:
        pass

    @abstractmethod
    async def execute(self, args: BaseModel) -> BaseModel:
        """Run the tool with validated arguments and return a result model."""
        pass

    def to_schema(self) -> dict[str, Any]:
        """OpenAI function-calling definition."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }
