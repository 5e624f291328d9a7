"""Tool registry: lookup, argument validation and failure containment."""

import json
from typing import Any, Optional

from loguru import logger
from pydantic import BaseModel, ValidationError

from synergi.agent.tools.base import Tool
from synergi.agent.tools.models import ToolFailure


class ToolRegistry:
    """Holds the tools available to one adapter."""

    def __init__(self, tools: Optional[list[Tool]] = None):
        self._tools: dict[str, Tool] = {}
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: Tool) -> None:
        self._tools[tool.name] = tool

    def get(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools)

    def get_definitions(self) -> list[dict[str, Any]]:
        return [tool.to_schema() for tool in self._tools.values()]

    def parse_args(self, name: str, arguments: dict[str, Any]) -> Optional[BaseModel]:
        """Validate raw arguments; None if the tool is unknown or the args invalid."""
        tool = self._tools.get(name)
        if tool is None:
            return None
        try:
            return tool.args_model.model_validate(arguments)
        except ValidationError:
            return None

    async def execute(self, name: str, arguments: dict[str, Any]) -> BaseModel:
        """
        Validate and run a tool.

        Never raises: unknown tools, invalid arguments and exceptions
        escaping the tool all come back as a ToolFailure.
        """
        tool = self._tools.get(name)
        if tool is None:
            return ToolFailure(error=f"Unknown tool: {name}")

        try:
            args = tool.args_model.model_validate(arguments)
        except ValidationError as e:
            return ToolFailure(error=f"Invalid arguments for {name}: {e.error_count()} error(s)")

        preview = json.dumps(arguments, ensure_ascii=False, default=str)[:200]
        logger.info(f"Tool call: {name}({preview})")
        try:
            return await tool.execute(args)
        except Exception as e:
            logger.warning(f"Tool {name} failed: {e}")
            return ToolFailure(error=f"{type(e).__name__}: {e}")
