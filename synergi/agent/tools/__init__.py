"""Agent tools module."""

from synergi.agent.tools.base import Tool
from synergi.agent.tools.registry import ToolRegistry

__all__ = ["Tool", "ToolRegistry"]
