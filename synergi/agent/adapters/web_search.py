"""Web search adapter."""

from typing import Optional

from synergi.agent.adapters.base import ToolLoopAdapter
from synergi.agent.router.models import AgentType
from synergi.agent.tools.registry import ToolRegistry
from synergi.agent.tools.web import WebSearchTool
from synergi.providers.base import LLMProvider

SYSTEM_PROMPT = """You are Synergi's Web Search Agent, a specialized assistant within the Synergi Multi-Agent system.

Your capabilities:
- Search the web for current, real-time information using the search tool
- Synthesize information from multiple sources into clear, accurate answers
- Always cite your sources with URLs so users can verify

Guidelines:
- Use the search tool for any real-time or current information queries
- You may call the tool multiple times to gather comprehensive information
- Summarize findings clearly and concisely
- Format responses with markdown for readability
- If results are insufficient, say so honestly"""


class WebSearchAdapter(ToolLoopAdapter):
    """Answers time-sensitive questions from live search results, citing sources."""

    agent = AgentType.WEB_SEARCH
    system_prompt = SYSTEM_PROMPT

    def __init__(
        self,
        provider: LLMProvider,
        search_tool: Optional[WebSearchTool] = None,
        **kwargs,
    ):
        tools = ToolRegistry([search_tool or WebSearchTool()])
        super().__init__(provider, tools, **kwargs)
