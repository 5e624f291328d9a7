"""Web search tool backed by the Tavily search API."""

from typing import Any, Optional

import httpx

from synergi.agent.tools.base import Tool
from synergi.agent.tools.models import SearchArgs, SearchHit, SearchResult

TAVILY_URL = "https://api.tavily.com/search"


class WebSearchTool(Tool):
    """Search the web and return the top hits as {title, url, content}."""

    args_model = SearchArgs

    def __init__(
        self,
        api_key: str = "",
        max_results: int = 5,
        endpoint: str = TAVILY_URL,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.max_results = max_results
        self.endpoint = endpoint
        self.timeout = timeout
        self._client = client

    @property
    def name(self) -> str:
        return "search"

    @property
    def description(self) -> str:
        return (
            "Search the web for current information on any topic. "
            "Use this when the user needs up-to-date or real-time data."
        )

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "The search query to find relevant information",
                },
            },
            "required": ["query"],
        }

    async def execute(self, args: SearchArgs) -> SearchResult:
        if not self.api_key:
            return SearchResult(success=False, error="Web search is not configured (missing Tavily API key)")

        body = {
            "api_key": self.api_key,
            "query": args.query,
            "max_results": self.max_results,
        }
        try:
            payload = await self._post(body)
        except httpx.HTTPStatusError as e:
            return SearchResult(success=False, error=f"Search failed: HTTP {e.response.status_code}")
        except httpx.RequestError as e:
            return SearchResult(success=False, error=f"Search failed: {type(e).__name__}")

        raw_hits = payload.get("results") if isinstance(payload, dict) else None
        hits = [
            SearchHit(
                title=str(item.get("title") or ""),
                url=str(item.get("url") or ""),
                content=str(item.get("content") or ""),
            )
            for item in (raw_hits or [])[: self.max_results]
            if isinstance(item, dict)
        ]
        return SearchResult(results=hits)

    async def _post(self, body: dict[str, Any]) -> Any:
        if self._client is not None:
            response = await self._client.post(self.endpoint, json=body)
            response.raise_for_status()
            return response.json()

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(self.endpoint, json=body)
            response.raise_for_status()
            return response.json()
