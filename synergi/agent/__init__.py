"""Agent core module (lazy imports)."""

__all__ = [
    "AgentRouter",
    "RoutingDecision",
    "AgentType",
    "ToolRegistry",
    "build_adapters",
]


def __getattr__(name: str):
    if name in {"AgentRouter", "RoutingDecision", "AgentType"}:
        from synergi.agent.router import AgentRouter, AgentType, RoutingDecision
        return {"AgentRouter": AgentRouter, "RoutingDecision": RoutingDecision, "AgentType": AgentType}[name]
    if name == "ToolRegistry":
        from synergi.agent.tools.registry import ToolRegistry
        return ToolRegistry
    if name == "build_adapters":
        from synergi.agent.adapters import build_adapters
        return build_adapters
    raise AttributeError(f"module 'synergi.agent' has no attribute {name!r}")


def __dir__():
    return sorted(__all__)
