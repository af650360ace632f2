"""Errors raised by agents, tools and network runs.

Tool-handler failures never appear here: they are returned to the model as
``{"error": ...}`` tool results. These errors abort the run that raised them.
"""

from __future__ import annotations

from typing import Any


class AgentNetError(Exception):
    """Base error. ``code`` is stable and safe to match on."""

    code = "AGENTNET_ERROR"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context


class ToolError(AgentNetError):
    code = "TOOL_ERROR"

    def __init__(self, message: str, tool_name: str, **context: Any) -> None:
        super().__init__(message, tool_name=tool_name, **context)
        self.tool_name = tool_name


class ToolNotFoundError(ToolError):
    """Inference asked for a tool the agent does not own."""

    code = "TOOL_NOT_FOUND"

    def __init__(self, tool_name: str, agent_name: str = "") -> None:
        super().__init__(
            f"Inference requested a non-existent tool: {tool_name}", tool_name, agent_name=agent_name
        )
        self.agent_name = agent_name


class NoModelError(AgentNetError):
    code = "NO_MODEL"

    def __init__(self, agent_name: str) -> None:
        super().__init__(f'No model provided to agent "{agent_name}"', agent_name=agent_name)
        self.agent_name = agent_name


class NoAgentsAvailableError(AgentNetError):
    code = "NO_AGENTS_AVAILABLE"

    def __init__(self, network_name: str) -> None:
        super().__init__(f'No agents enabled in network "{network_name}"', network_name=network_name)
        self.network_name = network_name


class RouterError(AgentNetError):
    """Router misconfiguration or an unknown agent name."""

    code = "ROUTER_ERROR"

    def __init__(self, message: str, agent_name: str | None = None) -> None:
        super().__init__(message, agent_name=agent_name)
        self.agent_name = agent_name


class NetworkRunError(AgentNetError):
    code = "RUN_ALREADY_STARTED"

    def __init__(self) -> None:
        super().__init__("A NetworkRun can only be executed once")


def failure_data(err: Exception) -> dict[str, Any]:
    """Error fields for a ``run.failed`` event."""
    if isinstance(err, AgentNetError):
        return {"error": err.message, "code": err.code, **err.context}
    return {"error": str(err), "code": type(err).__name__}
