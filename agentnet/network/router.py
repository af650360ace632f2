"""Routers: a deterministic function or a model-backed routing agent."""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from ..agent.core import Agent, HookArgs, RoutingAgent
from ..config import AgentConfig
from ..tools import ToolOptions, create_tool
from ..types import AgentResult

if TYPE_CHECKING:
    from .run import NetworkRun


@dataclass
class RouterArgs:
    """What a function router sees on each call."""

    input: str
    network: NetworkRun
    stack: list[Agent]
    call_count: int
    last_result: AgentResult | None = None


# Returns None, an Agent, a list of Agents or names, or a ModelRouter to defer to.
RouterFn = Callable[[RouterArgs], Any]


@dataclass
class FunctionRouter:
    fn: RouterFn


@dataclass
class ModelRouter:
    agent: RoutingAgent


Router = FunctionRouter | ModelRouter


def as_router(router: Router | RoutingAgent | RouterFn | None) -> Router | None:
    if router is None or isinstance(router, (FunctionRouter, ModelRouter)):
        return router
    if isinstance(router, RoutingAgent):
        return ModelRouter(router)
    if callable(router):
        return FunctionRouter(router)
    raise TypeError(f"Unsupported router: {router!r}")


class SelectAgent(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(description="The name of the agent that should handle the request")


def _select_agent(params: SelectAgent, options: ToolOptions) -> str:
    agent = options.network.agents.get(params.name)
    if agent is None:
        raise ValueError(f"The routing agent requested an agent that doesn't exist: {params.name}")
    return agent.name


async def _routing_system(network: NetworkRun) -> str:
    agents = await network.available_agents()
    listing = "\n".join(
        f"""
    <agent>
      <name>{a.name}</name>
      <description>{a.description}</description>
      <tools>{json.dumps([t.describe() for t in a.tools.values()])}</tools>
    </agent>"""
        for a in agents
    )
    return f"""You are the orchestrator between a group of agents.  Each agent is suited for a set of specific tasks, and has a name, instructions, and a set of tools.

The following agents are available:
<agents>
  {listing}
</agents>

Follow the set of instructions:

<instructions>
  Think about the current history and status.  Determine which agent to use to handle the user's request, based off of the current agents and their tools.

  Your aim is to thoroughly complete the request, thinking step by step, choosing the right agent based off of the context.
</instructions>
"""


def _route_from_selection(args: HookArgs) -> list[str] | None:
    result = args.result
    if result is None or not result.tool_calls:
        return None
    content = result.tool_calls[0].content
    if isinstance(content, dict) and isinstance(content.get("data"), str):
        return [content["data"]]
    return None


def create_default_routing_agent() -> RoutingAgent:
    return RoutingAgent(
        "Default routing agent",
        _routing_system,
        description="Selects which agents to work on based off of the current prompt and input.",
        on_route=_route_from_selection,
        tools=[
            create_tool(
                "select_agent",
                _select_agent,
                description="select an agent to handle the input, based off of the current conversation",
                parameters=SelectAgent,
                strict=True,
            )
        ],
        config=AgentConfig(tool_choice="select_agent"),
    )


_default_router: ModelRouter | None = None


def default_router() -> ModelRouter:
    global _default_router
    if _default_router is None:
        _default_router = ModelRouter(create_default_routing_agent())
    return _default_router
