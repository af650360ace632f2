"""Network: a set of agents plus a router, invoked once per run."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ..agent.core import Agent, RoutingAgent
from ..config import NetworkConfig, StreamingConfig
from ..history import HistoryConfig
from ..state import State
from ..types import ModelAdapter
from .router import Router, RouterFn, as_router
from .run import NetworkRun

if TYPE_CHECKING:
    from ..streaming import DurableStep


class Network:
    def __init__(
        self,
        name: str,
        agents: list[Agent],
        *,
        description: str = "",
        default_model: ModelAdapter | None = None,
        router: Router | RoutingAgent | RouterFn | None = None,
        default_state: State | None = None,
        config: NetworkConfig | None = None,
        history: HistoryConfig | None = None,
    ) -> None:
        self.name = name
        self.description = description
        self.default_model = default_model
        self.router = as_router(router)
        self.state = default_state or State()
        self.config = config or NetworkConfig()
        self.history = history
        self.agents: dict[str, Agent] = {}
        for agent in agents:
            self.add_agent(agent)

    @property
    def max_iter(self) -> int:
        return self.config.max_iter

    def add_agent(self, agent: Agent) -> None:
        self.agents[agent.name] = agent

    async def run(
        self,
        input: str,
        *,
        router: Router | RoutingAgent | RouterFn | None = None,
        state: State | Mapping[str, Any] | None = None,
        streaming: StreamingConfig | None = None,
        step: DurableStep | None = None,
    ) -> NetworkRun:
        """Execute one run and return it.

        ``state`` may be a State (used as-is) or a mapping seeding ``state.data``;
        otherwise the default state is cloned. Use ``State.from_dict`` to resume
        from serialized state.
        """
        return await NetworkRun(self, self._resolve_state(state)).run(
            input, router=router, streaming=streaming, step=step,
        )

    def _resolve_state(self, state: State | Mapping[str, Any] | None) -> State:
        if isinstance(state, State):
            return state
        if isinstance(state, Mapping):
            return State(state)
        return self.state.clone()

    def __repr__(self) -> str:
        return f"Network(name={self.name!r}, agents={list(self.agents)})"
