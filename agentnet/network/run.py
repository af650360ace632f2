"""NetworkRun: the stateful, single-use execution of one Network invocation."""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from ..agent.core import Agent, RoutingAgent
from ..config import StreamingConfig
from ..errors import NetworkRunError, NoAgentsAvailableError, NoModelError, RouterError, failure_data
from ..history import initialize_thread, load_thread, save_thread
from ..state import State
from ..streaming import DurableStep, RunScope, StreamEvent, StreamingContext, wrap_step
from ..streaming.events import INTERRUPTED_MAX_ITERATIONS
from ..types import AgentResult, ModelAdapter
from ..utils import maybe_await
from .router import FunctionRouter, ModelRouter, Router, RouterArgs, RouterFn, as_router, default_router

if TYPE_CHECKING:
    from .core import Network

logger = logging.getLogger(__name__)


class NetworkRun:
    """
    One execution of a Network against one State.

    Agents returned by a function router that the network does not know are
    added to this run's private registry, so ``agents`` (the network's set)
    and the schedulable set can differ.
    """

    def __init__(self, network: Network, state: State) -> None:
        self.network = network
        self.state = state
        self.name = network.name
        self.description = network.description
        self.default_model: ModelAdapter | None = network.default_model
        self.router: Router | None = network.router
        self.max_iter = network.max_iter
        self.agents: dict[str, Agent] = dict(network.agents)
        self._agents: dict[str, Agent] = dict(network.agents)
        self._stack: list[str] = []
        self._counter = 0
        self._started = False

    @property
    def call_count(self) -> int:
        return self._counter

    @property
    def stack(self) -> list[str]:
        return list(self._stack)

    async def available_agents(self) -> list[Agent]:
        return [a for a in self.agents.values() if await a.is_enabled(self)]

    def schedule(self, agent_name: str) -> None:
        self._stack.append(agent_name)

    async def run(
        self,
        input: str,
        *,
        router: Router | RoutingAgent | RouterFn | None = None,
        streaming: StreamingConfig | None = None,
        step: DurableStep | None = None,
    ) -> NetworkRun:
        """
        Route and execute agents until the router stops, the stack empties
        or ``max_iter`` is reached.

        Raises:
            NetworkRunError: this run was already executed.
            NoAgentsAvailableError: no agent passes its ``enabled`` hook.
            RouterError: no router and no default model, or an unknown agent was scheduled.
        """
        if self._started:
            raise NetworkRunError()
        self._started = True
        active_router = as_router(router) or self.router
        history = self.network.history

        await initialize_thread(history, self.state, input, self, step)
        await load_thread(history, self.state, input, self, step)
        initial_count = len(self.state.results)

        ctx: StreamingContext | None = None
        if streaming is not None:
            ctx = StreamingContext.from_config(streaming, RunScope.NETWORK, thread_id=self.state.thread_id)
            step = wrap_step(step, ctx)
            await ctx.publish_event(StreamEvent.RUN_STARTED, ctx.run_data(name=self.name))

        logger.info("Network %s run started", self.name)
        try:
            await self._execute(input, active_router, ctx, step)
            await save_thread(history, self.state, initial_count, input, self, step)
        except Exception as e:
            if ctx is not None:
                await ctx.publish_event(StreamEvent.RUN_FAILED, ctx.run_data(
                    name=self.name, recoverable=False, **failure_data(e),
                ))
            raise
        else:
            if ctx is not None:
                if self._stack and self.max_iter and self._counter >= self.max_iter:
                    await ctx.publish_event(StreamEvent.RUN_INTERRUPTED, ctx.run_data(
                        name=self.name, reason=INTERRUPTED_MAX_ITERATIONS,
                    ))
                await ctx.publish_event(StreamEvent.RUN_COMPLETED, ctx.run_data(
                    name=self.name, call_count=self._counter,
                ))
        finally:
            if ctx is not None:
                await ctx.publish_event(StreamEvent.STREAM_ENDED, {
                    "scope": RunScope.NETWORK.value, "message_id": ctx.message_id,
                })
        logger.info("Network %s run finished after %d agent calls", self.name, self._counter)
        return self

    async def _execute(
        self,
        input: str,
        router: Router | None,
        ctx: StreamingContext | None,
        step: DurableStep | None,
    ) -> None:
        if not await self.available_agents():
            raise NoAgentsAvailableError(self.name)

        for agent in await self._next_agents(input, router) or []:
            self.schedule(agent.name)

        while self._stack and (self.max_iter == 0 or self._counter < self.max_iter):
            name = self._stack.pop()
            agent = self._agents.get(name)
            if agent is None:
                raise RouterError(f"unknown agent in the network stack: {name}", name)

            logger.debug("Network %s running agent %s (call %d)", self.name, name, self._counter + 1)
            result = await self._run_agent(agent, input, ctx, step)
            self._counter += 1
            self.state.append_result(result)

            for nxt in await self._next_agents(input, router) or []:
                self.schedule(nxt.name)

    async def _run_agent(
        self,
        agent: Agent,
        input: str,
        ctx: StreamingContext | None,
        step: DurableStep | None,
    ) -> AgentResult:
        if ctx is None:
            return await agent.run(input, network=self, max_iter=0, step=step)

        child = ctx.create_child_context(str(uuid.uuid4()))
        await child.publish_event(StreamEvent.RUN_STARTED, child.run_data(name=agent.name))
        try:
            result = await agent.run(input, network=self, max_iter=0, streaming_context=child, step=step)
        except Exception as e:
            await child.publish_event(StreamEvent.RUN_FAILED, child.run_data(
                name=agent.name, recoverable=False, **failure_data(e),
            ))
            raise
        await child.publish_event(StreamEvent.RUN_COMPLETED, child.run_data(name=agent.name))
        return result

    async def _next_agents(self, input: str, router: Router | None) -> list[Agent] | None:
        if router is None:
            if self.default_model is None:
                raise RouterError(
                    "No router or model defined in network. Pass a router or a "
                    "default model to use the built-in routing agent."
                )
            router = default_router()

        match router:
            case ModelRouter(agent=routing_agent):
                return await self._route_via_agent(routing_agent, input)
            case FunctionRouter(fn=fn):
                return await self._route_via_function(fn, input)
        raise RouterError(f"Unsupported router: {router!r}")

    async def _route_via_function(self, fn: RouterFn, input: str) -> list[Agent] | None:
        stack = []
        for name in self._stack:
            agent = self._agents.get(name)
            if agent is None:
                raise RouterError(f"unknown agent in the network stack: {name}", name)
            stack.append(agent)
        results = self.state.results
        picked = await maybe_await(fn(RouterArgs(
            input=input,
            network=self,
            stack=stack,
            call_count=self._counter,
            last_result=results[-1] if results else None,
        )))
        if picked is None:
            return None
        if isinstance(picked, RoutingAgent):
            picked = ModelRouter(picked)
        if isinstance(picked, ModelRouter):
            return await self._route_via_agent(picked.agent, input)

        agents: list[Agent] = []
        for item in picked if isinstance(picked, (list, tuple)) else [picked]:
            if isinstance(item, str):
                agent = self._agents.get(item)
                if agent is None:
                    raise RouterError(f"Router selected an unknown agent: {item}", item)
            else:
                agent = item
                if agent.name not in self._agents:
                    logger.debug("Adding agent %s to run %s", agent.name, self.name)
                    self._agents[agent.name] = agent
            agents.append(agent)
        return agents

    async def _route_via_agent(self, routing_agent: RoutingAgent, input: str) -> list[Agent] | None:
        model = routing_agent.model or self.default_model
        if model is None:
            raise NoModelError(routing_agent.name)
        result = await routing_agent.run(input, network=self, model=model)
        names = await routing_agent.route(result, self)
        if not names:
            return None
        agents = []
        for name in names:
            agent = self._agents.get(name)
            if agent is None:
                raise RouterError(f"Routing agent selected an unknown agent: {name}", name)
            agents.append(agent)
        return agents

    def __repr__(self) -> str:
        return f"NetworkRun(name={self.name!r}, calls={self._counter}, stack={self._stack})"
