"""Agent: a single model-plus-tools executor producing one AgentResult per call."""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from ..config import AgentConfig, CatalogConfig, StreamingConfig
from ..errors import NoModelError, RouterError, failure_data
from ..history import HistoryConfig, initialize_thread, load_thread, save_thread
from ..state import State
from ..streaming import DurableStep, PartType, RunScope, StreamEvent, StreamingContext, wrap_step
from ..tools import Tool
from ..tools.catalog import ToolCatalogProvider, load_catalogs
from ..tools.invoke import resolve_tool_calls
from ..types import STOP_REASON_STOP, AgentResult, Message, ModelAdapter, TextMessage, UserMessage
from ..utils import maybe_await
from .processors import HistoryProcessor, apply_processors

if TYPE_CHECKING:
    from ..network import NetworkRun

logger = logging.getLogger(__name__)

# A literal prompt, or (network_run) -> str, sync or async.
SystemPrompt = str | Callable[..., Any]


@dataclass
class HookArgs:
    agent: Agent
    network: NetworkRun
    input: str = ""
    prompt: list[Message] = field(default_factory=list)
    history: list[Message] = field(default_factory=list)
    result: AgentResult | None = None


@dataclass
class StartDecision:
    """Returned by ``on_start``; ``stop=True`` skips inference."""

    prompt: list[Message]
    history: list[Message]
    stop: bool = False


@dataclass
class AgentLifecycle:
    """Optional hooks; each receives HookArgs and may be sync or async.

    enabled -> bool, on_start -> StartDecision, on_response/on_finish -> AgentResult.
    """

    enabled: Callable[[HookArgs], Any] | None = None
    on_start: Callable[[HookArgs], Any] | None = None
    on_response: Callable[[HookArgs], Any] | None = None
    on_finish: Callable[[HookArgs], Any] | None = None


class Agent:
    """LLM-backed executor: prompt, infer, resolve tools, optionally loop."""

    def __init__(
        self,
        name: str,
        system: SystemPrompt,
        *,
        description: str = "",
        assistant: str = "",
        tools: list[Tool] | None = None,
        model: ModelAdapter | None = None,
        lifecycle: AgentLifecycle | None = None,
        config: AgentConfig | None = None,
        tool_catalogs: list[ToolCatalogProvider] | None = None,
        catalog_config: CatalogConfig | None = None,
        history: HistoryConfig | None = None,
        history_processors: list[HistoryProcessor] | None = None,
    ) -> None:
        self.name = name
        self.description = description
        self.system = system
        self.assistant = assistant
        self.model = model
        self.lifecycle = lifecycle or AgentLifecycle()
        self.config = config or AgentConfig()
        self.tools: dict[str, Tool] = {}
        for tool in tools or []:
            self.add_tool(tool)
        self.tool_catalogs = list(tool_catalogs or [])
        self.catalog_config = catalog_config
        self.history = history
        self.history_processors = list(history_processors or [])
        self._catalogs_loaded = False

    @property
    def tool_choice(self) -> str:
        return self.config.tool_choice

    def add_tool(self, tool: Tool) -> None:
        self.tools[tool.name] = tool

    def with_model(self, model: ModelAdapter) -> Agent:
        clone = copy.copy(self)
        clone.model = model
        clone.tools = dict(self.tools)
        return clone

    async def is_enabled(self, network: NetworkRun) -> bool:
        if self.lifecycle.enabled is None:
            return True
        return bool(await maybe_await(self.lifecycle.enabled(HookArgs(agent=self, network=network))))

    async def run(
        self,
        input: str | UserMessage,
        *,
        model: ModelAdapter | None = None,
        network: NetworkRun | None = None,
        state: State | None = None,
        max_iter: int | None = None,
        streaming: StreamingConfig | None = None,
        streaming_context: StreamingContext | None = None,
        step: DurableStep | None = None,
    ) -> AgentResult:
        """
        Run one invocation.

        Inside a network the caller owns thread persistence and run lifecycle
        events; standalone, the agent handles both itself.

        Raises:
            NoModelError: no adapter on the call, the agent, or the network.
            ToolNotFoundError: the model asked for a tool the agent lacks.
        """
        await self._load_catalogs()
        adapter = model or self.model or (network.default_model if network is not None else None)
        if adapter is None:
            raise NoModelError(self.name)

        s = state or (network.state if network is not None else None) or State()
        standalone = network is None
        run = network if network is not None else _standalone_run(s)
        text = input.content if isinstance(input, UserMessage) else input
        iterations = self.config.max_iter if max_iter is None else max_iter

        if not standalone:
            return await self._execute(adapter, input, text, run, iterations, streaming_context, step)

        await initialize_thread(self.history, s, text, run, step)
        await load_thread(self.history, s, text, run, step)
        initial_count = len(s.results)

        if streaming is None:
            result = await self._execute(adapter, input, text, run, iterations, streaming_context, step)
            await save_thread(self.history, s, initial_count, text, run, step)
            return result

        ctx = StreamingContext.from_config(streaming, RunScope.AGENT, thread_id=s.thread_id)
        step = wrap_step(step, ctx)
        await ctx.publish_event(StreamEvent.RUN_STARTED, ctx.run_data(name=self.name))
        try:
            result = await self._execute(adapter, input, text, run, iterations, ctx, step)
            result = replace(result, id=ctx.message_id)
            await save_thread(self.history, s, initial_count, text, run, step)
        except Exception as e:
            await ctx.publish_event(StreamEvent.RUN_FAILED, ctx.run_data(
                name=self.name, recoverable=False, **failure_data(e),
            ))
            raise
        else:
            await ctx.publish_event(StreamEvent.RUN_COMPLETED, ctx.run_data(name=self.name))
        finally:
            await ctx.publish_event(StreamEvent.STREAM_ENDED, {"scope": RunScope.AGENT.value, "message_id": ctx.message_id})
        return result

    async def _execute(
        self,
        adapter: ModelAdapter,
        input: str | UserMessage,
        text: str,
        run: NetworkRun,
        max_iter: int,
        ctx: StreamingContext | None,
        step: DurableStep | None,
    ) -> AgentResult:
        history = await apply_processors(run.state.format_history(), self.history_processors)
        prompt = await self.build_prompt(input, run)
        result = AgentResult(self.name, prompt=prompt, history=history)

        iteration = 0
        while True:
            if self.lifecycle.on_start is not None:
                decision = await maybe_await(self.lifecycle.on_start(HookArgs(
                    agent=self, network=run, input=text, prompt=prompt, history=history,
                )))
                if decision.stop:
                    logger.debug("Agent %s stopped by on_start", self.name)
                    return result
                prompt, history = decision.prompt, decision.history

            result = await self._infer(adapter, prompt, history, run, ctx, step, iteration)
            iteration += 1
            has_more = bool(
                self.tools and result.output and result.output[-1].stop_reason != STOP_REASON_STOP
            )
            if not has_more or iteration >= max_iter:
                break
            history = [*history, *result.output, *result.tool_calls]

        if self.lifecycle.on_finish is not None:
            result = await maybe_await(self.lifecycle.on_finish(HookArgs(agent=self, network=run, input=text, result=result)))
        return result

    async def _infer(
        self,
        adapter: ModelAdapter,
        prompt: list[Message],
        history: list[Message],
        run: NetworkRun,
        ctx: StreamingContext | None,
        step: DurableStep | None,
        iteration: int,
    ) -> AgentResult:
        logger.debug("Agent %s inferring (iteration %d, %d messages)", self.name, iteration, len(prompt) + len(history))
        response = await adapter.infer(
            self.name,
            [*prompt, *history],
            list(self.tools.values()),
            self.tool_choice or "auto",
        )
        result = AgentResult(
            self.name,
            output=list(response.output),
            prompt=prompt,
            history=history,
            raw=response.raw,
        )
        if self.lifecycle.on_response is not None:
            result = await maybe_await(self.lifecycle.on_response(HookArgs(agent=self, network=run, result=result)))

        if ctx is not None:
            await self._stream_text(result, ctx, step, iteration)

        tool_results = await resolve_tool_calls(self, result.output, run, step, ctx)
        if tool_results:
            result = replace(result, tool_calls=[*result.tool_calls, *tool_results])
        return result

    async def _stream_text(
        self, result: AgentResult, ctx: StreamingContext, step: DurableStep | None, iteration: int
    ) -> None:
        texts = [m for m in result.output if isinstance(m, TextMessage) and m.role == "assistant"]
        content = texts[-1].text() if texts else ""
        if not content:
            return
        if step is not None:
            part_id = await step.run(f"generate-text-part-id-{ctx.run_id}-{iteration}", ctx.generate_part_id)
        else:
            part_id = ctx.generate_part_id()
        await ctx.publish_event(StreamEvent.PART_CREATED, ctx.run_data(
            part_id=part_id, type=PartType.TEXT.value, metadata={"agent_name": self.name},
        ))
        await ctx.publish_deltas(StreamEvent.TEXT_DELTA, part_id, content, ctx.chunk_size)
        await ctx.publish_event(StreamEvent.PART_COMPLETED, ctx.run_data(
            part_id=part_id, type=PartType.TEXT.value, final_content=content,
        ))

    async def build_prompt(self, input: str | UserMessage, run: NetworkRun) -> list[Message]:
        """System message, then the user input and assistant seed when non-empty."""
        if isinstance(self.system, str):
            system = self.system
        else:
            system = await maybe_await(self.system(run))
        text = input
        if isinstance(input, UserMessage):
            text = input.content
            if input.system_prompt:
                system = f"{system}\n\n{input.system_prompt}"

        prompt: list[Message] = [TextMessage(role="system", content=system)]
        if text:
            prompt.append(TextMessage(role="user", content=text))
        if self.assistant:
            prompt.append(TextMessage(role="assistant", content=self.assistant))
        return prompt

    async def _load_catalogs(self) -> None:
        if self._catalogs_loaded or not self.tool_catalogs:
            return
        for tool in await load_catalogs(self.tool_catalogs, self.catalog_config):
            self.add_tool(tool)
        self._catalogs_loaded = True

    def __repr__(self) -> str:
        return f"Agent(name={self.name!r}, tools={list(self.tools)})"


RouteHook = Callable[[HookArgs], Any]


class RoutingAgent(Agent):
    """Model-backed router; ``on_route`` maps its result to agent names (or None)."""

    def __init__(self, name: str, system: SystemPrompt, *, on_route: RouteHook, **kwargs: Any) -> None:
        super().__init__(name, system, **kwargs)
        self.on_route = on_route

    async def run(self, input: str | UserMessage, *, network: NetworkRun | None = None, **kwargs: Any) -> AgentResult:
        if network is None:
            raise RouterError(f'Routing agent "{self.name}" can only run inside a network', self.name)
        return await super().run(input, network=network, **kwargs)

    async def route(self, result: AgentResult, network: NetworkRun) -> list[str] | None:
        names = await maybe_await(self.on_route(HookArgs(agent=self, network=network, result=result)))
        return list(names) if names else None


def _standalone_run(state: State) -> NetworkRun:
    from ..network.core import Network
    from ..network.run import NetworkRun

    return NetworkRun(Network(name="default", agents=[]), state)
