"""Tool-call resolution: one tool_result per requested call."""

from __future__ import annotations

import inspect
import json
import logging
import traceback
from typing import TYPE_CHECKING, Any

from ..errors import ToolNotFoundError
from ..streaming.context import StreamingContext
from ..streaming.events import OUTPUT_CHUNK_SIZE, PartType, StreamEvent
from ..types import Message, ToolCallMessage, ToolResultMessage, ToolUse
from . import Tool, ToolOptions

if TYPE_CHECKING:
    from ..agent import Agent
    from ..network import NetworkRun
    from ..streaming import DurableStep

logger = logging.getLogger(__name__)


def serialize_error(err: BaseException) -> dict[str, Any]:
    """Structured, JSON-friendly form of an exception and its cause chain."""
    out: dict[str, Any] = {
        "name": type(err).__name__,
        "message": str(err),
        "stack": "".join(traceback.format_exception(type(err), err, err.__traceback__)),
    }
    cause = err.__cause__
    if cause is not None and cause is not err:
        out["cause"] = serialize_error(cause)
    return out


def success_marker(tool_name: str) -> str:
    return f"{tool_name} successfully executed"


async def invoke_tool(tool: Tool, call: ToolUse, options: ToolOptions) -> dict[str, Any]:
    """Run one handler; failures become ``{"error": ...}`` payloads instead of raising."""
    try:
        parsed = tool.parameters.parse(call.input) if tool.parameters is not None else call.input
        result = tool.handler(parsed, options)
        if inspect.isawaitable(result):
            result = await result
    except Exception as e:
        logger.debug("Tool %s failed: %s", tool.name, e)
        return {"error": serialize_error(e)}
    if result is None:
        return {"data": success_marker(tool.name)}
    return {"data": result}


async def resolve_tool_calls(
    agent: Agent,
    output: list[Message],
    network: NetworkRun,
    step: DurableStep | None = None,
    streaming: StreamingContext | None = None,
) -> list[ToolResultMessage]:
    """Execute every tool call in ``output`` sequentially, in request order.

    Raises:
        ToolNotFoundError: a call names a tool the agent does not own.
    """
    results: list[ToolResultMessage] = []
    for msg in output:
        if not isinstance(msg, ToolCallMessage):
            continue
        for call in msg.tools:
            tool = agent.tools.get(call.name)
            if tool is None:
                raise ToolNotFoundError(call.name, agent.name)
            if streaming is not None:
                await _stream_arguments(agent, call, streaming, step)
            logger.debug("Agent %s invoking tool %s (%s)", agent.name, call.name, call.id)
            content = await invoke_tool(tool, call, ToolOptions(agent=agent, network=network, step=step))
            if streaming is not None:
                await _stream_output(agent, call, content, streaming, step)
            results.append(ToolResultMessage(tool=call, content=content))
    return results


async def _part_id(streaming: StreamingContext, step: DurableStep | None, step_id: str) -> str:
    # Generated inside a step so replays reuse the same id.
    if step is not None:
        return await step.run(step_id, streaming.generate_part_id)
    return streaming.generate_part_id()


async def _stream_arguments(
    agent: Agent, call: ToolUse, streaming: StreamingContext, step: DurableStep | None
) -> None:
    part_id = await _part_id(streaming, step, f"generate-tool-part-id-{streaming.message_id}-{call.id}")
    metadata = {"tool_name": call.name, "agent_name": agent.name}
    await streaming.publish_event(StreamEvent.PART_CREATED, streaming.run_data(
        part_id=part_id, type=PartType.TOOL_CALL.value, metadata=metadata,
    ))
    await streaming.publish_deltas(
        StreamEvent.TOOL_CALL_ARGUMENTS_DELTA,
        part_id,
        json.dumps(call.input or {}, default=str),
        streaming.chunk_size,
        tool_name=call.name,
    )
    await streaming.publish_event(StreamEvent.PART_COMPLETED, streaming.run_data(
        part_id=part_id, type=PartType.TOOL_CALL.value, final_content=call.input or {}, metadata=metadata,
    ))


async def _stream_output(
    agent: Agent,
    call: ToolUse,
    content: dict[str, Any],
    streaming: StreamingContext,
    step: DurableStep | None,
) -> None:
    part_id = await _part_id(streaming, step, f"generate-tool-output-part-id-{streaming.message_id}-{call.id}")
    metadata = {"tool_name": call.name, "agent_name": agent.name, "tool_call_id": call.id}
    await streaming.publish_event(StreamEvent.PART_CREATED, streaming.run_data(
        part_id=part_id, type=PartType.TOOL_OUTPUT.value, metadata=metadata,
    ))
    await streaming.publish_deltas(
        StreamEvent.TOOL_CALL_OUTPUT_DELTA,
        part_id,
        json.dumps(content, default=str),
        OUTPUT_CHUNK_SIZE,
    )
    completed = StreamEvent.PART_FAILED if "error" in content else StreamEvent.PART_COMPLETED
    await streaming.publish_event(completed, streaming.run_data(
        part_id=part_id, type=PartType.TOOL_OUTPUT.value, final_content=content, metadata=metadata,
    ))
