"""
Pytest configuration and shared fixtures
"""

import itertools

import pytest

from agentnet import AgentMessageChunk, InferenceResponse, TextMessage, ToolCallMessage, ToolUse

_call_ids = itertools.count(1)


def text(content: str, stop_reason: str = "stop") -> TextMessage:
    return TextMessage(role="assistant", content=content, stop_reason=stop_reason)


def tool_call(name: str, /, call_id: str | None = None, **input) -> ToolCallMessage:
    return ToolCallMessage(tools=[ToolUse(id=call_id or f"call_{next(_call_ids)}", name=name, input=input)])


class ScriptedModel:
    """ModelAdapter replaying canned outputs in order; records every call.

    Each script entry is a message list, or a callable ``(agent_id, messages)``
    returning one. Once the script runs out it answers with a final text.
    """

    def __init__(self, script=None):
        self.script = list(script or [])
        self.calls = []

    async def infer(self, agent_id, messages, tools, tool_choice):
        self.calls.append({
            "agent_id": agent_id,
            "messages": list(messages),
            "tools": [t.name for t in tools],
            "tool_choice": tool_choice,
        })
        if not self.script:
            return InferenceResponse(output=[text("done")], raw={"agent": agent_id})
        entry = self.script.pop(0)
        if callable(entry):
            entry = entry(agent_id, messages)
        return InferenceResponse(output=list(entry), raw={"agent": agent_id})


class RecordingSink:
    """Streaming publish sink collecting chunks."""

    def __init__(self):
        self.chunks: list[AgentMessageChunk] = []

    async def __call__(self, chunk):
        self.chunks.append(chunk)

    @property
    def events(self) -> list[str]:
        return [c.event for c in self.chunks]

    def of(self, event: str) -> list[AgentMessageChunk]:
        return [c for c in self.chunks if c.event == event]


class MemoryStep:
    """DurableStep memoizing results by step id, like a replaying substrate."""

    def __init__(self):
        self.memo = {}
        self.ids = []

    async def run(self, step_id, fn, *args):
        self.ids.append(step_id)
        if step_id not in self.memo:
            result = fn(*args)
            if hasattr(result, "__await__"):
                result = await result
            self.memo[step_id] = result
        return self.memo[step_id]


@pytest.fixture
def model() -> ScriptedModel:
    return ScriptedModel()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def memory_step() -> MemoryStep:
    return MemoryStep()
