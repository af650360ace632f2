"""Model adapter types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from .messages import Message

if TYPE_CHECKING:
    from ..tools import Tool

# "auto" lets the model decide, "any" forces some tool, anything else names a tool.
ToolChoice = str


@dataclass
class InferenceResponse:
    output: list[Message] = field(default_factory=list)
    raw: Any = None


@runtime_checkable
class ModelAdapter(Protocol):
    """Translates the message union to a provider and back.

    The last message of ``output`` must carry ``stop_reason="tool"`` when the
    model wants tools executed, and ``"stop"`` when it is done.
    """

    async def infer(
        self,
        agent_id: str,
        messages: list[Message],
        tools: list[Tool],
        tool_choice: ToolChoice,
    ) -> InferenceResponse: ...
