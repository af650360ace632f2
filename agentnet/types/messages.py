"""Message types."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

STOP_REASON_TOOL = "tool"
STOP_REASON_STOP = "stop"


@dataclass
class TextContent:
    text: str
    type: str = "text"


@dataclass
class TextMessage:
    role: str  # system | user | assistant
    content: str | list[TextContent] = ""
    stop_reason: str | None = None  # "tool" | "stop"
    type: str = "text"

    def text(self) -> str:
        if isinstance(self.content, str):
            return self.content
        return "\n".join(part.text for part in self.content)


@dataclass
class ToolUse:
    """A single tool invocation requested by the model."""

    id: str
    name: str
    input: dict[str, Any] = field(default_factory=dict)
    type: str = "tool"


@dataclass
class ToolCallMessage:
    tools: list[ToolUse] = field(default_factory=list)
    role: str = "assistant"
    stop_reason: str = STOP_REASON_TOOL
    type: str = "tool_call"


@dataclass
class ToolResultMessage:
    tool: ToolUse
    content: Any = None
    role: str = "tool_result"
    stop_reason: str = STOP_REASON_TOOL
    type: str = "tool_result"


Message = TextMessage | ToolCallMessage | ToolResultMessage


@dataclass
class UserMessage:
    """Run input with an optional extra system prompt."""

    content: str
    system_prompt: str | None = None


def message_to_dict(message: Message) -> dict[str, Any]:
    return asdict(message)


def message_from_dict(raw: dict[str, Any]) -> Message:
    kind = raw.get("type", "text")
    if kind == "tool_call":
        return ToolCallMessage(
            tools=[_tool_use_from_dict(t) for t in raw.get("tools", [])],
            role=raw.get("role", "assistant"),
        )
    if kind == "tool_result":
        return ToolResultMessage(tool=_tool_use_from_dict(raw["tool"]), content=raw.get("content"))
    if kind == "text":
        content = raw.get("content", "")
        if isinstance(content, list):
            content = [TextContent(text=c.get("text", "")) for c in content]
        return TextMessage(
            role=raw.get("role", "user"),
            content=content,
            stop_reason=raw.get("stop_reason"),
        )
    raise ValueError(f"Unknown message type: {kind}")


def _tool_use_from_dict(raw: dict[str, Any]) -> ToolUse:
    return ToolUse(id=raw["id"], name=raw["name"], input=dict(raw.get("input") or {}))
