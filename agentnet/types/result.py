"""AgentResult: the record of a single agent invocation."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .messages import Message, ToolResultMessage, message_from_dict, message_to_dict


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AgentResult:
    """
    Output of one agent invocation.

    Attributes:
        agent_name: Name of the agent that produced this result
        output: Parsed model output; empty when the model only issued tool calls
        tool_calls: Results of every tool the agent invoked for ``output``
        created_at: When the result was created
        prompt: System/user/assistant prompt sent to the model (debugging only)
        history: History appended to the prompt (debugging only)
        raw: Raw provider response (debugging only)
        id: Optional canonical message id assigned by a streaming run
    """

    agent_name: str
    output: list[Message] = field(default_factory=list)
    tool_calls: list[ToolResultMessage] = field(default_factory=list)
    created_at: datetime = field(default_factory=_now)
    prompt: list[Message] | None = None
    history: list[Message] | None = None
    raw: Any = None
    id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "agent_name": self.agent_name,
            "output": [message_to_dict(m) for m in self.output],
            "tool_calls": [message_to_dict(m) for m in self.tool_calls],
            "created_at": self.created_at.isoformat(),
            "id": self.id,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> AgentResult:
        created = raw.get("created_at")
        return cls(
            agent_name=raw["agent_name"],
            output=[message_from_dict(m) for m in raw.get("output", [])],
            tool_calls=[message_from_dict(m) for m in raw.get("tool_calls", [])],  # type: ignore[misc]
            created_at=datetime.fromisoformat(created) if created else _now(),
            id=raw.get("id"),
        )


HistoryFormatter = Callable[[AgentResult], list[Message]]


def default_formatter(result: AgentResult) -> list[Message]:
    return [*result.output, *result.tool_calls]
