"""Tool contract and create_tool helper."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from .schema import DictSchema, PydanticSchema, ToolSchema, as_schema

if TYPE_CHECKING:
    from ..agent import Agent
    from ..network import NetworkRun
    from ..streaming import DurableStep

# (input, options) -> result; sync or async.
ToolHandler = Callable[[Any, "ToolOptions"], Any]


@dataclass
class ToolOptions:
    """Passed to every tool handler alongside its validated input."""

    agent: Agent
    network: NetworkRun
    step: DurableStep | None = None

    @property
    def state(self):
        return self.network.state


@dataclass
class Tool:
    name: str
    handler: ToolHandler
    description: str = ""
    parameters: ToolSchema | None = None
    strict: bool = False
    # Set for tools merged in from a catalog provider.
    provider: str | None = None

    def input_schema(self) -> dict:
        if self.parameters is None:
            return {"type": "object", "properties": {}}
        return self.parameters.to_json_schema()

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.input_schema(),
            "strict": self.strict,
        }


def create_tool(
    name: str,
    handler: ToolHandler,
    description: str = "",
    parameters: type[BaseModel] | ToolSchema | dict[str, Any] | None = None,
    strict: bool = False,
) -> Tool:
    return Tool(
        name=name,
        handler=handler,
        description=description,
        parameters=as_schema(parameters, strict=strict),
        strict=strict,
    )


__all__ = [
    "DictSchema",
    "PydanticSchema",
    "Tool",
    "ToolHandler",
    "ToolOptions",
    "ToolSchema",
    "create_tool",
]
