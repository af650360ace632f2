"""Agent, network, streaming and catalog configuration."""

from __future__ import annotations

import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

# Receives an AgentMessageChunk; may be sync or async.
PublishFn = Callable[[Any], Awaitable[None] | None]

ToolFilter = str | re.Pattern[str]


@dataclass
class AgentConfig:
    # 0 means a single inference/tool pass per call.
    max_iter: int = 0
    tool_choice: str = "auto"


@dataclass
class NetworkConfig:
    # 0 means unbounded.
    max_iter: int = 0


@dataclass
class StreamingConfig:
    publish: PublishFn
    simulate_chunking: bool = False
    chunk_size: int = 50
    user_id: str | None = None


@dataclass
class CatalogConfig:
    include_tools: list[ToolFilter] = field(default_factory=list)
    exclude_tools: list[ToolFilter] = field(default_factory=list)
