"""
agentnet - multi-agent orchestration core
=========================================

A Network holds Agents and a Router. Each run asks the Router which agent
runs next, executes it (model inference plus tool calls), appends the
AgentResult to shared State, and routes again until the Router returns
nothing.

```python
from agentnet import Agent, Network, create_tool

agent = Agent("Worker", "You do the work.", model=adapter, tools=[...])
network = Network("Team", [agent], router=lambda args: agent if args.call_count == 0 else None)
run = await network.run("Summarize the report")
run.state.results
```
"""

from .agent import (
    Agent, AgentLifecycle, ApproximateTokenizer, HookArgs, RoutingAgent, StartDecision,
    TokenLimiter, ToolCallFilter,
)
from .config import AgentConfig, CatalogConfig, NetworkConfig, StreamingConfig
from .errors import (
    AgentNetError, NetworkRunError, NoAgentsAvailableError, NoModelError, RouterError, ToolError,
    ToolNotFoundError,
)
from .history import HistoryConfig, HistoryContext
from .network import FunctionRouter, ModelRouter, Network, NetworkRun, RouterArgs
from .state import State
from .streaming import AgentMessageChunk, DurableStep, StreamEvent, StreamingContext, StreamingStep
from .tools import Tool, ToolOptions, create_tool
from .tools.catalog import CatalogToolInfo, ToolCatalogProvider
from .types import (
    AgentResult, InferenceResponse, Message, ModelAdapter, TextMessage, ToolCallMessage,
    ToolResultMessage, ToolUse, UserMessage,
)

__all__ = [
    "Agent", "AgentLifecycle", "ApproximateTokenizer", "HookArgs", "RoutingAgent",
    "StartDecision", "TokenLimiter", "ToolCallFilter",
    "AgentConfig", "CatalogConfig", "NetworkConfig", "StreamingConfig",
    "AgentNetError", "NetworkRunError", "NoAgentsAvailableError", "NoModelError",
    "RouterError", "ToolError", "ToolNotFoundError",
    "HistoryConfig", "HistoryContext",
    "FunctionRouter", "ModelRouter", "Network", "NetworkRun", "RouterArgs",
    "State",
    "AgentMessageChunk", "DurableStep", "StreamEvent", "StreamingContext", "StreamingStep",
    "Tool", "ToolOptions", "create_tool",
    "CatalogToolInfo", "ToolCatalogProvider",
    "AgentResult", "InferenceResponse", "Message", "ModelAdapter", "TextMessage",
    "ToolCallMessage", "ToolResultMessage", "ToolUse", "UserMessage",
]
