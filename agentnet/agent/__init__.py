from .core import Agent, AgentLifecycle, HookArgs, RoutingAgent, StartDecision
from .processors import (
    ApproximateTokenizer, HistoryProcessor, TiktokenTokenizer, TokenLimiter, Tokenizer, ToolCallFilter,
    apply_processors,
)

__all__ = [
    "Agent",
    "AgentLifecycle",
    "ApproximateTokenizer",
    "HistoryProcessor",
    "HookArgs",
    "RoutingAgent",
    "StartDecision",
    "TiktokenTokenizer",
    "TokenLimiter",
    "Tokenizer",
    "ToolCallFilter",
    "apply_processors",
]
