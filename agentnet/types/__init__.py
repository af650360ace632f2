"""Core type definitions, re-exported from sub-modules."""

from .messages import (
    STOP_REASON_STOP, STOP_REASON_TOOL, Message, TextContent, TextMessage, ToolCallMessage,
    ToolResultMessage, ToolUse, UserMessage, message_from_dict, message_to_dict,
)
from .model import InferenceResponse, ModelAdapter, ToolChoice
from .result import AgentResult, HistoryFormatter, default_formatter

__all__ = [
    "STOP_REASON_STOP", "STOP_REASON_TOOL",
    "Message", "TextContent", "TextMessage", "ToolCallMessage", "ToolResultMessage",
    "ToolUse", "UserMessage", "message_from_dict", "message_to_dict",
    "InferenceResponse", "ModelAdapter", "ToolChoice",
    "AgentResult", "HistoryFormatter", "default_formatter",
]
