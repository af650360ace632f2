from .context import AgentMessageChunk, SequenceCounter, StreamingContext
from .events import PartType, RunScope, StreamEvent
from .step import DurableStep, InlineStep, StreamingStep, wrap_step

__all__ = [
    "AgentMessageChunk",
    "DurableStep",
    "InlineStep",
    "PartType",
    "RunScope",
    "SequenceCounter",
    "StreamEvent",
    "StreamingContext",
    "StreamingStep",
    "wrap_step",
]
