"""Streaming event names and part kinds."""

from __future__ import annotations

from enum import Enum


class StreamEvent(str, Enum):
    # Run lifecycle
    RUN_STARTED = "run.started"
    RUN_COMPLETED = "run.completed"
    RUN_FAILED = "run.failed"
    RUN_INTERRUPTED = "run.interrupted"
    STREAM_ENDED = "stream.ended"

    # Step lifecycle
    STEP_STARTED = "step.started"
    STEP_COMPLETED = "step.completed"
    STEP_FAILED = "step.failed"

    # Message parts
    PART_CREATED = "part.created"
    PART_COMPLETED = "part.completed"
    PART_FAILED = "part.failed"

    # Content deltas
    TEXT_DELTA = "text.delta"
    TOOL_CALL_ARGUMENTS_DELTA = "tool_call.arguments.delta"
    TOOL_CALL_OUTPUT_DELTA = "tool_call.output.delta"
    REASONING_DELTA = "reasoning.delta"
    DATA_DELTA = "data.delta"


class PartType(str, Enum):
    TEXT = "text"
    TOOL_CALL = "tool-call"
    TOOL_OUTPUT = "tool-output"
    REASONING = "reasoning"
    DATA = "data"
    FILE = "file"


class RunScope(str, Enum):
    NETWORK = "network"
    AGENT = "agent"


# Chunk size for tool output deltas when simulating provider streaming.
OUTPUT_CHUNK_SIZE = 80

INTERRUPTED_MAX_ITERATIONS = "max_iterations"
