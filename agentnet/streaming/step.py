"""Durable-step handle protocol and its streaming decorator."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from ..utils import maybe_await
from .context import StreamingContext
from .events import StreamEvent


@runtime_checkable
class DurableStep(Protocol):
    """Handle to an external durable-execution substrate.

    ``run`` executes ``fn(*args)`` at most once per ``step_id`` and memoizes
    its result for replay.
    """

    async def run(self, step_id: str, fn: Callable[..., Any], *args: Any) -> Any: ...


class StreamingStep:
    """DurableStep decorator publishing step lifecycle events around each call."""

    def __init__(self, step: DurableStep, context: StreamingContext) -> None:
        self.step = step
        self.context = context

    async def run(self, step_id: str, fn: Callable[..., Any], *args: Any) -> Any:
        await self.context.publish_event(StreamEvent.STEP_STARTED, {
            "step_id": step_id,
            "run_id": self.context.run_id,
            "description": f"Executing run: {step_id}",
        })
        started = time.monotonic()
        try:
            result = await self.step.run(step_id, fn, *args)
        except Exception as e:
            await self.context.publish_event(StreamEvent.STEP_FAILED, {
                "step_id": step_id,
                "run_id": self.context.run_id,
                "error": str(e),
                "recoverable": True,
            })
            raise
        await self.context.publish_event(StreamEvent.STEP_COMPLETED, {
            "step_id": step_id,
            "run_id": self.context.run_id,
            "duration_ms": int((time.monotonic() - started) * 1000),
        })
        return result


class InlineStep:
    """DurableStep that executes immediately with no memoization."""

    async def run(self, step_id: str, fn: Callable[..., Any], *args: Any) -> Any:
        return await maybe_await(fn(*args))


def wrap_step(step: DurableStep | None, context: StreamingContext | None) -> DurableStep | None:
    if step is None or context is None:
        return step
    return StreamingStep(step, context)
