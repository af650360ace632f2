"""Streaming context: ordered, best-effort event publishing for a run tree."""

from __future__ import annotations

import inspect
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any

from ..config import PublishFn, StreamingConfig
from .events import RunScope, StreamEvent

logger = logging.getLogger(__name__)


class SequenceCounter:
    """Monotonic counter shared by a parent context and all of its children."""

    def __init__(self, start: int = 0) -> None:
        self._next = start

    @property
    def value(self) -> int:
        return self._next

    def next(self) -> int:
        current = self._next
        self._next += 1
        return current


@dataclass
class AgentMessageChunk:
    event: str
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: int = 0  # unix ms
    sequence_number: int = 0
    id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "event": self.event,
            "data": self.data,
            "timestamp": self.timestamp,
            "sequence_number": self.sequence_number,
            "id": self.id,
        }


class StreamingContext:
    """Wraps a publish sink with sequence numbering and id enrichment.

    A numbered slot is consumed even when the sink fails, so sequence numbers
    never repeat across a run tree.
    """

    def __init__(
        self,
        publish: PublishFn,
        run_id: str,
        message_id: str,
        scope: RunScope | str = RunScope.NETWORK,
        *,
        parent_run_id: str | None = None,
        thread_id: str | None = None,
        user_id: str | None = None,
        simulate_chunking: bool = False,
        chunk_size: int = 50,
        counter: SequenceCounter | None = None,
    ) -> None:
        self._publish = publish
        self.run_id = run_id
        self.message_id = message_id
        self.scope = RunScope(scope)
        self.parent_run_id = parent_run_id
        self.thread_id = thread_id
        self.user_id = user_id
        self.simulate_chunking = simulate_chunking
        self.chunk_size = chunk_size
        self._counter = counter or SequenceCounter()

    @classmethod
    def from_config(
        cls,
        config: StreamingConfig,
        scope: RunScope | str,
        *,
        run_id: str | None = None,
        message_id: str | None = None,
        thread_id: str | None = None,
    ) -> StreamingContext:
        return cls(
            config.publish,
            run_id=run_id or str(uuid.uuid4()),
            message_id=message_id or str(uuid.uuid4()),
            scope=scope,
            thread_id=thread_id,
            user_id=config.user_id,
            simulate_chunking=config.simulate_chunking,
            chunk_size=config.chunk_size,
        )

    @property
    def counter(self) -> SequenceCounter:
        return self._counter

    def create_child_context(self, agent_run_id: str) -> StreamingContext:
        return StreamingContext(
            self._publish,
            run_id=agent_run_id,
            message_id=self.message_id,
            scope=RunScope.AGENT,
            parent_run_id=self.run_id,
            thread_id=self.thread_id,
            user_id=self.user_id,
            simulate_chunking=self.simulate_chunking,
            chunk_size=self.chunk_size,
            counter=self._counter,
        )

    async def publish_event(self, event: StreamEvent | str, data: dict[str, Any] | None = None) -> None:
        name = event.value if isinstance(event, StreamEvent) else event
        payload = dict(data or {})
        if self.thread_id is not None:
            payload.setdefault("thread_id", self.thread_id)
        if self.user_id is not None:
            payload.setdefault("user_id", self.user_id)
        seq = self._counter.next()
        chunk = AgentMessageChunk(
            event=name,
            data=payload,
            timestamp=int(time.time() * 1000),
            sequence_number=seq,
            id=f"publish-{seq}:{name}",
        )
        try:
            result = self._publish(chunk)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.warning("Failed to publish %s (seq=%d); continuing", name, seq, exc_info=True)

    async def publish_deltas(
        self,
        event: StreamEvent,
        part_id: str,
        content: str,
        chunk_size: int,
        **extra: Any,
    ) -> None:
        """Publish ``content`` as one delta, or as fixed-size chunks when simulating."""
        if not content:
            return
        size = chunk_size if self.simulate_chunking else len(content)
        for start in range(0, len(content), size):
            await self.publish_event(
                event,
                {"part_id": part_id, "message_id": self.message_id, "delta": content[start:start + size], **extra},
            )

    def generate_part_id(self) -> str:
        return f"part_{self.message_id}_{uuid.uuid4().hex[:12]}"

    def run_data(self, **extra: Any) -> dict[str, Any]:
        data: dict[str, Any] = {"run_id": self.run_id, "scope": self.scope.value, "message_id": self.message_id}
        if self.parent_run_id is not None:
            data["parent_run_id"] = self.parent_run_id
        data.update(extra)
        return data
