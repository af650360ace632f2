"""History processors: transform formatted history before inference."""

from __future__ import annotations

import inspect
import json
import logging
import math
from dataclasses import asdict
from typing import Any, Awaitable, Protocol, runtime_checkable

import tiktoken

from ..types import Message, TextMessage, ToolCallMessage, ToolResultMessage, ToolUse

logger = logging.getLogger(__name__)


@runtime_checkable
class HistoryProcessor(Protocol):
    name: str
    def process(self, messages: list[Message]) -> list[Message] | Awaitable[list[Message]]: ...


async def apply_processors(messages: list[Message], processors: list[HistoryProcessor]) -> list[Message]:
    result = messages
    for processor in processors:
        out = processor.process(result)
        result = await out if inspect.isawaitable(out) else out
    return result


class ToolCallFilter:
    """Drops tool calls (and their results) from history.

    With ``include`` only the named tools survive; with ``exclude`` the named
    tools are dropped; with neither, every tool call is dropped. When
    ``persist_results`` is set a short assistant summary replaces what was
    removed.
    """

    name = "ToolCallFilter"

    def __init__(
        self,
        include: list[str] | None = None,
        exclude: list[str] | None = None,
        persist_results: bool = False,
    ) -> None:
        if include and exclude:
            raise ValueError("ToolCallFilter accepts include or exclude, not both")
        self.include = include
        self.exclude = exclude
        self.persist_results = persist_results

    def _dropped(self, tool: ToolUse) -> bool:
        if self.include:
            return tool.name not in self.include
        if self.exclude:
            return tool.name in self.exclude
        return True

    def process(self, messages: list[Message]) -> list[Message]:
        out: list[Message] = []
        dropped_ids: set[str] = set()
        for msg in messages:
            if isinstance(msg, ToolCallMessage):
                keep = [t for t in msg.tools if not self._dropped(t)]
                drop = [t for t in msg.tools if self._dropped(t)]
                dropped_ids.update(t.id for t in drop)
                if keep:
                    out.append(ToolCallMessage(tools=keep, role=msg.role, stop_reason=msg.stop_reason))
                if drop and self.persist_results:
                    out.append(_summary(drop))
            elif isinstance(msg, ToolResultMessage):
                if msg.tool.id not in dropped_ids:
                    out.append(msg)
            else:
                out.append(msg)
        return out


def _summary(tools: list[ToolUse]) -> TextMessage:
    if len(tools) == 1:
        text = f"Used **{tools[0].name}** tool"
    else:
        text = f"Used tools: {', '.join(t.name for t in tools)}"
    return TextMessage(role="assistant", content=text, stop_reason="stop")


_CHARS_PER_TOKEN = {
    "o200k_base": 4.2,
    "cl100k_base": 4.0,
    "p50k_base": 3.8,
    "r50k_base": 3.5,
    "gpt2": 3.2,
}


@runtime_checkable
class Tokenizer(Protocol):
    encoding: str
    def count(self, text: str) -> int: ...


class ApproximateTokenizer:
    """Character-density token estimate for a given encoding."""

    def __init__(self, encoding: str = "o200k_base") -> None:
        self.encoding = encoding
        self.chars_per_token = _CHARS_PER_TOKEN.get(encoding, 4.0)

    def count(self, text: str) -> int:
        return math.ceil(len(text) / self.chars_per_token)


class TiktokenTokenizer:
    """Exact counts via tiktoken, falling back to an estimate if the encoding can't load."""

    def __init__(self, encoding: str = "o200k_base") -> None:
        self.encoding = encoding
        self._encoder: Any | None = None
        self._fallback: ApproximateTokenizer | None = None

    def _load(self) -> None:
        try:
            self._encoder = tiktoken.get_encoding(self.encoding)
        except Exception:
            logger.warning("Failed to load tiktoken encoding %s; estimating tokens", self.encoding, exc_info=True)
            self._fallback = ApproximateTokenizer(self.encoding)

    def count(self, text: str) -> int:
        if not text:
            return 0
        if self._encoder is None and self._fallback is None:
            self._load()
        if self._fallback is not None:
            return self._fallback.count(text)
        return len(self._encoder.encode(text, disallowed_special=()))


class TokenLimiter:
    """Keeps the newest history that fits in ``limit`` tokens.

    History is cut only between segments; a tool_call and all of its
    tool_results are one segment.
    """

    name = "TokenLimiter"

    def __init__(self, limit: int, tokenizer: Tokenizer | None = None, encoding: str = "o200k_base") -> None:
        self.limit = limit
        self.tokenizer = tokenizer or TiktokenTokenizer(encoding)

    def _count(self, msg: Message) -> int:
        if isinstance(msg, TextMessage):
            text = msg.content if isinstance(msg.content, str) else _dumps([asdict(c) for c in msg.content])
            return self.tokenizer.count(text)
        if isinstance(msg, ToolCallMessage):
            return self.tokenizer.count(_dumps([asdict(t) for t in msg.tools]))
        if isinstance(msg, ToolResultMessage):
            return self.tokenizer.count(_dumps(msg.content))
        return 0

    def segments(self, messages: list[Message]) -> list[list[Message]]:
        segments: list[list[Message]] = []
        current: list[Message] = []
        pending: set[str] = set()
        for msg in messages:
            current.append(msg)
            if isinstance(msg, ToolCallMessage):
                pending.update(t.id for t in msg.tools)
            elif isinstance(msg, ToolResultMessage):
                pending.discard(msg.tool.id)
            if not pending:
                segments.append(current)
                current = []
        if current:
            segments.append(current)
        return segments

    def process(self, messages: list[Message]) -> list[Message]:
        segments = [(seg, sum(self._count(m) for m in seg)) for seg in self.segments(messages)]
        if sum(tokens for _, tokens in segments) <= self.limit:
            return messages
        kept: list[list[Message]] = []
        used = 0
        for seg, tokens in reversed(segments):
            if used + tokens > self.limit:
                break
            kept.append(seg)
            used += tokens
        return [m for seg in reversed(kept) for m in seg]


def _dumps(value: Any) -> str:
    return json.dumps(value, default=str)
