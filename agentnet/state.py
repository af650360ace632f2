"""Shared conversation/result store for a run."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping, MutableMapping
from typing import Any

from .types import AgentResult, HistoryFormatter, Message, default_formatter, message_from_dict, message_to_dict

logger = logging.getLogger(__name__)

ChangeListener = Callable[[str, Any, Any], None]


class StateData(MutableMapping[str, Any]):
    """Key/value bag owned by a State.

    Listeners are called with ``(key, old, new)`` after every write; ``new`` is
    ``None`` for deletions.
    """

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(initial or {})
        self._listeners: list[ChangeListener] = []

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __setitem__(self, key: str, value: Any) -> None:
        old = self._values.get(key)
        self._values[key] = value
        self._notify(key, old, value)

    def __delitem__(self, key: str) -> None:
        old = self._values.pop(key)
        self._notify(key, old, None)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"StateData({self._values!r})"

    def set(self, key: str, value: Any) -> None:
        self[key] = value

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def snapshot(self) -> dict[str, Any]:
        return dict(self._values)

    def _notify(self, key: str, old: Any, new: Any) -> None:
        for listener in list(self._listeners):
            listener(key, old, new)


class State:
    """
    Conversation and result store shared by every agent, tool and router
    in a run.

    ``results`` is append-only during a run; ``set_results`` is reserved for
    hydrating prior history in one bulk step.
    """

    def __init__(
        self,
        data: Mapping[str, Any] | None = None,
        *,
        results: list[AgentResult] | None = None,
        messages: list[Message] | None = None,
        thread_id: str | None = None,
    ) -> None:
        self._data = StateData(data)
        self._results: list[AgentResult] = list(results or [])
        self._messages: list[Message] = list(messages or [])
        self._thread_id = thread_id

    @property
    def data(self) -> StateData:
        return self._data

    @property
    def thread_id(self) -> str | None:
        return self._thread_id

    @thread_id.setter
    def thread_id(self, value: str | None) -> None:
        if self._thread_id is not None and value != self._thread_id:
            logger.warning("Ignoring thread id %s; state already bound to %s", value, self._thread_id)
            return
        self._thread_id = value

    @property
    def results(self) -> list[AgentResult]:
        return list(self._results)

    @property
    def messages(self) -> list[Message]:
        return list(self._messages)

    def set_results(self, results: list[AgentResult]) -> None:
        self._results = list(results)

    def append_result(self, result: AgentResult) -> None:
        self._results.append(result)

    def get_results_from(self, index: int) -> list[AgentResult]:
        return self._results[max(index, 0):]

    def format_history(self, formatter: HistoryFormatter | None = None) -> list[Message]:
        fmt = formatter or default_formatter
        history = list(self._messages)
        for result in self._results:
            history.extend(fmt(result))
        return history

    def clone(self) -> State:
        return State(
            self._data.snapshot(),
            results=list(self._results),
            messages=list(self._messages),
            thread_id=self._thread_id,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": self._data.snapshot(),
            "results": [r.to_dict() for r in self._results],
            "messages": [message_to_dict(m) for m in self._messages],
            "thread_id": self._thread_id,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> State:
        """Build a State from ``to_dict`` output."""
        return cls(
            raw.get("data") or {},
            results=[
                r if isinstance(r, AgentResult) else AgentResult.from_dict(r)
                for r in raw.get("results") or []
            ],
            messages=[
                m if not isinstance(m, Mapping) else message_from_dict(m)
                for m in raw.get("messages") or []
            ],
            thread_id=raw.get("thread_id"),
        )

    def __repr__(self) -> str:
        return f"State(results={len(self._results)}, thread_id={self._thread_id!r})"
