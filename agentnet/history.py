"""History store hooks: thread creation, loading and persisting results."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .state import State
from .types import AgentResult
from .utils import maybe_await

if TYPE_CHECKING:
    from .network import NetworkRun
    from .streaming import DurableStep

logger = logging.getLogger(__name__)


@dataclass
class HistoryContext:
    state: State
    input: str = ""
    network: NetworkRun | None = None
    step: DurableStep | None = None
    thread_id: str | None = None
    # Only set for append_results: results produced since the last checkpoint.
    new_results: list[AgentResult] = field(default_factory=list)


@dataclass
class HistoryConfig:
    """Optional persistence hooks. Each may be sync or async.

    create_thread returns the new thread id; get returns prior AgentResults.
    """

    create_thread: Callable[[HistoryContext], Any] | None = None
    get: Callable[[HistoryContext], Any] | None = None
    append_results: Callable[[HistoryContext], Any] | None = None


async def initialize_thread(
    history: HistoryConfig | None,
    state: State,
    input: str = "",
    network: NetworkRun | None = None,
    step: DurableStep | None = None,
) -> None:
    """Ensure ``state.thread_id`` is populated; an existing id is kept."""
    if history is None or state.thread_id is not None:
        return
    if history.create_thread is not None:
        ctx = HistoryContext(state=state, input=input, network=network, step=step)
        created = await maybe_await(history.create_thread(ctx))
        if created:
            state.thread_id = created if isinstance(created, str) else created["thread_id"]
    elif history.get is not None:
        state.thread_id = str(uuid.uuid4())
    logger.debug("Initialized thread %s", state.thread_id)


async def load_thread(
    history: HistoryConfig | None,
    state: State,
    input: str = "",
    network: NetworkRun | None = None,
    step: DurableStep | None = None,
) -> None:
    """Hydrate ``state`` from the store unless it already carries results."""
    if history is None or history.get is None or state.thread_id is None or state.results:
        return
    ctx = HistoryContext(state=state, input=input, network=network, step=step, thread_id=state.thread_id)
    results = await maybe_await(history.get(ctx))
    if results:
        state.set_results(list(results))
        logger.debug("Loaded %d results for thread %s", len(results), state.thread_id)


async def save_thread(
    history: HistoryConfig | None,
    state: State,
    initial_count: int,
    input: str = "",
    network: NetworkRun | None = None,
    step: DurableStep | None = None,
) -> None:
    """Persist only results produced after ``initial_count``."""
    if history is None or history.append_results is None or state.thread_id is None:
        return
    new_results = state.get_results_from(initial_count)
    if not new_results:
        return
    ctx = HistoryContext(
        state=state,
        input=input,
        network=network,
        step=step,
        thread_id=state.thread_id,
        new_results=new_results,
    )
    await maybe_await(history.append_results(ctx))
