"""Event Bus - in-process named-event dispatcher decoupling producers from consumers.

Invariants:
    - publish() notifies subscribers registered at call time, in registration order
    - Payload passed by reference; subscribers must not assume exclusive ownership
    - A subscriber failure never reaches the publisher or the other subscribers
    - publish() never raises
    - Async subscribers are invoked (scheduled) during publish, not awaited
    - No replay buffer: subscribing after a publish does not see that publish

Design Decisions:
    - Explicit object on app.state over a module-level emitter: ownership and
      test substitution stay visible at the call sites
    - Returns DispatchResult (notified/failed counts) so callers and tests can
      observe isolation without parsing logs
    - Pending async subscriber tasks tracked in a set and drained on shutdown
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

Subscriber = Callable[[Any], Awaitable[None] | None]


@dataclass
class DispatchResult:
    """Outcome of a single publish call."""
    event_name: str
    subscribers_notified: int = 0
    subscribers_failed: int = 0
    failures: list[dict] = field(default_factory=list)


class EventBus:
    """Process-wide publish/subscribe channel."""

    def __init__(self) -> None:
        self._subscribers: dict[str, list[Subscriber]] = {}
        self._pending: set[asyncio.Task] = set()

    def subscribe(self, event_name: str, handler: Subscriber) -> None:
        """Register handler for future publishes of event_name."""
        if not callable(handler):
            raise TypeError(f"Subscriber must be callable, got {type(handler)}")
        self._subscribers.setdefault(_key(event_name), []).append(handler)
        logger.debug(
            f"Subscribed {_handler_name(handler)} to {event_name}",
            extra={"event_name": _key(event_name)},
        )

    def subscriber_count(self, event_name: str) -> int:
        return len(self._subscribers.get(_key(event_name), []))

    def publish(self, event_name: str, payload: Any) -> DispatchResult:
        """Invoke every subscriber of event_name with payload, isolating failures."""
        name = _key(event_name)
        result = DispatchResult(event_name=name)
        # Snapshot: handlers subscribed during dispatch wait for the next publish
        for handler in list(self._subscribers.get(name, [])):
            try:
                outcome = handler(payload)
                if inspect.isawaitable(outcome):
                    self._schedule(name, handler, outcome)
                result.subscribers_notified += 1
            except Exception as exc:
                result.subscribers_failed += 1
                result.failures.append({
                    "handler": _handler_name(handler),
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                })
                logger.error(
                    f"Subscriber {_handler_name(handler)} failed for {name}: {exc}",
                    exc_info=True,
                    extra={"event_name": name},
                )
        logger.debug(
            f"Dispatched {name}: {result.subscribers_notified} notified, "
            f"{result.subscribers_failed} failed",
            extra={"event_name": name},
        )
        return result

    def _schedule(
        self, name: str, handler: Subscriber, awaitable: Awaitable[None],
    ) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No running loop: the coroutine can never run
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            raise
        task = asyncio.ensure_future(awaitable, loop=loop)
        self._pending.add(task)
        task.add_done_callback(
            lambda t: self._on_task_done(name, handler, t),
        )

    def _on_task_done(
        self, name: str, handler: Subscriber, task: asyncio.Task,
    ) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                f"Async subscriber {_handler_name(handler)} failed for {name}: {exc}",
                exc_info=exc,
                extra={"event_name": name},
            )

    async def drain(self, timeout_seconds: float = 10.0) -> None:
        """Wait for in-flight async subscriber tasks to finish."""
        if not self._pending:
            return
        _, still_pending = await asyncio.wait(
            set(self._pending), timeout=timeout_seconds,
        )
        for task in still_pending:
            task.cancel()
        if still_pending:
            logger.warning(
                f"Cancelled {len(still_pending)} async subscriber(s) after "
                f"{timeout_seconds}s",
            )


def _key(event_name: str | Enum) -> str:
    return event_name.value if isinstance(event_name, Enum) else event_name


def _handler_name(handler: Subscriber) -> str:
    return getattr(handler, "__qualname__", repr(handler))
