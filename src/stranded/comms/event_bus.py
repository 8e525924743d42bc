"""EventBus — pub/sub for run lifecycle events.

Two kinds of subscriber share one ``publish()`` call:

  * Queue subscribers (``subscribe()``) — observers such as a HUD bridge or
    a telemetry recorder that drain at their own pace, possibly from
    another thread.  Each gets a bounded Queue; on overflow the oldest
    message is dropped so fresh phase changes are never lost behind
    high-frequency spawn traffic.

  * Topic handlers (``on()``) — in-process callbacks invoked synchronously
    inside ``publish()``, before it returns.  Used by in-process
    observers that must react within the same tick.

Message shape for queue subscribers is ``{"type": topic, "data": {...}}``;
``data`` is omitted when the publisher passes none.
"""

from __future__ import annotations

import queue
import threading
from collections import defaultdict
from typing import Any, Callable

from loguru import logger

Handler = Callable[[dict | None], Any]


class EventBus:
    """Thread-safe queue fan-out plus synchronous topic handlers."""

    QUEUE_SIZE = 100

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: list[queue.Queue] = []
        self._handlers: dict[str, list[Handler]] = defaultdict(list)
        self._stats: dict[str, int] = defaultdict(int)

    # -- Queue subscribers ----------------------------------------------------

    def subscribe(self, _filter: str | None = None) -> queue.Queue:
        """Subscribe to events. Returns a Queue that receives all events.

        The optional ``_filter`` parameter is accepted for API compatibility
        but is currently ignored; the caller must filter events itself.
        """
        q: queue.Queue = queue.Queue(maxsize=self.QUEUE_SIZE)
        with self._lock:
            self._subscribers.append(q)
        return q

    def unsubscribe(self, q: queue.Queue) -> None:
        with self._lock:
            try:
                self._subscribers.remove(q)
            except ValueError:
                pass

    # -- Topic handlers -------------------------------------------------------

    def on(self, topic: str, handler: Handler) -> None:
        """Register *handler* to be called synchronously for *topic*."""
        with self._lock:
            self._handlers[topic].append(handler)

    def off(self, topic: str, handler: Handler) -> None:
        with self._lock:
            try:
                self._handlers[topic].remove(handler)
            except ValueError:
                pass

    # -- Publishing -----------------------------------------------------------

    def publish(self, event_type: str, data: dict | None = None) -> None:
        msg: dict[str, Any] = {"type": event_type}
        if data is not None:
            msg["data"] = data
        with self._lock:
            self._stats[event_type] += 1
            subscribers = list(self._subscribers)
            handlers = list(self._handlers.get(event_type, ()))

        for q in subscribers:
            try:
                q.put_nowait(msg)
            except queue.Full:
                try:
                    q.get_nowait()
                except queue.Empty:
                    pass
                try:
                    q.put_nowait(msg)
                except queue.Full:
                    pass

        for handler in handlers:
            try:
                handler(data)
            except Exception:
                logger.exception(f"[EventBus] handler error for {event_type}")

    def stats(self) -> dict[str, int]:
        """Return cumulative publish counts by topic."""
        with self._lock:
            return dict(self._stats)

    def __repr__(self) -> str:
        return (f"EventBus(subscribers={len(self._subscribers)}, "
                f"topics={len(self._handlers)})")
