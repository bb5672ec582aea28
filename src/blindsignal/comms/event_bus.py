"""PingBus -- thread-safe fan-out of inbound pings to local subscribers.

Every channel backend owns one PingBus.  Each subscriber gets its own
bounded queue, so a slow or crashing subscriber only ever delays itself:
delivery is put_nowait into every queue, dropping that queue's oldest ping
when it is full.

A Subscription is drained either from the host tick (``drain``) or from a
listener thread (``drain`` with a timeout).  ``close`` waits for any handler
call in flight on that subscription, so once it returns no further ping is
observed through it.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Callable

from blindsignal.events import AcousticEvent

logger = logging.getLogger("blindsignal.bus")

DEFAULT_QUEUE_SIZE = 100


class Subscription:
    """One subscriber's inbound ping queue."""

    def __init__(self, maxsize: int = DEFAULT_QUEUE_SIZE) -> None:
        self._queue: queue.Queue[AcousticEvent] = queue.Queue(maxsize=maxsize)
        self._closed = False
        # Held while handlers run; close() takes it to wait out in-flight work.
        # Re-entrant so a handler may close its own subscription.
        self._handling = threading.RLock()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def maxsize(self) -> int:
        return self._queue.maxsize

    def pending(self) -> int:
        return self._queue.qsize()

    def offer(self, event: AcousticEvent) -> None:
        """Enqueue without blocking. Drops the oldest ping when full."""
        if self._closed:
            return
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                pass
            try:
                self._queue.put_nowait(event)
            except queue.Full:
                pass

    def drain(
        self,
        handler: Callable[[AcousticEvent], object],
        timeout: float = 0.0,
    ) -> int:
        """Pass every queued ping to ``handler``. Returns how many were handled.

        With ``timeout > 0`` waits up to that long for the first ping.
        A handler that raises is logged and the remaining pings still go out.
        """
        if self._closed:
            return 0
        first: AcousticEvent | None = None
        if timeout > 0:
            try:
                first = self._queue.get(timeout=timeout)
            except queue.Empty:
                return 0

        handled = 0
        with self._handling:
            while not self._closed:
                if first is not None:
                    event, first = first, None
                else:
                    try:
                        event = self._queue.get_nowait()
                    except queue.Empty:
                        break
                try:
                    handler(event)
                except Exception:
                    logger.exception("Ping handler failed for %s", event)
                handled += 1
        return handled

    def close(self) -> None:
        """Stop delivery. Idempotent; returns after any running handler finishes."""
        self._closed = True
        with self._handling:
            while True:
                try:
                    self._queue.get_nowait()
                except queue.Empty:
                    break


class PingBus:
    """Simple thread-safe pub/sub for pushing pings to local subscribers."""

    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        self._lock = threading.Lock()
        self._subscribers: list[Subscription] = []
        self._queue_size = queue_size
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self) -> Subscription:
        sub = Subscription(maxsize=self._queue_size)
        with self._lock:
            if self._closed:
                sub.close()
            else:
                self._subscribers.append(sub)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            try:
                self._subscribers.remove(sub)
            except ValueError:
                pass
        sub.close()

    def publish(self, event: AcousticEvent) -> None:
        with self._lock:
            if self._closed:
                return
            targets = list(self._subscribers)
        for sub in targets:
            sub.offer(event)

    def close(self) -> None:
        """Close every subscription. Further publishes are ignored."""
        with self._lock:
            self._closed = True
            targets = list(self._subscribers)
            self._subscribers.clear()
        for sub in targets:
            sub.close()
