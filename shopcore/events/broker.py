"""
Typed in-process event broker.

Provides:
- Publish/subscribe over the closed ``EventKind`` catalog
- In-order synchronous dispatch with a per-listener error boundary
- Fire-and-continue scheduling for async listeners
- Soft cap warning for listener leaks
- One structured log record per publish

Example:
    broker = EventBroker()

    @broker.listener(EventKind.ORDER_CREATED)
    def on_order(payload: OrderCreated) -> None:
        queue.enqueue(payload.order_id)

    result = broker.publish(EventKind.ORDER_CREATED, OrderCreated(order_id="o1"))
    assert result.delivered == 1
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import inspect
import threading
from collections import Counter, defaultdict
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Generic, Iterator, TypeVar

from shopcore.events.catalog import EventKind
from shopcore.events.payloads import EventPayload, payload_type
from shopcore.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_LISTENERS = 20

P = TypeVar("P", bound=EventPayload)

# Listener: sync callable, or a callable returning an awaitable
Listener = Callable[[P], Any] | Callable[[P], Awaitable[Any]]


class PayloadTypeError(TypeError):
    """Raised when a payload does not match the kind it is published under."""

    def __init__(self, kind: EventKind | None, payload: object):
        self.kind = kind
        self.payload = payload
        if kind is None:
            message = f"{type(payload).__name__} is not bound to an event kind"
        else:
            expected = payload_type(kind).__name__
            message = f"Payload for '{kind.value}' must be {expected}, got {type(payload).__name__}"
        super().__init__(message)


def _listener_name(listener: Callable[..., Any]) -> str:
    name = getattr(listener, "__qualname__", None) or getattr(listener, "__name__", None)
    if name is None:
        return repr(listener)
    module = getattr(listener, "__module__", None)
    return f"{module}.{name}" if module else name


# =============================================================================
# Data classes
# =============================================================================


@dataclass(frozen=True)
class ListenerFailure:
    """A listener that raised during dispatch."""

    kind: EventKind
    listener: str
    error: BaseException

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "listener": self.listener,
            "error": f"{type(self.error).__name__}: {self.error}",
        }


@dataclass(frozen=True)
class DeliveryResult:
    """
    Outcome of one publish call.

    Attributes:
        kind: Published event kind
        invoked: Listeners called during dispatch
        delivered: Listeners that returned without raising
        deferred: Async listeners scheduled without waiting for completion
        failures: Listeners that raised

    A result is truthy when at least one listener was invoked.
    """

    kind: EventKind
    invoked: int = 0
    delivered: int = 0
    deferred: int = 0
    failures: tuple[ListenerFailure, ...] = ()

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def ok(self) -> bool:
        return not self.failures

    def __bool__(self) -> bool:
        return self.invoked > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "invoked": self.invoked,
            "delivered": self.delivered,
            "deferred": self.deferred,
            "failures": [f.to_dict() for f in self.failures],
        }


@dataclass(eq=False)
class _Entry:
    listener: Callable[[Any], Any]
    once: bool = False


@dataclass(frozen=True)
class Subscription(Generic[P]):
    """Handle for one registered listener."""

    broker: EventBroker = field(repr=False)
    kind: EventKind
    listener: Listener[P]

    def cancel(self) -> None:
        """Unsubscribe the listener. Safe to call more than once."""
        self.broker.unsubscribe(self.kind, self.listener)


# =============================================================================
# Event Broker
# =============================================================================


class EventBroker:
    """
    Process-local publish/subscribe broker for domain events.

    Listeners for a kind run in registration order on the publishing thread.
    A listener that raises is logged and recorded in the ``DeliveryResult``;
    it never stops later listeners and never propagates to the publisher.
    """

    def __init__(self, max_listeners: int = DEFAULT_MAX_LISTENERS):
        """
        Initialize event broker.

        Args:
            max_listeners: Soft cap on listeners per kind before a leak
                warning is logged (0 disables the warning)
        """
        if max_listeners < 0:
            raise ValueError("max_listeners must be >= 0")
        self._max_listeners = max_listeners
        self._registry: dict[EventKind, list[_Entry]] = defaultdict(list)
        self._warned: set[EventKind] = set()
        self._lock = threading.RLock()
        self._pending: set[asyncio.Task | concurrent.futures.Future] = set()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._loop_thread: threading.Thread | None = None
        self._published: Counter[EventKind] = Counter()
        self._failed: Counter[EventKind] = Counter()

    # -------------------------------------------------------------------------
    # Subscription
    # -------------------------------------------------------------------------

    @property
    def max_listeners(self) -> int:
        return self._max_listeners

    def set_max_listeners(self, max_listeners: int) -> None:
        """Change the per-kind soft cap (0 disables the warning)."""
        if max_listeners < 0:
            raise ValueError("max_listeners must be >= 0")
        with self._lock:
            self._max_listeners = max_listeners
            self._warned.clear()

    def subscribe(
        self,
        kind: EventKind | str,
        listener: Listener[P],
        *,
        once: bool = False,
    ) -> Subscription[P]:
        """
        Register a listener for a kind.

        Args:
            kind: Event kind from the catalog
            listener: Callable receiving the payload
            once: Cancel the subscription after its first dispatch

        Returns:
            Subscription handle

        Raises:
            UnknownEventKindError: If kind is not in the catalog
        """
        kind = EventKind.parse(kind)
        if not callable(listener):
            raise TypeError(f"listener must be callable, got {type(listener).__name__}")

        with self._lock:
            entries = self._registry[kind]
            entries.append(_Entry(listener=listener, once=once))
            count = len(entries)
            over_cap = (
                self._max_listeners > 0
                and count > self._max_listeners
                and kind not in self._warned
            )
            if over_cap:
                self._warned.add(kind)

        if over_cap:
            logger.warning(
                "event_listener_cap_exceeded",
                kind=kind.value,
                count=count,
                max_listeners=self._max_listeners,
            )

        logger.debug(
            "event_subscribed",
            kind=kind.value,
            listener=_listener_name(listener),
            once=once,
        )
        return Subscription(broker=self, kind=kind, listener=listener)

    def listener(
        self,
        kind: EventKind | str,
        *,
        once: bool = False,
    ) -> Callable[[Listener[P]], Listener[P]]:
        """
        Subscribe a function with a decorator.

        Usage:
            @broker.listener(EventKind.PRODUCT_LOW_STOCK)
            def on_low_stock(payload):
                ...
        """

        def decorator(fn: Listener[P]) -> Listener[P]:
            self.subscribe(kind, fn, once=once)
            return fn

        return decorator

    @contextmanager
    def subscribed(
        self,
        kind: EventKind | str,
        listener: Listener[P],
    ) -> Iterator[Subscription[P]]:
        """Keep a listener registered for the duration of a block."""
        subscription = self.subscribe(kind, listener)
        try:
            yield subscription
        finally:
            subscription.cancel()

    def unsubscribe(self, kind: EventKind | str, listener: Listener[P]) -> None:
        """
        Remove the first registration of a listener for a kind.

        Removing a listener that is not registered is a no-op.
        """
        kind = EventKind.parse(kind)
        with self._lock:
            entries = self._registry.get(kind)
            if not entries:
                return
            for index, entry in enumerate(entries):
                if entry.listener is listener:
                    del entries[index]
                    break
            else:
                return
            if len(entries) <= self._max_listeners:
                self._warned.discard(kind)

        logger.debug("event_unsubscribed", kind=kind.value, listener=_listener_name(listener))

    def clear(self, kind: EventKind | str | None = None) -> None:
        """
        Remove all listeners.

        Args:
            kind: Specific kind to clear, or None for all
        """
        with self._lock:
            if kind is None:
                self._registry.clear()
                self._warned.clear()
            else:
                kind = EventKind.parse(kind)
                self._registry.pop(kind, None)
                self._warned.discard(kind)

    def listener_count(self, kind: EventKind | str) -> int:
        kind = EventKind.parse(kind)
        with self._lock:
            return len(self._registry.get(kind, ()))

    def listeners(self, kind: EventKind | str) -> list[Callable[[Any], Any]]:
        """Snapshot of listeners for a kind, in dispatch order."""
        kind = EventKind.parse(kind)
        with self._lock:
            return [entry.listener for entry in self._registry.get(kind, ())]

    # -------------------------------------------------------------------------
    # Publishing
    # -------------------------------------------------------------------------

    def publish(self, kind: EventKind | str, payload: P) -> DeliveryResult:
        """
        Dispatch a payload to every listener of a kind.

        Args:
            kind: Event kind from the catalog
            payload: Instance of the payload class bound to kind

        Returns:
            Delivery outcome; zero listeners yields an empty result

        Raises:
            UnknownEventKindError: If kind is not in the catalog
            PayloadTypeError: If payload does not match kind
        """
        kind = EventKind.parse(kind)
        if not isinstance(payload, payload_type(kind)):
            raise PayloadTypeError(kind, payload)

        logger.info("event_published", kind=kind.value, payload=payload.to_dict())

        with self._lock:
            entries = self._registry.get(kind)
            snapshot = tuple(entries) if entries else ()
            for entry in snapshot:
                if entry.once:
                    entries.remove(entry)
            self._published[kind] += 1

        invoked = 0
        delivered = 0
        deferred = 0
        failures: list[ListenerFailure] = []

        for entry in snapshot:
            invoked += 1
            try:
                outcome = entry.listener(payload)
                if inspect.isawaitable(outcome):
                    self._defer(kind, entry.listener, outcome)
                    deferred += 1
                    continue
            except Exception as e:
                logger.exception(
                    "event_listener_failed",
                    kind=kind.value,
                    listener=_listener_name(entry.listener),
                )
                failures.append(ListenerFailure(kind, _listener_name(entry.listener), e))
                continue
            delivered += 1

        if failures:
            with self._lock:
                self._failed[kind] += len(failures)

        return DeliveryResult(
            kind=kind,
            invoked=invoked,
            delivered=delivered,
            deferred=deferred,
            failures=tuple(failures),
        )

    def emit(self, payload: EventPayload) -> DeliveryResult:
        """
        Publish a payload under the kind its class is bound to.

        Raises:
            PayloadTypeError: If the payload class is not bound to a kind
        """
        kind = getattr(type(payload), "kind", None)
        if not isinstance(kind, EventKind):
            raise PayloadTypeError(None, payload)
        return self.publish(kind, payload)

    # -------------------------------------------------------------------------
    # Async listeners
    # -------------------------------------------------------------------------

    def _defer(
        self,
        kind: EventKind,
        listener: Callable[..., Any],
        awaitable: Awaitable[Any],
    ) -> None:
        """
        Schedule an awaitable returned by a listener without waiting for it.

        Inside a running event loop the awaitable becomes a task on that loop.
        Otherwise it is submitted to the broker's background loop thread.
        """
        work = self._run_deferred(kind, _listener_name(listener), awaitable)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            future = asyncio.run_coroutine_threadsafe(work, self._background_loop())
        else:
            future = loop.create_task(work)

        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._discard_pending)

    async def _run_deferred(self, kind: EventKind, name: str, awaitable: Awaitable[Any]) -> None:
        try:
            await awaitable
        except Exception:
            with self._lock:
                self._failed[kind] += 1
            logger.exception("event_listener_task_failed", kind=kind.value, listener=name)

    def _discard_pending(self, future: Any) -> None:
        with self._lock:
            self._pending.discard(future)

    def _background_loop(self) -> asyncio.AbstractEventLoop:
        """Start the background loop thread on first use."""
        with self._lock:
            if self._loop is None:
                loop = asyncio.new_event_loop()
                thread = threading.Thread(
                    target=loop.run_forever,
                    name="event-broker-loop",
                    daemon=True,
                )
                thread.start()
                self._loop = loop
                self._loop_thread = thread
            return self._loop

    async def drain(self) -> None:
        """Wait for deferred listener work scheduled by earlier publishes."""
        while True:
            with self._lock:
                pending = [f for f in self._pending if not f.done()]
            if not pending:
                return
            await asyncio.gather(
                *(asyncio.wrap_future(f) if isinstance(f, concurrent.futures.Future) else f for f in pending),
                return_exceptions=True,
            )

    def close(self, timeout: float | None = None) -> None:
        """
        Wait for work on the background loop, then stop its thread.

        Tasks scheduled on a caller's own event loop are awaited with
        ``drain()`` instead. The background loop restarts on the next
        deferred listener.

        Args:
            timeout: Seconds to wait for outstanding work (None waits forever)
        """
        with self._lock:
            loop, thread = self._loop, self._loop_thread
            self._loop = None
            self._loop_thread = None
            background = [f for f in self._pending if isinstance(f, concurrent.futures.Future)]
        concurrent.futures.wait(background, timeout=timeout)
        if loop is None:
            return
        loop.call_soon_threadsafe(loop.stop)
        thread.join(timeout)
        if not thread.is_alive():
            loop.close()

    @property
    def pending(self) -> int:
        with self._lock:
            return sum(1 for f in self._pending if not f.done())

    # -------------------------------------------------------------------------
    # Stats
    # -------------------------------------------------------------------------

    def get_stats(self) -> dict[str, Any]:
        """Get event broker statistics."""
        with self._lock:
            subscriptions = {
                kind.value: len(entries) for kind, entries in self._registry.items() if entries
            }
            return {
                "kinds": len(subscriptions),
                "total_subscriptions": sum(subscriptions.values()),
                "subscriptions": subscriptions,
                "published": {kind.value: n for kind, n in self._published.items()},
                "failed": {kind.value: n for kind, n in self._failed.items()},
                "pending": sum(1 for t in self._pending if not t.done()),
                "max_listeners": self._max_listeners,
            }
