"""Signal bridge — subject-scoped publish/subscribe between connections.

When an interactive (non-streaming) request carries signals, they are
published on the visitor's session subject and, when the signals name a
tab, on that tab's subject. Open live streams subscribe to the same
subjects and re-render with the merged signals.

Subjects::

    <namespace>.session.<session_id>
    <namespace>.tab.<tab_id>

``SubjectBus`` is the in-process implementation. Anything matching the
``Bridge`` protocol (for example an adapter over an external broker) can
be passed to ``Playground`` instead.

Free-threading safety:
    - SubjectBus uses a Lock to protect the subject -> inbox map
    - Each subscriber owns its Inbox; delivery from another thread is
      handed to the inbox's event loop with ``call_soon_threadsafe``
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from typing import Protocol

from dsplay.errors import BridgeError
from dsplay.signals import Signals

logger = logging.getLogger("dsplay.bridge")

# Pending payloads per subscriber before new ones are dropped
INBOX_SIZE = 64


def session_subject(namespace: str, session_id: str) -> str:
    return f"{namespace}.session.{session_id}"


def tab_subject(namespace: str, tab_id: str) -> str:
    return f"{namespace}.tab.{tab_id}"


class Inbox:
    """Bounded queue of raw payloads for one live connection.

    Must be created inside the event loop that will read it.
    """

    __slots__ = ("_loop", "_queue")

    def __init__(self, maxsize: int = INBOX_SIZE) -> None:
        self._loop = asyncio.get_running_loop()
        self._queue: asyncio.Queue[bytes] = asyncio.Queue(maxsize=maxsize)

    def deliver(self, payload: bytes) -> None:
        """Hand *payload* to the reader; safe to call from any thread."""
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            self._put(payload)
        else:
            self._loop.call_soon_threadsafe(self._put, payload)

    def _put(self, payload: bytes) -> None:
        try:
            self._queue.put_nowait(payload)
        except asyncio.QueueFull:
            # Slow consumer: drop rather than block the publisher
            logger.warning("Inbox full, dropping bridge message")

    async def get(self) -> bytes:
        return await self._queue.get()


class Subscription(Protocol):
    def unsubscribe(self) -> None: ...


class Bridge(Protocol):
    """What the dispatcher and live engine need from a pub/sub transport."""

    def publish(self, subject: str, payload: bytes) -> None: ...

    def subscribe(self, subject: str, inbox: Inbox) -> Subscription: ...


class _BusSubscription:
    __slots__ = ("_bus", "_inbox", "_subject")

    def __init__(self, bus: SubjectBus, subject: str, inbox: Inbox) -> None:
        self._bus = bus
        self._subject = subject
        self._inbox = inbox

    def unsubscribe(self) -> None:
        self._bus._remove(self._subject, self._inbox)


class SubjectBus:
    """In-process subject-keyed broadcast.

    Every inbox subscribed to a subject receives each payload published on
    it. Publishing to a subject without subscribers is a no-op.
    """

    __slots__ = ("_closed", "_lock", "_subscribers")

    def __init__(self) -> None:
        self._subscribers: dict[str, set[Inbox]] = {}
        self._lock = threading.Lock()
        self._closed = False

    def publish(self, subject: str, payload: bytes) -> None:
        """Broadcast *payload* to every inbox on *subject*.

        Raises:
            BridgeError: If the bus has been closed.
        """
        with self._lock:
            if self._closed:
                msg = f"bridge closed; cannot publish to {subject}"
                raise BridgeError(msg)
            inboxes = set(self._subscribers.get(subject, ()))
        for inbox in inboxes:
            inbox.deliver(payload)

    def subscribe(self, subject: str, inbox: Inbox) -> Subscription:
        """Register *inbox* for *subject* until ``unsubscribe()``.

        Raises:
            BridgeError: If the bus has been closed.
        """
        with self._lock:
            if self._closed:
                msg = f"bridge closed; cannot subscribe to {subject}"
                raise BridgeError(msg)
            self._subscribers.setdefault(subject, set()).add(inbox)
        return _BusSubscription(self, subject, inbox)

    def subscriber_count(self, subject: str) -> int:
        with self._lock:
            return len(self._subscribers.get(subject, ()))

    def _remove(self, subject: str, inbox: Inbox) -> None:
        with self._lock:
            inboxes = self._subscribers.get(subject)
            if inboxes is None:
                return
            inboxes.discard(inbox)
            if not inboxes:
                del self._subscribers[subject]

    def close(self) -> None:
        """Refuse further publishes and subscriptions; forget all subscribers."""
        with self._lock:
            self._closed = True
            self._subscribers.clear()


def publish_signals(bridge: Bridge, namespace: str, session_id: str, signals: Signals) -> None:
    """Publish *signals* to the session subject and, if named, the tab subject.

    Failures are logged; publishing never fails the request.
    """
    try:
        payload = signals.to_json()
    except (TypeError, ValueError) as exc:
        logger.warning("Failed to serialize signals for bridge publish: %s", exc)
        return

    subjects = [session_subject(namespace, session_id)]
    if signals.tab_id is not None:
        subjects.append(tab_subject(namespace, signals.tab_id))
    for subject in subjects:
        try:
            bridge.publish(subject, payload)
        except BridgeError as exc:
            logger.warning("Bridge publish error (%s): %s", subject, exc)


def subscribe_all(bridge: Bridge, subjects: list[str], inbox: Inbox) -> list[Subscription]:
    """Subscribe *inbox* to each subject; log and skip the ones that fail."""
    subscriptions: list[Subscription] = []
    for subject in subjects:
        try:
            subscriptions.append(bridge.subscribe(subject, inbox))
        except BridgeError as exc:
            logger.warning("Bridge subscribe error (%s): %s", subject, exc)
    return subscriptions


def unsubscribe_all(subscriptions: list[Subscription]) -> None:
    for subscription in subscriptions:
        with contextlib.suppress(BridgeError):
            subscription.unsubscribe()
