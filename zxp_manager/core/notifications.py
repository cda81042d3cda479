from __future__ import annotations

"""Transient, single-slot status messages.

NotificationCenter keeps exactly one live message. Posting a new message
overwrites the slot immediately and supersedes the expiry timer of the
previous one; the superseded timer never clears the slot. Each timer is a
task racing ``asyncio.sleep`` against a per-message cancellation event.

All slot changes happen under one ``asyncio.Lock`` so that two posts can
never both believe they own the active timer.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional, Set

logger = logging.getLogger(__name__)

__all__ = [
    "CLEARED",
    "DEFAULT_DURATIONS",
    "Notification",
    "NotificationCategory",
    "NotificationCenter",
]


class NotificationCategory(Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"
    NONE = "none"


# Display time per category, in time units (seconds by default).
DEFAULT_DURATIONS: Dict[NotificationCategory, float] = {
    NotificationCategory.SUCCESS: 3.0,
    NotificationCategory.ERROR: 4.0,
    NotificationCategory.INFO: 5.0,
}


@dataclass(frozen=True)
class Notification:
    text: str
    category: NotificationCategory

    @property
    def is_cleared(self) -> bool:
        return self.category is NotificationCategory.NONE


CLEARED = Notification("", NotificationCategory.NONE)

Subscriber = Callable[[Notification], None]


class NotificationCenter:
    """Owner of the process-wide notification slot.

    Readers poll :attr:`current` or register a callback with
    :meth:`subscribe`; callbacks run synchronously on every slot change.

    Args:
        durations: Per-category display time, merged over
            :data:`DEFAULT_DURATIONS`.
        time_unit: Seconds per duration unit. Tests shrink this to keep
            expiry fast.
    """

    def __init__(self, durations: Optional[Mapping[NotificationCategory, float]] = None,
                 time_unit: float = 1.0) -> None:
        self._durations = dict(DEFAULT_DURATIONS)
        if durations:
            self._durations.update(durations)
        self._time_unit = time_unit

        self._current: Notification = CLEARED
        self._lock = asyncio.Lock()
        self._timer: Optional[asyncio.Task] = None
        self._cancel_signal: Optional[asyncio.Event] = None
        self._subscribers: List[Subscriber] = []
        self._pending_posts: Set[asyncio.Task] = set()

    @classmethod
    def from_config(cls, durations: Mapping[str, float], time_unit: float = 1.0) -> "NotificationCenter":
        """Build a center from ``{"success": 3, ...}`` style configuration."""
        parsed: Dict[NotificationCategory, float] = {}
        for key, value in durations.items():
            try:
                parsed[NotificationCategory(key)] = value
            except ValueError:
                logger.warning("Unknown notification category in config: %s", key)
        return cls(parsed, time_unit=time_unit)

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------
    @property
    def current(self) -> Notification:
        return self._current

    def duration_for(self, category: NotificationCategory) -> float:
        """Seconds a message of *category* stays visible."""
        return self._durations.get(category, 0.0) * self._time_unit

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register *callback*; returns a function that unregisters it."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Write side
    # ------------------------------------------------------------------
    async def post(self, text: str, category: NotificationCategory) -> None:
        """Show *text* now, superseding whatever is displayed.

        Posting with :attr:`NotificationCategory.NONE` clears the slot.
        """
        async with self._lock:
            self._supersede_timer()
            if category is NotificationCategory.NONE:
                self._set(CLEARED)
                return

            self._set(Notification(text, category))
            signal = asyncio.Event()
            self._cancel_signal = signal
            self._timer = asyncio.create_task(
                self._expire(self.duration_for(category), signal),
                name=f"notification-expiry-{category.value}",
            )

    def notify(self, text: str, category: NotificationCategory) -> asyncio.Task:
        """Fire-and-forget :meth:`post` from synchronous code on the loop.

        Posts are served in the order they were issued because tasks start
        in creation order and the slot lock is FIFO.
        """
        task = asyncio.get_running_loop().create_task(self.post(text, category))
        self._pending_posts.add(task)
        task.add_done_callback(self._pending_posts.discard)
        return task

    async def clear(self) -> None:
        await self.post("", NotificationCategory.NONE)

    async def aclose(self) -> None:
        """Cancel the pending expiry timer, leaving the slot as it is."""
        if self._pending_posts:
            await asyncio.gather(*self._pending_posts, return_exceptions=True)
        async with self._lock:
            timer = self._timer
            self._supersede_timer()
        if timer is not None:
            await asyncio.gather(timer, return_exceptions=True)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _supersede_timer(self) -> None:
        # Caller holds self._lock.
        if self._cancel_signal is not None:
            self._cancel_signal.set()
        self._cancel_signal = None
        self._timer = None

    def _set(self, notification: Notification) -> None:
        self._current = notification
        for callback in list(self._subscribers):
            try:
                callback(notification)
            except Exception:
                logger.exception("Notification subscriber %r failed", callback)

    async def _expire(self, duration: float, signal: asyncio.Event) -> None:
        sleeper = asyncio.ensure_future(asyncio.sleep(duration))
        cancelled = asyncio.ensure_future(signal.wait())
        try:
            await asyncio.wait({sleeper, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for waiter in (sleeper, cancelled):
                if not waiter.done():
                    waiter.cancel()

        if signal.is_set():
            return

        async with self._lock:
            # A post may have superseded us while we waited for the lock.
            if signal.is_set() or self._cancel_signal is not signal:
                return
            self._cancel_signal = None
            self._timer = None
            self._set(CLEARED)
