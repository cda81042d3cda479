from __future__ import annotations

"""Application context shared between the core and the view layer.

The AppContext owns the process-wide reactive state: the notification
slot, the refresh token and the "last installed" marker. The view layer
reads or subscribes to these values; the core writes them.
"""

import logging
from pathlib import Path
from typing import Callable, List, Optional

from .notifications import NotificationCenter

logger = logging.getLogger(__name__)

__all__ = ["AppContext", "RefreshToken", "get_app_context", "set_app_context"]


class RefreshToken:
    """Opaque change counter that invalidates cached scan results.

    Only a change of :attr:`value` is meaningful; compare the value you last
    rendered with against the current one, or subscribe.
    """

    def __init__(self) -> None:
        self._value = 0
        self._subscribers: List[Callable[[int], None]] = []

    @property
    def value(self) -> int:
        return self._value

    def bump(self) -> int:
        self._value += 1
        logger.debug("Refresh token bumped to %d", self._value)
        for callback in list(self._subscribers):
            try:
                callback(self._value)
            except Exception:
                logger.exception("Refresh subscriber %r failed", callback)
        return self._value

    def subscribe(self, callback: Callable[[int], None]) -> Callable[[], None]:
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe


class AppContext:
    """Long-lived holder of the shared state objects."""

    def __init__(self, notifications: Optional[NotificationCenter] = None,
                 refresh: Optional[RefreshToken] = None) -> None:
        self.notifications = notifications or NotificationCenter()
        self.refresh = refresh or RefreshToken()
        self._last_installed: Optional[Path] = None

    @property
    def last_installed(self) -> Optional[Path]:
        return self._last_installed

    def mark_installed(self, path: Path) -> None:
        self._last_installed = path

    def consume_last_installed(self) -> Optional[Path]:
        """Return the most recently installed path once, then forget it."""
        path, self._last_installed = self._last_installed, None
        return path


_global_app_context: Optional[AppContext] = None


def set_app_context(context: Optional[AppContext]) -> None:
    """Set the global application context (startup code only)."""
    global _global_app_context
    _global_app_context = context
    logger.info("Global AppContext set")


def get_app_context() -> Optional[AppContext]:
    return _global_app_context
