from __future__ import annotations

"""Collaborator interface between the plugin core and the view layer.

PluginService exposes scan / install / remove as coroutines that run the
filesystem work off the event loop, plus fire-and-forget ``submit_*``
variants for UI callbacks. The submitted variants report their outcome
only through the shared context: exactly one notification per action and,
on success, a refresh-token bump.
"""

import asyncio
import logging
from pathlib import Path
from typing import Callable, List, Optional, Set, Union

from .context import AppContext
from .notifications import Notification, NotificationCategory
from .plugins.exceptions import (
    DialogCancelledError,
    FileOperationError,
    InvalidExtensionError,
    PluginScanError,
)
from .plugins.installer import ArchiveInstaller, is_valid_archive_extension
from .plugins.models import Plugin
from .plugins.remover import PluginRemover
from .plugins.scanner import PluginScanner
from ..version import get_app_version

logger = logging.getLogger(__name__)

__all__ = ["PluginService"]

INSTALL_SUCCESS_MESSAGE = "Plugin installed successfully!"
REMOVE_SUCCESS_MESSAGE = "Plugin removed successfully!"

PathLike = Union[str, Path]
ArchivePicker = Callable[[], Optional[PathLike]]


class PluginService:
    """Entry point used by the view layer for every plugin action."""

    def __init__(self, context: Optional[AppContext] = None,
                 extension_root: Optional[PathLike] = None,
                 scanner: Optional[PluginScanner] = None,
                 installer: Optional[ArchiveInstaller] = None,
                 remover: Optional[PluginRemover] = None) -> None:
        self.context = context or AppContext()
        self.scanner = scanner or PluginScanner(extension_root)
        self.installer = installer or ArchiveInstaller(extension_root)
        self.remover = remover or PluginRemover()
        self._tasks: Set[asyncio.Task] = set()
        self._logger = logging.getLogger(f"{__name__}.PluginService")

    # -------------------------------------------------------------------------
    # Core operations
    # -------------------------------------------------------------------------

    async def scan(self) -> List[Plugin]:
        """Scan the extension root. Raises :class:`PluginScanError`."""
        return await asyncio.to_thread(self.scanner.scan)

    async def scan_or_empty(self) -> List[Plugin]:
        """Scan, logging a scan-level failure and returning no plugins."""
        try:
            return await self.scan()
        except PluginScanError as exc:
            self._logger.error("Failed to scan plugins: %s", exc)
            return []

    async def install(self, archive_path: PathLike) -> Path:
        """Install an archive. Raises :class:`FileOperationError`."""
        return await asyncio.to_thread(self.installer.install, archive_path)

    async def remove(self, plugin_path: PathLike) -> None:
        """Remove a bundle directory. Raises :class:`FileOperationError`."""
        await asyncio.to_thread(self.remover.remove, plugin_path)

    def notify(self, text: str, category: NotificationCategory) -> None:
        self.context.notifications.notify(text, category)

    # -------------------------------------------------------------------------
    # Reported operations
    # -------------------------------------------------------------------------

    async def install_and_report(self, archive_path: PathLike) -> Optional[Path]:
        """Install, then post one notification and refresh on success."""
        try:
            target_dir = await self.install(archive_path)
        except Exception as exc:
            await self._report_failure("install", exc)
            return None

        self.context.mark_installed(target_dir)
        await self.context.notifications.post(INSTALL_SUCCESS_MESSAGE, NotificationCategory.SUCCESS)
        self.context.refresh.bump()
        return target_dir

    async def remove_and_report(self, plugin_path: PathLike) -> bool:
        """Remove, then post one notification and refresh on success."""
        try:
            await self.remove(plugin_path)
        except Exception as exc:
            await self._report_failure("remove", exc)
            return False

        self._logger.info("Plugin removed successfully: %s", plugin_path)
        await self.context.notifications.post(REMOVE_SUCCESS_MESSAGE, NotificationCategory.SUCCESS)
        self.context.refresh.bump()
        return True

    def submit_install(self, archive_path: PathLike) -> asyncio.Task:
        return self._submit(self.install_and_report(archive_path), "install")

    def submit_remove(self, plugin_path: PathLike) -> asyncio.Task:
        return self._submit(self.remove_and_report(plugin_path), "remove")

    def install_selected(self, picker: ArchivePicker) -> Optional[asyncio.Task]:
        """Ask *picker* for an archive and install it in the background.

        A cancelled selection (``None`` or :class:`DialogCancelledError`) is
        not an error: nothing is posted and no task is started.
        """
        try:
            selected = picker()
        except DialogCancelledError:
            selected = None
        if selected is None:
            self._logger.debug("Archive selection cancelled")
            return None

        if not is_valid_archive_extension(selected):
            self.notify(self._failure_message("install", InvalidExtensionError(path=selected)),
                        NotificationCategory.ERROR)
            return None

        self._logger.info("Selected ZXP file: %s", selected)
        return self.submit_install(selected)

    async def drain(self) -> None:
        """Wait for every submitted background task to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # -------------------------------------------------------------------------
    # View helpers
    # -------------------------------------------------------------------------

    @property
    def refresh_token(self) -> int:
        return self.context.refresh.value

    @property
    def current_notification(self) -> Notification:
        return self.context.notifications.current

    def status_text(self, plugin_count: Optional[int]) -> str:
        """Status bar text: the live message, else the installed-plugin count."""
        current = self.context.notifications.current
        if not current.is_cleared:
            return current.text
        if plugin_count is None:
            return f"ZXP Manager {get_app_version()} | Loading..."
        return f"ZXP Manager {get_app_version()} | Plugins installed: {plugin_count}"

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _submit(self, coro, action: str) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro, name=f"plugin-{action}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @staticmethod
    def _failure_message(action: str, exc: BaseException) -> str:
        reason = exc.message if isinstance(exc, FileOperationError) else str(exc)
        return f"Failed to {action} plugin: {reason}"

    async def _report_failure(self, action: str, exc: BaseException) -> None:
        message = self._failure_message(action, exc)
        if isinstance(exc, FileOperationError):
            self._logger.error("%s (%s)", message, exc)
        else:
            self._logger.exception("Unexpected error during plugin %s", action)
        await self.context.notifications.post(message, NotificationCategory.ERROR)
