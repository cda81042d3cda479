from __future__ import annotations

"""Removal of installed bundles."""

import logging
import shutil
from pathlib import Path
from typing import Union

from .exceptions import (
    ArchiveNotFoundError,
    ExtractError,
    InvalidExtensionError,
    file_operation_error_from_os,
)

__all__ = ["PluginRemover"]


class PluginRemover:
    """Deletes a bundle directory and everything below it.

    Removal is path-based: the caller passes the ``Plugin.path`` obtained
    from a scan. A failure part-way through the tree is still reported as an
    error, and the directory may be partially deleted at that point.
    """

    def __init__(self) -> None:
        self._logger = logging.getLogger(f"{__name__}.PluginRemover")

    def remove(self, plugin_path: Union[str, Path]) -> None:
        """Remove the bundle directory at *plugin_path*.

        Raises:
            ArchiveNotFoundError: nothing exists at *plugin_path*.
            InvalidExtensionError: *plugin_path* is not a directory; nothing
                is deleted.
            OperationPermissionError: the OS denied the deletion.
            ExtractError: *plugin_path* is a symbolic link, which is never
                followed or unlinked; or any other deletion failure.
        """
        plugin_path = Path(plugin_path)
        if plugin_path.is_symlink():
            raise ExtractError("Plugin directory is a symbolic link", path=plugin_path)
        if not plugin_path.exists():
            raise ArchiveNotFoundError(path=plugin_path)
        if not plugin_path.is_dir():
            raise InvalidExtensionError("Not a valid plugin directory", path=plugin_path)

        self._logger.info("Removing plugin: %s", plugin_path)
        try:
            shutil.rmtree(plugin_path)
        except OSError as exc:
            raise file_operation_error_from_os(exc, plugin_path) from exc

        self._logger.info("Plugin removal completed: %s", plugin_path)
