from __future__ import annotations

"""Discovery of installed bundles under the extension root.

Each immediate subdirectory of the root that contains ``CSXS/manifest.xml``
is a plugin candidate. Candidates whose manifest cannot be parsed are
skipped with a warning; the scan itself only fails when the root cannot be
read.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional, Union

from .exceptions import (
    DirectoryNotFoundError,
    PluginScanError,
    ScanPermissionError,
)
from .manifest import MANIFEST_RELATIVE_PATH, parse_manifest_file
from .models import Plugin, PluginType

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_EXTENSION_ROOT",
    "PluginScanner",
    "calculate_folder_size",
    "folder_size_bytes",
    "format_size",
    "is_plugin_candidate",
]

DEFAULT_EXTENSION_ROOT = Path("/Library/Application Support/Adobe/CEP/extensions")

SIZE_PLACEHOLDER = "Unknown"

_KB = 1024
_MB = 1024 * 1024


def format_size(num_bytes: int) -> str:
    """Format a byte count as ``B``, ``KB`` or ``MB`` (base 1024, one decimal)."""
    if num_bytes < _KB:
        return f"{num_bytes} B"
    if num_bytes < _MB:
        return f"{num_bytes / _KB:.1f} KB"
    return f"{num_bytes / _MB:.1f} MB"


def folder_size_bytes(path: Union[str, Path]) -> int:
    """Sum the sizes of all regular files below *path*.

    Symbolic links are neither followed nor counted. Any OS error is
    propagated to the caller.
    """
    total = 0
    with os.scandir(path) as entries:
        for entry in entries:
            if entry.is_file(follow_symlinks=False):
                total += entry.stat(follow_symlinks=False).st_size
            elif entry.is_dir(follow_symlinks=False):
                total += folder_size_bytes(entry.path)
    return total


def calculate_folder_size(path: Union[str, Path]) -> str:
    """Human-readable size of *path*, or ``"Unknown"`` if it cannot be read."""
    try:
        return format_size(folder_size_bytes(path))
    except OSError as exc:
        logger.warning("Failed to calculate size for %s: %s", path, exc)
        return SIZE_PLACEHOLDER


def is_plugin_candidate(plugin_dir: Path) -> bool:
    try:
        return (plugin_dir / MANIFEST_RELATIVE_PATH).is_file()
    except OSError as exc:
        logger.warning("Cannot inspect plugin candidate %s: %s", plugin_dir, exc)
        return False


class PluginScanner:
    """Enumerates the extension root and builds :class:`Plugin` values."""

    def __init__(self, extension_root: Optional[Union[str, Path]] = None) -> None:
        self.extension_root = Path(extension_root).absolute() if extension_root else DEFAULT_EXTENSION_ROOT
        self._logger = logging.getLogger(f"{__name__}.PluginScanner")

    def scan(self) -> List[Plugin]:
        """Return every valid bundle currently installed, sorted by directory name.

        A missing extension root means nothing is installed yet and yields an
        empty list.

        Raises:
            ScanPermissionError: the root exists but cannot be listed.
            DirectoryNotFoundError: the root is not a directory or vanished
                while being listed.
        """
        root = self.extension_root
        try:
            with os.scandir(root) as it:
                candidates = sorted(Path(entry.path) for entry in it if entry.is_dir())
        except FileNotFoundError:
            self._logger.warning("Extension root not found: %s", root)
            return []
        except PermissionError as exc:
            raise ScanPermissionError(path=root, cause=exc) from exc
        except OSError as exc:
            raise DirectoryNotFoundError(path=root, cause=exc) from exc

        plugins: List[Plugin] = []
        for plugin_dir in candidates:
            if not is_plugin_candidate(plugin_dir):
                continue
            plugin = self._build_plugin(plugin_dir)
            if plugin is not None:
                plugins.append(plugin)

        self._logger.debug("Scanned %s: %d plugin(s)", root, len(plugins))
        return plugins

    def _build_plugin(self, plugin_dir: Path) -> Optional[Plugin]:
        try:
            manifest = parse_manifest_file(plugin_dir / MANIFEST_RELATIVE_PATH)
        except PluginScanError as exc:
            self._logger.warning("Failed to parse manifest for %s: %s", plugin_dir, exc)
            return None

        return Plugin(
            name=manifest.name,
            version=manifest.version,
            size=calculate_folder_size(plugin_dir),
            path=plugin_dir,
            kind=PluginType.classify(manifest.bundle_id),
        )
