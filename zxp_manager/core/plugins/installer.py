from __future__ import annotations

"""Installation of ``.zxp`` archives into the extension root.

Provides the ArchiveInstaller class that validates a packaged bundle,
derives its install directory from the embedded manifest and unpacks every
entry into that directory. Re-installing the same bundle overwrites files
in place; nothing is backed up or rolled back.
"""

import logging
import re
import shutil
import zipfile
import zlib
from pathlib import Path, PurePosixPath
from typing import List, Optional, Tuple, Union

from .exceptions import (
    ArchiveNotFoundError,
    ExtractError,
    InvalidExtensionError,
    InvalidZipError,
    OperationPermissionError,
    PluginScanError,
    file_operation_error_from_os,
)
from .manifest import MANIFEST_RELATIVE_PATH, parse_manifest
from .scanner import DEFAULT_EXTENSION_ROOT

logger = logging.getLogger(__name__)

__all__ = [
    "ARCHIVE_EXTENSION",
    "ArchiveInstaller",
    "install_target_name",
    "is_valid_archive_extension",
]

ARCHIVE_EXTENSION = ".zxp"

# Panel-scoped bundle ids look like "com.example.tool.panel.main"; only the
# part before the marker names the install directory.
PANEL_MARKER = ".panel"

_DRIVE_RE = re.compile(r"^[A-Za-z]:")

# Errors zipfile can raise while reading a damaged or unsupported member.
_MEMBER_READ_ERRORS = (zipfile.BadZipFile, zlib.error, RuntimeError, NotImplementedError, EOFError)

# An archive entry, its destination relative to the bundle directory, and
# whether it names a directory.
_Member = Tuple[zipfile.ZipInfo, PurePosixPath, bool]


def is_valid_archive_extension(path: Union[str, Path]) -> bool:
    """Return True if *path* ends in ``.zxp`` (any case)."""
    return Path(path).suffix.lower() == ARCHIVE_EXTENSION


def install_target_name(bundle_id: str) -> str:
    """Directory name for a bundle: its id truncated at the first ``.panel``.

    Raises:
        InvalidZipError: the resulting name is empty or is not a single,
            plain path component.
    """
    name = bundle_id.split(PANEL_MARKER, 1)[0]
    if not name or name in (".", "..") or "/" in name or "\\" in name:
        raise InvalidZipError(f"Unusable bundle identifier: {bundle_id!r}")
    return name


def _entry_parts(entry_name: str) -> List[str]:
    """Split a zip entry name into path segments, rejecting traversal.

    Raises:
        ExtractError: the entry is absolute or has a ``..`` segment.
    """
    normalized = entry_name.replace("\\", "/")
    if normalized.startswith("/") or _DRIVE_RE.match(normalized):
        logger.warning("Rejecting absolute archive entry: %r", entry_name)
        raise ExtractError(f"Archive entry has an absolute path: {entry_name!r}")
    parts = [part for part in normalized.split("/") if part not in ("", ".")]
    if ".." in parts:
        logger.warning("Rejecting traversing archive entry: %r", entry_name)
        raise ExtractError(f"Archive entry escapes the install directory: {entry_name!r}")
    return parts


class ArchiveInstaller:
    """Validates and unpacks plugin archives under the extension root."""

    def __init__(self, extension_root: Optional[Union[str, Path]] = None) -> None:
        self.extension_root = Path(extension_root).absolute() if extension_root else DEFAULT_EXTENSION_ROOT
        self._logger = logging.getLogger(f"{__name__}.ArchiveInstaller")

    # -------------------------------------------------------------------------
    # Public Installation API
    # -------------------------------------------------------------------------

    def install(self, archive_path: Union[str, Path]) -> Path:
        """Install the archive at *archive_path* and return the bundle directory.

        Raises:
            ArchiveNotFoundError: the archive does not exist.
            InvalidExtensionError: the file is not a ``.zxp``.
            InvalidZipError: the archive cannot be opened, has no usable
                ``CSXS/manifest.xml`` or declares an unusable bundle id.
            OperationPermissionError: the install directory cannot be
                created or written for lack of permission.
            ExtractError: any other failure while writing the bundle,
                including entries that would escape the install directory.
        """
        archive_path = Path(archive_path)
        if not archive_path.exists():
            raise ArchiveNotFoundError(path=archive_path)
        if not is_valid_archive_extension(archive_path):
            raise InvalidExtensionError(path=archive_path)

        self._logger.info("Installing ZXP file: %s", archive_path)

        try:
            archive = zipfile.ZipFile(archive_path, "r")
        except (zipfile.BadZipFile, OSError) as exc:
            raise InvalidZipError(path=archive_path, cause=exc) from exc

        with archive:
            target_name = self._read_target_name(archive, archive_path)
            target_dir = self.extension_root / target_name
            self._logger.info("Installing to directory: %s", target_dir)

            members = self._plan_extraction(archive)
            self._create_target_dir(target_dir)
            self._extract_members(archive, members, target_dir)

        self._logger.info("ZXP installation completed for: %s", target_name)
        return target_dir

    # -------------------------------------------------------------------------
    # Installation Steps
    # -------------------------------------------------------------------------

    def _read_target_name(self, archive: zipfile.ZipFile, archive_path: Path) -> str:
        manifest_entry = str(MANIFEST_RELATIVE_PATH)
        try:
            raw = archive.read(manifest_entry)
        except KeyError as exc:
            raise InvalidZipError(
                f"Archive has no {manifest_entry}", path=archive_path, cause=exc
            ) from exc
        except _MEMBER_READ_ERRORS + (OSError,) as exc:
            raise InvalidZipError(path=archive_path, cause=exc) from exc

        try:
            manifest = parse_manifest(raw)
        except PluginScanError as exc:
            # The archive is at fault, not the manifest parser.
            raise InvalidZipError(path=archive_path, cause=exc) from exc

        return install_target_name(manifest.bundle_id)

    def _plan_extraction(self, archive: zipfile.ZipFile) -> List[_Member]:
        """Map every entry to its relative destination before touching disk.

        A trailing separator marks a directory entry; archives built on
        Windows may use a backslash, which ``ZipInfo.is_dir`` does not see.
        """
        members = []
        for info in archive.infolist():
            parts = _entry_parts(info.filename)
            if parts:
                is_dir = info.filename.replace("\\", "/").endswith("/")
                members.append((info, PurePosixPath(*parts), is_dir))
        return members

    def _create_target_dir(self, target_dir: Path) -> None:
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
        except PermissionError as exc:
            raise OperationPermissionError(path=target_dir, cause=exc) from exc
        except OSError as exc:
            raise ExtractError(path=target_dir, cause=exc) from exc

    def _extract_members(self, archive: zipfile.ZipFile, members: List[_Member],
                         target_dir: Path) -> None:
        root = target_dir.resolve()
        planned = []
        for info, relative, is_dir in members:
            destination = target_dir.joinpath(*relative.parts)
            # A directory already inside the bundle may be a symlink.
            if not destination.resolve().is_relative_to(root):
                raise ExtractError(
                    f"Archive entry escapes the install directory: {info.filename!r}"
                )
            planned.append((info, destination, is_dir))

        for info, destination, is_dir in planned:
            try:
                if is_dir:
                    destination.mkdir(parents=True, exist_ok=True)
                    continue
                destination.parent.mkdir(parents=True, exist_ok=True)
                with archive.open(info) as source, open(destination, "wb") as sink:
                    shutil.copyfileobj(source, sink)
            except OSError as exc:
                raise file_operation_error_from_os(exc, destination) from exc
            except _MEMBER_READ_ERRORS as exc:
                raise ExtractError(path=destination, cause=exc) from exc
