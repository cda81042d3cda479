from __future__ import annotations

"""Plugin system exception classes.

Two families cover the lifecycle engine: scan-side errors raised while
reading the extension root and its manifests, and file-operation errors
raised while installing or removing a bundle. Every class carries a stable
``kind`` string and a default user-facing message so callers can render a
notification without inspecting the exception type.
"""

from pathlib import Path
from typing import Optional, Union


class PluginError(Exception):
    """Base exception for all plugin-related errors."""

    kind = "PluginError"
    default_message = "Plugin operation failed"

    def __init__(self, message: Optional[str] = None,
                 path: Optional[Union[str, Path]] = None,
                 cause: Optional[BaseException] = None) -> None:
        super().__init__(message or self.default_message)
        self.path = Path(path) if path is not None else None
        self.cause = cause

    @property
    def message(self) -> str:
        return super().__str__()

    def __str__(self) -> str:
        if self.path is not None:
            return f"[Plugin: {self.path}] {self.message}"
        return self.message


# -----------------------------------------------------------------------------
# Scan / manifest errors
# -----------------------------------------------------------------------------

class PluginScanError(PluginError):
    """Raised when the extension root or a manifest cannot be read."""


class DirectoryNotFoundError(PluginScanError):
    kind = "DirectoryNotFound"
    default_message = "Directory not found"


class ScanPermissionError(PluginScanError):
    kind = "PermissionDenied"
    default_message = "Permission denied"


class ManifestNotFoundError(PluginScanError):
    """The manifest document is missing or unreadable."""

    kind = "ManifestNotFound"
    default_message = "Manifest not found"


class InvalidManifestError(PluginScanError):
    """The manifest is malformed or lacks a bundle identifier."""

    kind = "InvalidManifest"
    default_message = "Invalid manifest"


# -----------------------------------------------------------------------------
# Install / remove errors
# -----------------------------------------------------------------------------

class FileOperationError(PluginError):
    """Raised when installing or removing a bundle fails.

    The ``message`` is the short reason shown to the user, e.g.
    ``"Failed to install plugin: Invalid or corrupt ZXP file"``.
    """


class DialogCancelledError(FileOperationError):
    """The user dismissed the file picker. Never reported as a failure."""

    kind = "DialogCancelled"
    default_message = "File dialog was cancelled"


class ArchiveNotFoundError(FileOperationError):
    kind = "FileNotFound"
    default_message = "File not found"


class InvalidExtensionError(FileOperationError):
    """Wrong archive extension, or a remove target that is not a directory."""

    kind = "InvalidExtension"
    default_message = "File must have .zxp extension"


class InvalidZipError(FileOperationError):
    kind = "InvalidZip"
    default_message = "Invalid or corrupt ZXP file"


class ExtractError(FileOperationError):
    kind = "ExtractError"
    default_message = "Failed to extract ZXP file"


class OperationPermissionError(FileOperationError):
    kind = "PermissionDenied"
    default_message = "Permission denied"


def file_operation_error_from_os(exc: OSError,
                                 path: Optional[Union[str, Path]] = None) -> FileOperationError:
    """Map an OS error raised during install/remove to the file-operation taxonomy."""
    if isinstance(exc, PermissionError):
        return OperationPermissionError(path=path, cause=exc)
    return ExtractError(path=path, cause=exc)
