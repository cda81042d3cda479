"""Tests for the plugin exception hierarchy."""

from pathlib import Path

import pytest

from zxp_manager.core.plugins.exceptions import (
    ArchiveNotFoundError,
    DialogCancelledError,
    DirectoryNotFoundError,
    ExtractError,
    FileOperationError,
    InvalidExtensionError,
    InvalidManifestError,
    InvalidZipError,
    ManifestNotFoundError,
    OperationPermissionError,
    PluginError,
    PluginScanError,
    ScanPermissionError,
    file_operation_error_from_os,
)


@pytest.mark.parametrize("exc_type, kind, message", [
    (DialogCancelledError, "DialogCancelled", "File dialog was cancelled"),
    (InvalidExtensionError, "InvalidExtension", "File must have .zxp extension"),
    (ArchiveNotFoundError, "FileNotFound", "File not found"),
    (OperationPermissionError, "PermissionDenied", "Permission denied"),
    (InvalidZipError, "InvalidZip", "Invalid or corrupt ZXP file"),
    (ExtractError, "ExtractError", "Failed to extract ZXP file"),
    (DirectoryNotFoundError, "DirectoryNotFound", "Directory not found"),
    (ScanPermissionError, "PermissionDenied", "Permission denied"),
    (ManifestNotFoundError, "ManifestNotFound", "Manifest not found"),
    (InvalidManifestError, "InvalidManifest", "Invalid manifest"),
])
def test_kind_and_default_message(exc_type, kind, message):
    exc = exc_type()
    assert exc.kind == kind
    assert str(exc) == message
    assert isinstance(exc, PluginError)


def test_families():
    assert issubclass(InvalidZipError, FileOperationError)
    assert issubclass(InvalidManifestError, PluginScanError)
    assert not issubclass(InvalidManifestError, FileOperationError)


def test_path_prefix():
    exc = ExtractError(path="/tmp/x")
    assert str(exc) == "[Plugin: /tmp/x] Failed to extract ZXP file"
    assert exc.message == "Failed to extract ZXP file"
    assert exc.path == Path("/tmp/x")


def test_os_error_mapping():
    denied = file_operation_error_from_os(PermissionError("no"), "/x")
    other = file_operation_error_from_os(OSError("boom"))
    assert isinstance(denied, OperationPermissionError)
    assert isinstance(other, ExtractError)
    assert isinstance(other.cause, OSError)
