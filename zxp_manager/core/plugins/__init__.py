from __future__ import annotations

"""Plugin lifecycle engine.

This package provides:
- Manifest parsing (``CSXS/manifest.xml``)
- Discovery and classification of installed bundles
- Installation of ``.zxp`` archives
- Removal of installed bundles
- The exception hierarchy shared by all of the above
"""

from .exceptions import (
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
)
from .installer import ArchiveInstaller, install_target_name, is_valid_archive_extension
from .manifest import parse_manifest, parse_manifest_file
from .models import BundleManifest, Plugin, PluginType
from .remover import PluginRemover
from .scanner import DEFAULT_EXTENSION_ROOT, PluginScanner, format_size

__all__ = [
    # Core classes
    "ArchiveInstaller",
    "PluginRemover",
    "PluginScanner",

    # Data models
    "BundleManifest",
    "Plugin",
    "PluginType",

    # Exceptions
    "PluginError",
    "PluginScanError",
    "DirectoryNotFoundError",
    "ScanPermissionError",
    "ManifestNotFoundError",
    "InvalidManifestError",
    "FileOperationError",
    "DialogCancelledError",
    "ArchiveNotFoundError",
    "InvalidExtensionError",
    "InvalidZipError",
    "ExtractError",
    "OperationPermissionError",

    # Utility functions
    "parse_manifest",
    "parse_manifest_file",
    "format_size",
    "install_target_name",
    "is_valid_archive_extension",

    # Constants
    "DEFAULT_EXTENSION_ROOT",
]
