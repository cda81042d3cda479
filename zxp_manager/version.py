# -*- coding: utf-8 -*-
"""Application version detection.

``get_app_version()`` reads ``version.txt`` written next to the package by
release builds and falls back to the version declared in the package
metadata, then to ``vdev``.
"""

from __future__ import annotations

from importlib import metadata
from pathlib import Path
from typing import Optional

_CACHED_VERSION: Optional[str] = None


def get_app_version() -> str:
    """Return the application version string (e.g., ``v1.0.0``)."""
    global _CACHED_VERSION
    if _CACHED_VERSION:
        return _CACHED_VERSION

    version_file = Path(__file__).resolve().parent.parent / "version.txt"
    text = ""
    if version_file.exists():
        text = version_file.read_text(encoding="ascii", errors="ignore").strip()
    if not text:
        try:
            text = metadata.version("zxp-manager")
        except metadata.PackageNotFoundError:
            text = ""

    if text:
        _CACHED_VERSION = text if text.startswith("v") else f"v{text}"
    else:
        _CACHED_VERSION = "vdev"
    return _CACHED_VERSION
