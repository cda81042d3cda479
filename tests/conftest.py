"""Shared fixtures for the ZXP Manager test-suite.

Provides a temporary extension root, manifest builders and a factory for
``.zxp`` archives so every test works against real files.
"""

import logging
import shutil
import tempfile
import zipfile
from pathlib import Path
from typing import Dict, Optional, Union

import pytest

from zxp_manager.core.context import AppContext
from zxp_manager.core.notifications import NotificationCenter
from zxp_manager.core.service import PluginService

# Configure test logging
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# Seconds per notification time unit in tests: success 0.03s, error 0.04s.
TEST_TIME_UNIT = 0.01


def manifest_xml(bundle_id: Optional[str] = "com.example.tool",
                 name: Optional[str] = "Example Tool",
                 version: Optional[str] = "1.0.0") -> str:
    """Build a minimal CEP manifest; ``None`` omits the attribute."""
    attrs = []
    if bundle_id is not None:
        attrs.append(f'ExtensionBundleId="{bundle_id}"')
    if name is not None:
        attrs.append(f'ExtensionBundleName="{name}"')
    if version is not None:
        attrs.append(f'ExtensionBundleVersion="{version}"')
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<ExtensionManifest Version="7.0" {" ".join(attrs)}>\n'
        '  <ExtensionList><Extension Id="main" Version="1.0"/></ExtensionList>\n'
        '</ExtensionManifest>\n'
    )


def write_bundle(root: Path, dirname: str, manifest: Optional[str] = None,
                 files: Optional[Dict[str, Union[str, bytes]]] = None) -> Path:
    """Create an installed bundle directory under *root*."""
    bundle_dir = root / dirname
    (bundle_dir / "CSXS").mkdir(parents=True, exist_ok=True)
    (bundle_dir / "CSXS" / "manifest.xml").write_text(
        manifest if manifest is not None else manifest_xml(), encoding="utf-8"
    )
    for relative, content in (files or {}).items():
        path = bundle_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return bundle_dir


def build_zxp(path: Path, manifest: Optional[str] = None,
              files: Optional[Dict[str, Union[str, bytes]]] = None,
              include_manifest: bool = True) -> Path:
    """Write a ZIP archive at *path* with a manifest and payload entries."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
        if include_manifest:
            zf.writestr("CSXS/manifest.xml", manifest if manifest is not None else manifest_xml())
        for name, content in (files or {}).items():
            zf.writestr(name, content)
    return path


@pytest.fixture
def temp_dir():
    """Creates a temporary directory for test operations."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def extension_root(temp_dir):
    """An existing, empty extension root."""
    root = temp_dir / "extensions"
    root.mkdir()
    return root


@pytest.fixture
def sample_zxp(temp_dir):
    """A valid archive for ``com.example.tool`` with a small payload."""
    return build_zxp(
        temp_dir / "downloads" / "tool.zxp",
        files={
            "index.html": "<html></html>",
            "js/main.js": "console.log('hi');",
            "icons/": "",
        },
    )


@pytest.fixture
def notification_center():
    return NotificationCenter(time_unit=TEST_TIME_UNIT)


@pytest.fixture
def plugin_service(extension_root, notification_center):
    context = AppContext(notifications=notification_center)
    return PluginService(context, extension_root=extension_root)
