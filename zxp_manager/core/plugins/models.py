from __future__ import annotations

"""Plugin system data models.

Defines the values produced by a scan of the extension root and by
manifest parsing. All of them are immutable: a changed bundle on disk
produces a new ``Plugin`` on the next scan rather than mutating an old one.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

# Bundle identifiers starting with this prefix ship with the host application.
NATIVE_BUNDLE_PREFIX = "com.adobe."


class PluginType(Enum):
    """Classification of an installed bundle."""

    NATIVE = "native"
    THIRD_PARTY = "third_party"

    @property
    def label(self) -> str:
        """Short badge text shown next to the plugin name."""
        return "native" if self is PluginType.NATIVE else "installed"

    @classmethod
    def classify(cls, bundle_id: str) -> "PluginType":
        if bundle_id.startswith(NATIVE_BUNDLE_PREFIX):
            return cls.NATIVE
        return cls.THIRD_PARTY


@dataclass(frozen=True)
class BundleManifest:
    """Identity declared by a bundle's ``CSXS/manifest.xml``."""

    bundle_id: str
    name: str
    version: str

    def __post_init__(self) -> None:
        if not self.bundle_id:
            raise ValueError("bundle_id must not be empty")

    @property
    def kind(self) -> PluginType:
        return PluginType.classify(self.bundle_id)


@dataclass(frozen=True)
class Plugin:
    """An installed bundle discovered under the extension root.

    ``path`` is the identity of the plugin; two scans describe the same
    bundle only if their paths are equal.
    """

    name: str
    version: str
    size: str
    path: Path
    kind: PluginType

    @property
    def can_remove(self) -> bool:
        """Native bundles are listed but cannot be removed from the UI."""
        return self.kind is PluginType.THIRD_PARTY

    @property
    def badge(self) -> str:
        return self.kind.label
