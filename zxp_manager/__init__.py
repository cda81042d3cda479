"""ZXP Manager: install, list and remove extension bundles.

Front-ends should depend only on the public API exposed here rather than
importing internal modules directly.
"""

from .core.context import AppContext, RefreshToken
from .core.notifications import Notification, NotificationCategory, NotificationCenter
from .core.plugins.models import BundleManifest, Plugin, PluginType
from .core.service import PluginService

__all__: list[str] = [
    "AppContext",
    "BundleManifest",
    "Notification",
    "NotificationCategory",
    "NotificationCenter",
    "Plugin",
    "PluginService",
    "PluginType",
    "RefreshToken",
]
