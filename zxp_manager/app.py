# -*- coding: utf-8 -*-
"""Wiring of the plugin core for a front-end.

:func:`create_service` builds the long-lived :class:`AppContext` from the
YAML configuration, registers it globally and returns the
:class:`PluginService` the view layer talks to. It must be called from
inside the running event loop's thread.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from zxp_manager.config import ConfigManager
from zxp_manager.core.context import AppContext, set_app_context
from zxp_manager.core.notifications import NotificationCenter
from zxp_manager.core.service import PluginService
from zxp_manager.logging_config import setup_logging
from zxp_manager.version import get_app_version

logger = logging.getLogger(__name__)

__all__ = ["create_service"]


def create_service(extension_root: Optional[Union[str, Path]] = None,
                   config_manager: Optional[ConfigManager] = None,
                   configure_logging: bool = True) -> PluginService:
    config_manager = config_manager or ConfigManager()
    if configure_logging:
        setup_logging(config_manager)

    notifications = NotificationCenter.from_config(config_manager.get_notification_durations())
    context = AppContext(notifications=notifications)
    set_app_context(context)

    service = PluginService(context, extension_root=extension_root)
    logger.info("ZXP Manager %s ready, extension root: %s",
                get_app_version(), service.scanner.extension_root)
    return service
