from __future__ import annotations

"""Central logging configuration for ZXP Manager.

Import and call :func:`setup_logging` at application start-up.
"""

import copy
import logging
import logging.config
import os
from typing import Optional

from zxp_manager.config import ConfigManager

__all__ = ["setup_logging"]


def setup_logging(config_manager: Optional[ConfigManager] = None) -> None:
    """Configure logging from the ``logging`` YAML section."""
    log_dir = os.environ.get("ZXP_MANAGER_LOG_DIR", "logs")
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, "app.log")

    try:
        config_manager = config_manager or ConfigManager()
        logging_config = copy.deepcopy(config_manager.get_logging_config())

        if logging_config and isinstance(logging_config, dict) and logging_config.get("version"):
            if "handlers" in logging_config and "file" in logging_config["handlers"]:
                logging_config["handlers"]["file"]["filename"] = log_file

            logging.config.dictConfig(logging_config)
            logging.info("===== Logging initialised from config files =====")
        else:
            _setup_minimal_logging()
    except (ValueError, TypeError, AttributeError, ImportError, OSError) as exc:
        # dictConfig reports every configuration problem through these types.
        _setup_minimal_logging()
        logging.error("Error loading logging config: %s", exc)

    _apply_debug_overrides()


def _setup_minimal_logging() -> None:
    """Set up console-only logging when config is unavailable."""
    minimal_config = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'simple': {
                'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            },
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'simple',
                'level': 'INFO',
            },
        },
        'root': {
            'level': 'INFO',
            'handlers': ['console'],
        },
    }

    logging.config.dictConfig(minimal_config)
    logging.warning("===== Logging initialised with minimal fallback =====")


def _apply_debug_overrides() -> None:
    """Apply ``ZXP_MANAGER_DEBUG_MODULES=comma,separated,logger,names``."""
    extra_modules = os.environ.get('ZXP_MANAGER_DEBUG_MODULES', '').strip()
    targets = [m.strip() for m in extra_modules.split(',') if m.strip()]
    for name in targets:
        logger = logging.getLogger(name)
        logger.setLevel(logging.DEBUG)
        # Ensure at least one handler emits DEBUG for this logger
        if not any(h.level <= logging.DEBUG for h in logger.handlers):
            handler = logging.StreamHandler()
            handler.setLevel(logging.DEBUG)
            handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
            logger.addHandler(handler)
        logger.info("Debug override active for logger '%s'", name)
