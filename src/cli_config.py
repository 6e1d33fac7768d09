"""Configuration loading and CLI overrides for runtime tunables.

Precedence, lowest to highest: built-in Constants, YAML config (explicit
--config or the default locations), environment, CLI flags.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict

from common.logging_utils import add_file_handler, configure_logging
from constants import Constants, _load_yaml_config, apply_config

logger = logging.getLogger(__name__)


def setup_logging(args) -> None:
    """Configure logging based on CLI arguments."""
    # Honor CLI --loglevel by passing it to the centralized logger via env
    if getattr(args, "LOG_LEVEL", None):
        os.environ[Constants.LOG_LEVEL_ENV] = str(args.LOG_LEVEL).upper()
    configure_logging()

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        add_file_handler(log_file)
        logger.info("Logging to file: %s", log_file)


def load_config(args) -> Dict[str, Any]:
    """Load the YAML config named by --config, or the default one, onto Constants.

    An explicit --config that does not exist is reported and ignored.
    """
    path = getattr(args, "CONFIG", None)
    if path and not os.path.isfile(path):
        logger.warning("Config file not found: %s", path)
        return {}
    cfg = _load_yaml_config(path)
    if cfg:
        apply_config(cfg)
    return cfg


def apply_cli_overrides(args) -> None:
    """Apply CLI overrides with highest precedence."""
    if getattr(args, "DX_PATH", None):
        Constants.DX_PATH = args.DX_PATH
    if getattr(args, "GRADLE_DIR", None):
        Constants.GRADLE_DIR_OVERRIDE = args.GRADLE_DIR
    if getattr(args, "MAX_WORKERS", None) is not None:
        Constants.MAX_WORKERS = int(args.MAX_WORKERS)
