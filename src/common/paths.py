"""Filesystem locations for on-disk caches."""
from __future__ import annotations

import logging
import os

from constants import Constants

logger = logging.getLogger(__name__)


def config_root() -> str:
    """Return the expanded dexcount config directory (not created)."""
    return os.path.expanduser(os.environ.get(Constants.CONFIG_DIR_ENV) or Constants.CONFIG_DIR)


def get_config_dir(dir_name: str) -> str:
    """Return a subdirectory of the config directory, creating it and any parents.

    Args:
        dir_name: Subdirectory name, e.g. "aars".

    Returns:
        Absolute path of the directory.

    Raises:
        OSError: If the directory cannot be created.
    """
    path = os.path.join(config_root(), dir_name)
    if not os.path.isdir(path):
        logger.debug("Creating config directory %s", path)
        os.makedirs(path, exist_ok=True)
    return path
