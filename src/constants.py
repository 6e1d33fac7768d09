"""Constants used in the project."""

import logging
import os
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

VERSION = "1.1.0"


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    RESOLUTION_ERROR = 3
    COUNTING_ERROR = 4
    USAGE_ERROR = 5
    TOOL_NOT_FOUND = 6


class OutputFormats(Enum):
    """Export formats supported by the program.

    Args:
        Enum (string): Export formats supported by the program.
    """

    JSON = "json"
    CSV = "csv"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    APP_NAME = "dexcount"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
    LOG_LEVEL_ENV = "DEXCOUNT_LOG_LEVEL"

    # On-disk caches live under ~/.config/dexcount unless overridden
    CONFIG_DIR_ENV = "DEXCOUNT_CONFIG_DIR"
    CONFIG_DIR = "~/.config/dexcount"
    CONFIG_FILE_ENV = "DEXCOUNT_CONFIG"
    CONFIG_FILE_NAMES = ["dexcount.yml", "dexcount.yaml"]
    AARS_DIR = "aars"
    GRADLE_DIR = "gradle"

    # Android SDK discovery
    ENV_ANDROID_HOME = "ANDROID_HOME"
    ENV_ANDROID_SDK_ROOT = "ANDROID_SDK_ROOT"
    DX_PATH: Optional[str] = None

    # Dex header layout: https://source.android.com/docs/core/runtime/dex-format#header-item
    DEX_MAGIC = b"dex\n"
    DEX_FIELD_IDS_SIZE_OFFSET = 80
    DEX_METHOD_IDS_SIZE_OFFSET = 88
    DEX_HEADER_MIN_SIZE = 92

    # Gradle helper workspace
    GRADLE_LOCAL_DIR = "gradle"
    GRADLE_DIR_OVERRIDE: Optional[str] = None
    GRADLE_VERSION = "8.5"
    GRADLE_TOOL_TAG = "v8.5.0"
    GRADLE_SOURCE_BASE_URL = "https://raw.githubusercontent.com/gradle/gradle"
    GRADLE_DISTRIBUTION_URL = "https://services.gradle.org/distributions/gradle-{version}-bin.zip"
    GRADLE_STAMP_FILE = ".dexcount-tool-tag"

    # Tunables
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    RESOLVE_TIMEOUT = 600  # Seconds allowed for a single Gradle resolution
    DEX_TOOL_TIMEOUT = 300  # Seconds allowed for a single dx/d8 run
    MAX_WORKERS: Optional[int] = None  # None means one worker per unique dependency


# Keys accepted under the "dexcount:" section of a YAML config, mapped to Constants attributes
CONFIG_KEYS: Dict[str, str] = {
    "dx_path": "DX_PATH",
    "gradle_dir": "GRADLE_DIR_OVERRIDE",
    "gradle_version": "GRADLE_VERSION",
    "gradle_tool_tag": "GRADLE_TOOL_TAG",
    "gradle_source_base_url": "GRADLE_SOURCE_BASE_URL",
    "request_timeout": "REQUEST_TIMEOUT",
    "resolve_timeout": "RESOLVE_TIMEOUT",
    "dex_tool_timeout": "DEX_TOOL_TIMEOUT",
    "max_workers": "MAX_WORKERS",
}
_INT_ATTRS = {"REQUEST_TIMEOUT", "RESOLVE_TIMEOUT", "DEX_TOOL_TIMEOUT", "MAX_WORKERS"}


def _default_config_paths():
    """Return candidate YAML config locations in priority order."""
    paths = []
    env_path = os.environ.get(Constants.CONFIG_FILE_ENV)
    if env_path:
        paths.append(env_path)
    config_dir = os.path.expanduser(os.environ.get(Constants.CONFIG_DIR_ENV) or Constants.CONFIG_DIR)
    for name in Constants.CONFIG_FILE_NAMES:
        paths.append(os.path.join(config_dir, name))
    for name in Constants.CONFIG_FILE_NAMES:
        paths.append(os.path.join(os.getcwd(), name))
    return paths


def _load_yaml_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load a YAML config file.

    Args:
        path: Explicit config path. When None, the first existing default
            location is used.

    Returns:
        The parsed mapping, or an empty dict when no usable file exists.
    """
    import yaml  # pylint: disable=import-outside-toplevel

    candidates = [path] if path else _default_config_paths()
    for candidate in candidates:
        if not candidate or not os.path.isfile(candidate):
            continue
        try:
            with open(candidate, "r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
        except (OSError, yaml.YAMLError) as exc:
            logger.warning("Failed to read config %s: %s", candidate, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: top level is not a mapping", candidate)
            return {}
        logger.debug("Loaded config from %s", candidate)
        return data
    return {}


def apply_config(cfg: Dict[str, Any]) -> None:
    """Apply the "dexcount" section of a loaded config onto Constants."""
    section = cfg.get(Constants.APP_NAME, cfg) if isinstance(cfg, dict) else {}
    if not isinstance(section, dict):
        return
    for key, attr in CONFIG_KEYS.items():
        if key not in section or section[key] is None:
            continue
        value = section[key]
        if attr in _INT_ATTRS:
            try:
                value = int(value)
            except (TypeError, ValueError):
                logger.warning("Ignoring non-integer config value %s=%r", key, value)
                continue
        else:
            value = str(value)
        setattr(Constants, attr, value)
