"""Locate the Android SDK dex tools (dx, falling back to d8)."""

from __future__ import annotations

import glob
import logging
import os
from dataclasses import dataclass
from typing import List, Mapping, Optional

from packaging import version

from constants import Constants

from ..errors import ToolNotFoundError

logger = logging.getLogger(__name__)

DX = "dx"
D8 = "d8"
TOOL_NAMES = (DX, D8)


@dataclass(frozen=True)
class DexTool:
    """A dex compiler executable and which command-line dialect it speaks."""
    kind: str
    path: str


def _tool_kind(path: str) -> str:
    name = os.path.basename(path).lower()
    if name.startswith(D8):
        return D8
    return DX


def _build_tools_key(path: str):
    """Sort key for build-tools/<version>/<tool>; unparsable versions sort first."""
    dir_name = os.path.basename(os.path.dirname(path))
    try:
        return (1, version.Version(dir_name))
    except version.InvalidVersion:
        return (0, version.Version("0"))


def find_in_sdk(sdk_home: str, tool: str) -> Optional[str]:
    """Return the newest ``build-tools/*/<tool>`` under an SDK home, if any."""
    matches: List[str] = glob.glob(os.path.join(sdk_home, "build-tools", "*", tool))
    matches = [m for m in matches if os.path.isfile(m)]
    if not matches:
        return None
    matches.sort(key=_build_tools_key)
    return matches[-1]


def locate_dex_tool(
    explicit_path: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
) -> DexTool:
    """Pick the dex tool to count with.

    An explicit path (``--dx`` or config ``dx_path``) must exist. Otherwise
    ANDROID_HOME then ANDROID_SDK_ROOT are searched for dx, then d8.

    Raises:
        ToolNotFoundError: If no tool can be located.
    """
    if explicit_path:
        if os.path.isfile(explicit_path):
            return DexTool(kind=_tool_kind(explicit_path), path=explicit_path)
        raise ToolNotFoundError(f"Provided dx path is invalid: {explicit_path}")

    env = os.environ if env is None else env
    homes = [
        env.get(Constants.ENV_ANDROID_HOME),
        env.get(Constants.ENV_ANDROID_SDK_ROOT),
    ]
    for tool in TOOL_NAMES:
        for home in homes:
            if not home:
                continue
            found = find_in_sdk(home, tool)
            if found:
                logger.debug("Using %s at %s", tool, found)
                return DexTool(kind=tool, path=found)

    raise ToolNotFoundError(
        "Unable to locate `dx` or `d8`. Pass --dx or set "
        f"{Constants.ENV_ANDROID_HOME}."
    )
