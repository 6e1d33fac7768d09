"""Artifact counters.

- dex.py: dex header decoding
- aar.py: classes.jar extraction from Android archives
- tools.py: dx/d8 discovery in the Android SDK
- dx.py: ArtifactCounter that runs the dex tool
"""

from .dex import decode_dex_counts, read_dex_file
from .dx import DexToolCounter
from .tools import DexTool, locate_dex_tool

__all__ = [
    "decode_dex_counts",
    "read_dex_file",
    "DexToolCounter",
    "DexTool",
    "locate_dex_tool",
]
