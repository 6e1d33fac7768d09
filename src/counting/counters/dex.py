"""Dex header decoding.

Only two header items matter here: ``field_ids_size`` and
``method_ids_size``, both little-endian uint32 values at fixed offsets.
See https://source.android.com/docs/core/runtime/dex-format#header-item
"""

from __future__ import annotations

import struct
from typing import Iterable, Tuple

from constants import Constants

from ..errors import DexFormatError

_UINT32_LE = struct.Struct("<I")


def decode_dex_counts(blob: bytes) -> Tuple[int, int]:
    """Return ``(methods, fields)`` from the header of a dex blob.

    Raises:
        DexFormatError: If the blob is too short to hold both counts.
    """
    if len(blob) < Constants.DEX_HEADER_MIN_SIZE:
        raise DexFormatError(
            f"Dex output too short: {len(blob)} bytes, need at least {Constants.DEX_HEADER_MIN_SIZE}"
        )
    (fields,) = _UINT32_LE.unpack_from(blob, Constants.DEX_FIELD_IDS_SIZE_OFFSET)
    (methods,) = _UINT32_LE.unpack_from(blob, Constants.DEX_METHOD_IDS_SIZE_OFFSET)
    return methods, fields


def has_dex_magic(blob: bytes) -> bool:
    return blob[:len(Constants.DEX_MAGIC)] == Constants.DEX_MAGIC


def read_dex_file(path: str) -> Tuple[int, int]:
    """Decode the counts of a ``.dex`` file on disk.

    Raises:
        DexFormatError: If the file is not a dex file.
        OSError: If the file cannot be read.
    """
    with open(path, "rb") as fh:
        header = fh.read(Constants.DEX_HEADER_MIN_SIZE)
    if not has_dex_magic(header):
        raise DexFormatError(f"Not a dex file: {path}")
    return decode_dex_counts(header)


def sum_dex_files(paths: Iterable[str]) -> Tuple[int, int]:
    """Sum counts over several dex files, e.g. classes.dex and classes2.dex."""
    methods = 0
    fields = 0
    for path in paths:
        m, f = read_dex_file(path)
        methods += m
        fields += f
    return methods, fields
