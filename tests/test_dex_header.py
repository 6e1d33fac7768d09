"""Tests for dex header decoding."""

import struct

import pytest

from counting.counters.dex import decode_dex_counts, has_dex_magic, read_dex_file, sum_dex_files
from counting.errors import DexFormatError, FormatError


def _header(fields, methods, size=0x70, magic=b"dex\n035\x00"):
    blob = bytearray(size)
    blob[:len(magic)] = magic
    struct.pack_into("<I", blob, 80, fields)
    struct.pack_into("<I", blob, 88, methods)
    return bytes(blob)


class TestDecode:
    """Tests for decode_dex_counts()."""

    def test_known_bytes(self):
        blob = bytearray(92)
        blob[80:84] = b"\x01\x00\x00\x00"
        blob[88:92] = b"\x02\x00\x00\x00"
        assert decode_dex_counts(bytes(blob)) == (2, 1)

    def test_little_endian(self):
        blob = bytearray(92)
        blob[80:84] = b"\x00\x01\x00\x00"
        blob[88:92] = b"\xff\xff\x00\x00"
        assert decode_dex_counts(bytes(blob)) == (65535, 256)

    def test_full_header(self):
        assert decode_dex_counts(_header(fields=1234, methods=56789)) == (56789, 1234)

    def test_too_short(self):
        with pytest.raises(DexFormatError):
            decode_dex_counts(b"\x00" * 91)

    def test_too_short_is_format_error(self):
        with pytest.raises(FormatError):
            decode_dex_counts(b"")


class TestDexFiles:
    """Tests for reading dex files from disk."""

    def test_magic(self):
        assert has_dex_magic(_header(1, 1))
        assert not has_dex_magic(b"PK\x03\x04")

    def test_read_dex_file(self, tmp_path):
        path = tmp_path / "classes.dex"
        path.write_bytes(_header(fields=7, methods=11))
        assert read_dex_file(str(path)) == (11, 7)

    def test_read_rejects_non_dex(self, tmp_path):
        path = tmp_path / "classes.dex"
        path.write_bytes(b"\x00" * 0x70)
        with pytest.raises(DexFormatError):
            read_dex_file(str(path))

    def test_sum_dex_files(self, tmp_path):
        first = tmp_path / "classes.dex"
        second = tmp_path / "classes2.dex"
        first.write_bytes(_header(fields=10, methods=65000))
        second.write_bytes(_header(fields=5, methods=300))
        assert sum_dex_files([str(first), str(second)]) == (65300, 15)
