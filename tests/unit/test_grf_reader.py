import os
import struct
import zlib

import pytest

from archive_indexer.archives import ArchiveRegistry, GRFReader, get_reader
from archive_indexer.formats.file_types import FileType


@pytest.fixture
def grf_path(tmp_path, grf_builder, payloads):
    return grf_builder(tmp_path / "data.grf", [
        ("data\\texture\\a.atex", payloads['atex']),
        ("data\\", b"", 0x00),
        ("data\\model\\house.rsm", payloads['model']),
        ("data\\readme.txt", b"hello grf"),
    ])


def test_registry_picks_grf_reader(grf_path):
    reader = get_reader(grf_path)
    assert isinstance(reader, GRFReader)
    assert not reader.is_open
    assert ".grf" in ArchiveRegistry.list_supported_extensions()


def test_registry_ignores_other_files(tmp_path):
    path = tmp_path / "data.grf"
    path.write_bytes(b"not a grf file at all")
    assert ArchiveRegistry.get_reader_for_file(str(path)) is None
    assert ArchiveRegistry.get_reader_for_file(str(tmp_path / "missing.grf")) is None


def test_open_lists_files_and_skips_directories(grf_path):
    with GRFReader() as reader:
        assert reader.open(grf_path)
        assert reader.is_open
        assert reader.entry_count() == 3
        assert reader.entry_name(0) == "data\\texture\\a.atex"
        assert reader.entry_name(1) == "data\\model\\house.rsm"
    assert not reader.is_open


def test_type_hints_come_from_extensions(grf_path):
    reader = GRFReader()
    reader.open(grf_path)
    assert reader.entry_type_hint(0) is FileType.ATEX
    assert reader.entry_type_hint(1) is FileType.MODEL
    assert reader.entry_type_hint(2) is FileType.UNKNOWN
    assert reader.entry_type_hint(99) is FileType.UNKNOWN
    reader.close()


def test_read_entry_decompresses(grf_path, payloads):
    reader = GRFReader()
    reader.open(grf_path)
    assert reader.read_entry(0) == payloads['atex']
    assert reader.read_entry(1) == payloads['model']
    assert reader.read_entry(2) == b"hello grf"
    assert reader.read_entry(3) is None
    reader.close()


def test_encrypted_entries_are_not_read(tmp_path, grf_builder, payloads):
    path = grf_builder(tmp_path / "enc.grf", [("secret.atex", payloads['atex'], 0x01 | 0x02)])
    reader = GRFReader()
    assert reader.open(path)
    assert reader.entry_count() == 1
    assert reader.read_entry(0) is None
    reader.close()


def test_unsupported_version_fails(tmp_path, grf_builder, payloads):
    path = grf_builder(tmp_path / "old.grf", [("a.atex", payloads['atex'])], version=0x103)
    assert not GRFReader().open(path)


def test_truncated_file_fails(tmp_path):
    path = tmp_path / "short.grf"
    path.write_bytes(b"Master of Magic" + b"\x00" * 10)
    assert not GRFReader().open(str(path))


def test_corrupt_table_fails(tmp_path):
    header = struct.pack('<15s15sIIII', b"Master of Magic", b"\x00" * 15, 0, 0, 7, 0x200)
    path = tmp_path / "bad.grf"
    path.write_bytes(header + struct.pack('<II', 4, 100) + b"nope")
    assert not GRFReader().open(str(path))


def test_modification_time(grf_path):
    reader = GRFReader()
    reader.open(grf_path)
    assert reader.modification_time() == int(os.stat(grf_path).st_mtime)
    reader.close()


def test_stored_uncompressed_entry(tmp_path):
    # compressed size equal to the real size means the data is stored as is
    data = b"RAWDATA!"
    table = b"plain.bin\x00" + struct.pack('<IIIBI', len(data), len(data), len(data), 0x01, 0)
    compressed_table = zlib.compress(table)
    header = struct.pack('<15s15sIIII', b"Master of Magic", b"\x00" * 15, len(data), 0, 8, 0x200)
    path = tmp_path / "plain.grf"
    path.write_bytes(header + data + struct.pack('<II', len(compressed_table), len(table)) + compressed_table)

    reader = GRFReader()
    assert reader.open(str(path))
    assert reader.read_entry(0) == data
    reader.close()
