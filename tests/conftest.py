import struct
import zlib

import pytest

from archive_indexer.archives.base_reader import ArchiveReader
from archive_indexer.core.config import Config, set_config
from archive_indexer.core.paths import Paths
from archive_indexer.formats.file_types import FileType

# Payloads that pass the header checks of each reader kind
ATEX_DATA = b"ATEX" + b"\x00" * 28
PNG_DATA = b"\x89PNG\r\n\x1a\n" + b"\x00" * 24
MODEL_DATA = b"PF" + b"\x00" * 6 + b"MODL" + b"\x01" * 20
STRINGS_DATA = b"strs" + b"\x02" * 20
PACKED_SOUND_DATA = b"PF" + b"\x00" * 6 + b"ASND" + b"\x03" * 20
ASND_DATA = b"asnd" + b"\x04" * 20
BANK_DATA = b"PF" + b"\x00" * 6 + b"ABNK" + b"\x05" * 20
JUNK_DATA = b"\xde\xad\xbe\xef" * 8


class MemoryArchive(ArchiveReader):
    """Archive reader over an in-memory entry list that records every read."""

    def __init__(self, entries=None, mtime=1000):
        super().__init__()
        # Each entry is (FileType, bytes) or (FileType, bytes, name); None bytes = unreadable
        self.entries = list(entries or [])
        self.mtime = mtime
        self.reads = []
        self.open_count = 0

    @property
    def format_name(self):
        return "Memory"

    @property
    def supported_extensions(self):
        return [".mem"]

    @property
    def reader_id(self):
        return "memory"

    def detect(self, path):
        return False

    def open(self, archive_path):
        self.archive_path = archive_path
        self._is_open = True
        self.open_count += 1
        return True

    def close(self):
        self._is_open = False

    def entry_count(self):
        return len(self.entries)

    def read_entry(self, entry_id):
        self.reads.append(entry_id)
        return self.entries[entry_id][1]

    def entry_type_hint(self, entry_id):
        return self.entries[entry_id][0]

    def entry_name(self, entry_id):
        entry = self.entries[entry_id]
        return entry[2] if len(entry) > 2 else None

    def modification_time(self):
        return self.mtime


def make_entries(count, start=0):
    """Alternate textures, models and junk so several categories appear."""
    kinds = [(FileType.ATEX, ATEX_DATA), (FileType.MODEL, MODEL_DATA), (FileType.UNKNOWN, JUNK_DATA)]
    return [kinds[(start + i) % len(kinds)] for i in range(count)]


def build_grf(path, files, version=0x200):
    """
    Write a GRF 0x200 archive.

    Args:
        path: Destination file
        files: (name, data) or (name, data, flags) tuples; flags 0 makes a directory
    """
    body = bytearray()
    table = bytearray()
    for item in files:
        name, data = item[0], item[1]
        flags = item[2] if len(item) > 2 else 0x01
        stored = zlib.compress(data) if flags & 0x01 else b""
        offset = len(body)
        body += stored
        table += name.encode('euc-kr') + b"\x00"
        table += struct.pack('<IIIBI', len(stored), len(stored), len(data), flags, offset)

    compressed_table = zlib.compress(bytes(table))
    header = struct.pack('<15s15sIIII', b"Master of Magic", b"\x00" * 15,
                         len(body), 0, len(files) + 7, version)
    with open(path, 'wb') as f:
        f.write(header)
        f.write(bytes(body))
        f.write(struct.pack('<II', len(compressed_table), len(table)))
        f.write(compressed_table)
    return str(path)


@pytest.fixture(autouse=True)
def isolated_user_data(tmp_path, monkeypatch):
    """Keep the user data dir and the global config inside tmp_path."""
    monkeypatch.setenv('XDG_CONFIG_HOME', str(tmp_path / "xdg"))
    monkeypatch.setenv('APPDATA', str(tmp_path / "xdg"))
    Paths.reset()
    set_config(None)
    yield
    Paths.reset()
    set_config(None)


@pytest.fixture
def index_dir(tmp_path):
    return str(tmp_path / "indexes")


@pytest.fixture
def config(tmp_path, index_dir):
    cfg = Config(str(tmp_path / "config.json"))
    cfg.index_dir = index_dir
    return cfg


@pytest.fixture
def memory_archive():
    return MemoryArchive


@pytest.fixture
def grf_builder():
    return build_grf


@pytest.fixture
def entries_factory():
    return make_entries


@pytest.fixture
def payloads():
    return {
        'atex': ATEX_DATA,
        'png': PNG_DATA,
        'model': MODEL_DATA,
        'strings': STRINGS_DATA,
        'packed_sound': PACKED_SOUND_DATA,
        'asnd': ASND_DATA,
        'bank': BANK_DATA,
        'junk': JUNK_DATA,
    }
