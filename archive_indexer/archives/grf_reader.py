# ==============================================================================
# GRF READER MODULE
# ==============================================================================
# Read-only accessor for Ragnarok Online GRF (Gravity Resource File)
# archives, version 0x200.
#
# GRF Format Overview:
#   - Header: 46 bytes with signature "Master of Magic"
#   - File data: individual files, zlib-compressed or stored
#   - File table: zlib-compressed list of entries at the end of the file
#
# Entry ids are assigned to file records in table order; directory records
# (flags == 0) get no id. Declared types come from the entry's extension.
#
# References:
#   - https://ragnarokresearchlab.github.io/file-formats/grf/
#
# Usage:
#   with GRFReader() as grf:
#       if grf.open("data.grf"):
#           data = grf.read_entry(0)
# ==============================================================================

import os
import struct
import zlib
from dataclasses import dataclass
from typing import BinaryIO, List, Optional

from ..formats.file_types import FileType, file_type_for_name
from .base_reader import ArchiveReader, ArchiveRegistry


# ==============================================================================
# GRF CONSTANTS
# ==============================================================================

GRF_SIGNATURE = b"Master of Magic"
GRF_HEADER_SIZE = 46
GRF_VERSION_200 = 0x200

# Header layout after the signature and 15 byte key:
#   u32 file table offset, u32 seed, u32 file count + seed + 7, u32 version
GRF_HEADER_FORMAT = '<15s15sIIII'

# File entry flags
GRF_FILE_FLAG_FILE = 0x01       # Entry is a file (not directory)
GRF_FILE_FLAG_MIXCRYPT = 0x02   # Uses mixed encryption
GRF_FILE_FLAG_DES = 0x04        # Uses DES encryption

# Size of the fixed part of a table record (after the name)
GRF_RECORD_SIZE = 17

# Longest name accepted in the file table
GRF_MAX_NAME_LENGTH = 260


# ==============================================================================
# GRF ENTRY
# ==============================================================================
@dataclass
class GRFEntry:
    """
    A file record from the GRF file table.

    Attributes:
        path (str):                 Normalized path (forward slashes, lowercase)
        original_path (str):        Path as stored in the GRF
        compressed_size (int):      zlib stream length
        compressed_size_aligned (int): Bytes stored on disk (padded for DES)
        uncompressed_size (int):    Original file length
        flags (int):                GRF_FILE_FLAG_* bits
        offset (int):               Data offset, relative to the end of the header
    """
    path: str
    original_path: str
    compressed_size: int
    compressed_size_aligned: int
    uncompressed_size: int
    flags: int
    offset: int

    def is_encrypted(self) -> bool:
        return bool(self.flags & (GRF_FILE_FLAG_MIXCRYPT | GRF_FILE_FLAG_DES))

    def is_compressed(self) -> bool:
        return self.compressed_size != self.uncompressed_size


# ==============================================================================
# GRF READER CLASS
# ==============================================================================
class GRFReader(ArchiveReader):
    """
    Accessor for GRF/GPF archives.

    Encrypted (DES) entries are not supported: read_entry() returns None for
    them and the scan classifies them as raw.

    Attributes:
        version (int): GRF version number of the open archive
    """

    def __init__(self):
        super().__init__()
        self.version = 0
        self._file_handle: Optional[BinaryIO] = None
        self._file_table_offset = 0
        self._entries: List[GRFEntry] = []

    # ==========================================================================
    # ABSTRACT PROPERTY IMPLEMENTATIONS
    # ==========================================================================

    @property
    def format_name(self) -> str:
        return "Ragnarok Online GRF"

    @property
    def supported_extensions(self) -> List[str]:
        return ['.grf', '.gpf']

    @property
    def reader_id(self) -> str:
        return "grf"

    # ==========================================================================
    # ABSTRACT METHOD IMPLEMENTATIONS
    # ==========================================================================

    def detect(self, path: str) -> bool:
        """Check both the file extension and the file signature."""
        ext = os.path.splitext(path)[1].lower()
        if ext not in self.supported_extensions:
            return False

        if not os.path.isfile(path):
            return False

        with open(path, 'rb') as f:
            return f.read(len(GRF_SIGNATURE)) == GRF_SIGNATURE

    def open(self, archive_path: str) -> bool:
        """
        Open a GRF archive and parse its file table.

        Returns:
            True if successfully opened, False otherwise
        """
        if self._is_open:
            self.close()

        self.archive_path = archive_path

        try:
            self._file_handle = open(archive_path, 'rb')
        except OSError as e:
            print(f"[ERROR] Failed to open GRF {archive_path}: {e}")
            return False

        try:
            parsed = self._read_header() and self._read_file_table()
        except (OSError, struct.error) as e:
            print(f"[ERROR] Failed to read GRF {archive_path}: {e}")
            parsed = False

        if not parsed:
            self.close()
            return False

        self._is_open = True
        print(f"[INFO] Opened GRF: {archive_path}")
        print(f"[INFO] Version: 0x{self.version:X}, Files: {len(self._entries)}")
        return True

    def close(self):
        """Close the GRF archive and release resources."""
        if self._file_handle:
            self._file_handle.close()
            self._file_handle = None
        self._is_open = False
        self._entries = []

    def entry_count(self) -> int:
        return len(self._entries)

    def get_entry(self, entry_id: int) -> Optional[GRFEntry]:
        if 0 <= entry_id < len(self._entries):
            return self._entries[entry_id]
        return None

    def entry_name(self, entry_id: int) -> Optional[str]:
        entry = self.get_entry(entry_id)
        return entry.original_path if entry else None

    def entry_type_hint(self, entry_id: int) -> FileType:
        entry = self.get_entry(entry_id)
        return file_type_for_name(entry.path) if entry else FileType.UNKNOWN

    def read_entry(self, entry_id: int) -> Optional[bytes]:
        """
        Read and decompress one entry.

        Returns:
            Uncompressed bytes, or None on error / unsupported encryption
        """
        entry = self.get_entry(entry_id)
        if entry is None or not self._file_handle:
            return None

        if entry.is_encrypted():
            print(f"[WARN] Encrypted GRF entry not supported: {entry.path}")
            return None

        try:
            self._file_handle.seek(GRF_HEADER_SIZE + entry.offset)
            raw_data = self._file_handle.read(entry.compressed_size_aligned)
        except OSError as e:
            print(f"[ERROR] Failed to read {entry.path} from GRF: {e}")
            return None

        if len(raw_data) != entry.compressed_size_aligned:
            print(f"[WARN] Read {len(raw_data)} bytes, expected "
                  f"{entry.compressed_size_aligned} for {entry.path}")
            return None

        if not entry.is_compressed():
            return raw_data[:entry.uncompressed_size]

        return self._decompress(entry, raw_data[:entry.compressed_size])

    # ==========================================================================
    # PRIVATE METHODS
    # ==========================================================================

    def _decompress(self, entry: GRFEntry, raw_data: bytes) -> Optional[bytes]:
        """Inflate an entry, trying a zlib stream first, then raw deflate."""
        for wbits in (zlib.MAX_WBITS, -zlib.MAX_WBITS):
            try:
                data = zlib.decompress(raw_data, wbits)
            except zlib.error:
                continue
            if len(data) != entry.uncompressed_size:
                print(f"[WARN] Size mismatch for {entry.path}: "
                      f"got {len(data)}, expected {entry.uncompressed_size}")
            return data

        print(f"[WARN] Failed to decompress {entry.path}")
        return None

    def _read_header(self) -> bool:
        """Read and validate the GRF header."""
        header = self._file_handle.read(GRF_HEADER_SIZE)
        if len(header) != GRF_HEADER_SIZE:
            print(f"[ERROR] Truncated GRF header in {self.archive_path}")
            return False

        signature, _key, table_offset, _seed, _raw_count, version = struct.unpack(
            GRF_HEADER_FORMAT, header
        )
        if signature != GRF_SIGNATURE:
            print(f"[ERROR] Invalid GRF signature in {self.archive_path}")
            return False

        if version != GRF_VERSION_200:
            print(f"[ERROR] Unsupported GRF version: 0x{version:X} "
                  f"(expected 0x{GRF_VERSION_200:X})")
            return False

        self.version = version
        self._file_table_offset = table_offset
        return True

    def _read_file_table(self) -> bool:
        """Read, decompress and parse the file table."""
        self._file_handle.seek(GRF_HEADER_SIZE + self._file_table_offset)
        sizes = self._file_handle.read(8)
        if len(sizes) != 8:
            print(f"[ERROR] Failed to read file table header")
            return False
        compressed_size, _uncompressed_size = struct.unpack('<II', sizes)

        compressed_table = self._file_handle.read(compressed_size)
        if len(compressed_table) != compressed_size:
            print(f"[ERROR] Failed to read complete file table")
            return False

        try:
            table_data = zlib.decompress(compressed_table)
        except zlib.error as e:
            print(f"[ERROR] Failed to decompress file table: {e}")
            return False

        self._entries = list(self._parse_records(table_data))
        return True

    def _parse_records(self, table_data: bytes):
        offset = 0
        while offset < len(table_data):
            name_end = table_data.find(b'\x00', offset)
            if name_end == -1:
                break

            filename_bytes = table_data[offset:name_end]
            offset = name_end + 1

            if offset + GRF_RECORD_SIZE > len(table_data):
                print(f"[WARN] Truncated file table record at offset {offset}")
                break

            compressed_size, aligned_size, uncompressed_size, flags, file_offset = struct.unpack(
                '<IIIBI', table_data[offset:offset + GRF_RECORD_SIZE]
            )
            offset += GRF_RECORD_SIZE

            # Directories carry no data
            if not flags & GRF_FILE_FLAG_FILE:
                continue

            if not filename_bytes or len(filename_bytes) > GRF_MAX_NAME_LENGTH:
                print(f"[WARN] Skipping record with invalid name length {len(filename_bytes)}")
                continue

            # EUC-KR encoding for Korean RO
            original_path = filename_bytes.decode('euc-kr', errors='replace')

            yield GRFEntry(
                path=original_path.lower().replace('\\', '/'),
                original_path=original_path,
                compressed_size=compressed_size,
                compressed_size_aligned=aligned_size,
                uncompressed_size=uncompressed_size,
                flags=flags,
                offset=file_offset,
            )


ArchiveRegistry.register(GRFReader)
