# ==============================================================================
# INDEX KEY HASHER MODULE
# ==============================================================================
# Derives the persisted index file name from an archive path.
#
# The file name is the standard CRC-32 (zlib polynomial, initial value 0) of
# the archive's absolute path encoded as UTF-8, formatted as eight lowercase
# hex digits plus the ".idx" extension:
#
#   /games/Gw2/Gw2.dat  ->  "1c291ca3.idx"   (example)
#
# CRC-32 is not collision free: two archive paths with the same checksum
# share one cache slot. The stored timestamp/entry-count validation on load
# limits the damage to an unnecessary rescan.
#
# Usage:
#   from archive_indexer.core.hasher import index_file_path
#   path = index_file_path("/games/Gw2.dat", config.index_dir)
# ==============================================================================

import os
import zlib

# Initial CRC value
INITIAL_CRC = 0

# Extension for persisted index files
INDEX_FILE_EXTENSION = ".idx"


def normalize_archive_path(archive_path: str) -> str:
    """Return the absolute form of an archive path used for hashing."""
    return os.path.abspath(archive_path)


def archive_path_crc(archive_path: str) -> int:
    """
    Compute the CRC-32 of an archive's absolute path.

    Args:
        archive_path: Path to the archive (relative paths are made absolute)

    Returns:
        Unsigned 32-bit checksum
    """
    normalized = normalize_archive_path(archive_path)
    return zlib.crc32(normalized.encode('utf-8'), INITIAL_CRC) & 0xFFFFFFFF


def index_file_name(archive_path: str) -> str:
    """
    Get the index file name for an archive.

    Example:
        >>> index_file_name("/data/Gw2.dat")   # doctest: +SKIP
        '5b0bd1f4.idx'
    """
    return f"{archive_path_crc(archive_path):08x}{INDEX_FILE_EXTENSION}"


def index_file_path(archive_path: str, index_dir: str) -> str:
    """Get the full path of the persisted index for an archive."""
    return os.path.join(index_dir, index_file_name(archive_path))
