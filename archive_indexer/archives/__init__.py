# ==============================================================================
# ARCHIVES MODULE INIT
# ==============================================================================
# Read-only archive accessors.
#
#   - ArchiveReader:   abstract accessor (entry count, bytes, declared type)
#   - ArchiveRegistry: finds the accessor for a file
#   - GRFReader:       Ragnarok Online GRF/GPF archives
#
# Usage:
#   from archive_indexer.archives import ArchiveRegistry
#   reader = ArchiveRegistry.get_reader_for_file("data.grf")
#   if reader and reader.open("data.grf"):
#       print(reader.entry_count())
# ==============================================================================

from typing import Optional

# Import base classes first (required by the readers)
from .base_reader import ArchiveReader, ArchiveRegistry, archive_modification_time

# Import specific readers (each one registers itself)
from .grf_reader import GRFReader

__all__ = [
    'ArchiveReader',
    'ArchiveRegistry',
    'archive_modification_time',
    'GRFReader',
]


def get_reader(archive_path: str) -> Optional[ArchiveReader]:
    """
    Get an unopened reader for the given archive.

    Returns:
        A reader instance, or None if no registered reader recognises the file
    """
    return ArchiveRegistry.get_reader_for_file(archive_path)
