# ==============================================================================
# CORE MODULE INIT
# ==============================================================================
# Configuration, paths, errors, the in-memory index and its persisted form.
# ==============================================================================

from .errors import (
    IndexerError,
    ArchiveOpenError,
    CorruptIndexError,
    DuplicateEntryError,
    TaskAbortError,
)
from .paths import Paths
from .config import Config, get_config, set_config
from .hasher import archive_path_crc, index_file_name, index_file_path
from .index import ArchiveIndex, IndexCategory, IndexEntry
from .database import IndexDatabase

__all__ = [
    'IndexerError',
    'ArchiveOpenError',
    'CorruptIndexError',
    'DuplicateEntryError',
    'TaskAbortError',
    'Paths',
    'Config',
    'get_config',
    'set_config',
    'archive_path_crc',
    'index_file_name',
    'index_file_path',
    'ArchiveIndex',
    'IndexCategory',
    'IndexEntry',
    'IndexDatabase',
]
