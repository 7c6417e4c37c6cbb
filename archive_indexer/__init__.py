# ==============================================================================
# ARCHIVE INDEXER
# ==============================================================================
# Incremental, resumable indexing of large game asset archives.
#
# Package layout:
#   - core/:      config, paths, errors, index model, persisted index files
#   - formats/:   declared file types and header-sniffing reader resolution
#   - archives/:  read-only archive accessors (GRF/GPF)
#   - tasks/:     cooperative tasks and the single-slot scheduler
#   - gui/:       optional PyQt6 driver for the scheduler
#   - browser.py: open / index / view / close orchestration
#   - cli.py:     command-line interface
# ==============================================================================

__version__ = "1.0.0"

from .browser import ArchiveBrowser, CacheStatus

__all__ = [
    '__version__',
    'ArchiveBrowser',
    'CacheStatus',
]
