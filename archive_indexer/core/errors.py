# ==============================================================================
# ERRORS MODULE
# ==============================================================================
# Exception types raised by the indexing engine.
#
# Most failures inside the engine are recoverable and are reported through
# return values (False / None) plus a log line. Only the few conditions
# below are raised:
#   - ArchiveOpenError:    archive could not be opened (caller-facing)
#   - CorruptIndexError:   cache file contents are structurally invalid
#   - DuplicateEntryError: an entry id was added to an index twice
#   - TaskAbortError:      abort() requested inside a critical section
# ==============================================================================


class IndexerError(Exception):
    """Base class for all archive indexer errors."""


class ArchiveOpenError(IndexerError):
    """Raised when an archive file cannot be opened for indexing."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        message = f"Failed to open archive: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class CorruptIndexError(IndexerError):
    """Raised when a persisted index file cannot be decoded."""


class DuplicateEntryError(IndexerError, ValueError):
    """Raised when an entry id is already present in the index."""

    def __init__(self, entry_id: int):
        self.entry_id = entry_id
        super().__init__(f"Entry {entry_id} is already indexed")


class TaskAbortError(IndexerError, RuntimeError):
    """Raised when a task is aborted while it cannot be interrupted."""
