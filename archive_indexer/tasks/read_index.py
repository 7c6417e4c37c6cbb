# ==============================================================================
# READ INDEX TASK MODULE
# ==============================================================================
# Loads a persisted index file into an ArchiveIndex.
#
#   - init() fails when the file does not exist (no cache: not an error,
#     the caller starts a full scan instead).
#   - perform() loads the whole file in one step; the file is bounded by
#     the index size, not the archive size.
#   - A corrupt file leaves the index cleared (no entries, timestamp 0)
#     and the task still completes normally; `corrupt` records it.
# ==============================================================================

import os

from ..core.database import IndexDatabase
from ..core.errors import CorruptIndexError
from ..core.index import ArchiveIndex
from .base import Task


class ReadIndexTask(Task):
    """
    Task that replaces an index's contents with a persisted copy.

    Attributes:
        index (ArchiveIndex): Index to fill
        path (str):           Index file to read
        corrupt (bool):       True once a corrupt file was discarded
    """

    def __init__(self, index: ArchiveIndex, path: str):
        super().__init__()
        self.index = index
        self.path = path
        self.corrupt = False

    def init(self) -> bool:
        if not os.path.isfile(self.path):
            print(f"[INFO] No index file at {self.path}")
            return False

        self._max_progress = 1
        self._text = f"Reading index: {os.path.basename(self.path)}"
        return super().init()

    def perform(self):
        if self.is_done():
            return

        try:
            loaded = IndexDatabase(self.path).read()
        except CorruptIndexError as e:
            print(f"[WARN] Discarding corrupt index: {e}")
            self.corrupt = True
            self.index.clear()
        else:
            self.index.assign(loaded)
            print(f"[INFO] Loaded index with {loaded.num_entries} entries")

        self._current_progress = 1
        self.finish()
