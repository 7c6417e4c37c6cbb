# ==============================================================================
# WRITE INDEX TASK MODULE
# ==============================================================================
# Persists an ArchiveIndex to its index file.
#
# The task cannot be aborted once init() succeeded: the write is one step
# and a half-finished write must never be left behind. A failed write still
# completes the task; `error` holds the reason, the index stays dirty, and
# nothing retries automatically.
# ==============================================================================

import os
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from ..core.database import IndexDatabase
from ..core.index import ArchiveIndex
from .base import Task


class WriteIndexTask(Task):
    """
    Task that writes an index to disk.

    Attributes:
        index (ArchiveIndex): Index to persist
        path (str):           Destination index file
        error (str):          Failure reason, or None after a good write
    """

    def __init__(self, index: ArchiveIndex, path: str):
        super().__init__()
        self.index = index
        self.path = path
        self.error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.is_done() and self.error is None

    def init(self) -> bool:
        directory = os.path.dirname(os.path.abspath(self.path))
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as e:
            print(f"[ERROR] Cannot create index directory {directory}: {e}")
            return False

        self._max_progress = 1
        self._text = f"Writing index: {os.path.basename(self.path)}"
        if not super().init():
            return False
        self.enter_critical_section()
        return True

    def perform(self):
        if self.is_done():
            return

        try:
            IndexDatabase(self.path).write(self.index)
        except (OSError, SQLAlchemyError) as e:
            self.error = str(e)
            print(f"[ERROR] Failed to write index {self.path}: {e}")
        else:
            self.index.mark_clean()
            print(f"[SUCCESS] Index saved: {self.path}")

        self._current_progress = 1
        self.finish()
