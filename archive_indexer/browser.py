# ==============================================================================
# ARCHIVE BROWSER MODULE
# ==============================================================================
# Ties the archive reader, the index, the persisted index file and the task
# scheduler together. A front end (CLI or GUI) owns one ArchiveBrowser and
# drives its scheduler.
#
# Opening an archive:
#   1. read the persisted index (file name = CRC-32 of the archive path)
#   2. when the read completes, decide what the cache is worth:
#        - empty / corrupt / missing        -> full scan
#        - archive replaced or rewritten    -> full scan
#        - archive grew since last scan     -> incremental scan
#        - complete and current             -> nothing to do
#
# reindex() throws the index away and scans everything, then writes the new
# index. close() persists a dirty index before the browser shuts down, with
# at most one write attempt. Opening another archive starts from an empty
# index; unsaved changes to the previous one are dropped with a warning.
# ==============================================================================

import os
from enum import Enum
from typing import Callable, Optional, Union

from .archives.base_reader import ArchiveReader, ArchiveRegistry
from .core.config import Config, get_config
from .core.errors import ArchiveOpenError
from .core.hasher import index_file_path
from .core.index import ArchiveIndex, IndexEntry
from .formats.registry import FileReader, resolve_reader
from .tasks.base import Task
from .tasks.read_index import ReadIndexTask
from .tasks.scan_archive import ScanArchiveTask
from .tasks.scheduler import TaskScheduler
from .tasks.write_index import WriteIndexTask

EntryViewer = Callable[[IndexEntry, FileReader], None]


class CacheStatus(str, Enum):
    """What opening an archive found in the persisted index."""
    MISS = "miss"           # no usable index file
    CORRUPT = "corrupt"     # index file existed but could not be decoded
    REPLACED = "replaced"   # archive shrank or was rewritten in place
    STALE = "stale"         # archive grew; scan resumes
    FRESH = "fresh"         # index is complete and current


class ArchiveBrowser:
    """
    Index orchestration for one open archive at a time.

    Attributes:
        config (Config):           Settings (index dir, bucket size, ...)
        scheduler (TaskScheduler): Runs the browser's tasks
        index (ArchiveIndex):      Index of the open archive
        reader (ArchiveReader):    Open archive, or None
        viewer:                    Optional callable(entry, file_reader)
                                   invoked by view_entry()
        last_cache_status:         CacheStatus found by the last open
        last_write_error:          Error of the last failed index write
    """

    def __init__(self, config: Optional[Config] = None,
                 scheduler: Optional[TaskScheduler] = None,
                 viewer: Optional[EntryViewer] = None):
        self.config = config if config is not None else get_config()
        self.scheduler = scheduler if scheduler is not None else TaskScheduler()
        self.index = ArchiveIndex()
        self.reader: Optional[ArchiveReader] = None
        self.archive_path: Optional[str] = None
        self.viewer = viewer
        self.last_cache_status: Optional[CacheStatus] = None
        self.last_write_error: Optional[str] = None
        self._closing = False
        self._close_write_attempted = False
        self._close_deferred_on: Optional[Task] = None
        self._closed = False

    # ==========================================================================
    # PROPERTIES
    # ==========================================================================

    @property
    def is_open(self) -> bool:
        return self.reader is not None and self.reader.is_open

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def index_path(self) -> str:
        """Persisted index file for the open archive."""
        self._require_open()
        return index_file_path(self.archive_path, self.config.index_dir)

    def _require_open(self):
        if not self.archive_path or self.reader is None:
            raise RuntimeError("No archive is open")

    def _can_start_task(self) -> bool:
        current = self.scheduler.current_task
        return current is None or current.can_abort()

    # ==========================================================================
    # OPENING
    # ==========================================================================

    def open_archive(self, path: str, reader: Optional[ArchiveReader] = None):
        """
        Open an archive and start loading (or building) its index.

        Args:
            path: Archive file
            reader: Reader to use; picked from the ArchiveRegistry if None

        Raises:
            ArchiveOpenError: if the archive cannot be opened
        """
        if not self._can_start_task():
            raise ArchiveOpenError(path, "another task cannot be interrupted")

        if reader is None:
            reader = ArchiveRegistry.get_reader_for_file(path)
            if reader is None:
                raise ArchiveOpenError(path, "unsupported archive format")

        if not reader.open(path):
            raise ArchiveOpenError(path, "unreadable archive")

        # The previous archive's tasks and index must not leak into the new one
        self.scheduler.abort_current(notify=False)
        if self.archive_path and self.index.is_dirty:
            print(f"[WARN] Discarding unsaved index of {self.archive_path}")
        self.index = ArchiveIndex()

        if self.reader is not None and self.reader is not reader:
            self.reader.close()

        self.reader = reader
        self.archive_path = os.path.abspath(path)
        self.last_cache_status = None
        self.last_write_error = None
        self._closing = False
        self._close_write_attempted = False
        self._close_deferred_on = None
        self._closed = False

        read_task = ReadIndexTask(self.index, self.index_path)
        read_task.add_on_complete_handler(lambda: self._on_read_index_complete(read_task))
        if not self.scheduler.perform_task(read_task):
            self.last_cache_status = CacheStatus.MISS
            self._start_full_scan(write_on_complete=False)

    def _on_read_index_complete(self, task: ReadIndexTask):
        if task.was_aborted:
            return

        index = self.index
        total = self.reader.entry_count()
        timestamp = self.reader.modification_time()

        if index.source_timestamp == 0 or index.num_entries == 0:
            self.last_cache_status = CacheStatus.CORRUPT if task.corrupt else CacheStatus.MISS
            print(f"[INFO] No usable index ({self.last_cache_status.value}), rebuilding")
            self._start_full_scan(write_on_complete=False)
        elif index.highest_entry_id > total or (
                index.source_timestamp != timestamp and index.highest_entry_id == total):
            self.last_cache_status = CacheStatus.REPLACED
            print(f"[INFO] Archive changed since it was indexed, rebuilding")
            self._start_full_scan(write_on_complete=False)
        elif index.highest_entry_id < total:
            self.last_cache_status = CacheStatus.STALE
            print(f"[INFO] Index covers {index.highest_entry_id} of {total} entries, resuming")
            index.source_timestamp = timestamp
            self.index_archive(write_on_complete=False)
        else:
            self.last_cache_status = CacheStatus.FRESH
            print(f"[INFO] Index is up to date ({total} entries)")

    # ==========================================================================
    # INDEXING
    # ==========================================================================

    def index_archive(self, write_on_complete: bool = True) -> bool:
        """
        Scan entries the index does not cover yet.

        Args:
            write_on_complete: Persist the index once the scan is done

        Returns:
            True if the scan task was accepted
        """
        self._require_open()
        scan_task = ScanArchiveTask(
            self.index,
            self.reader,
            bucket_size=self.config.category_bucket_size,
            sniff_unknown=self.config.sniff_unknown_types,
            debug=self.config.debug_mode,
        )
        scan_task.add_on_complete_handler(lambda: self._on_scan_complete(scan_task, write_on_complete))
        return self.scheduler.perform_task(scan_task)

    def reindex(self, write_on_complete: bool = True) -> bool:
        """
        Discard the index and rebuild it from scratch.

        Returns:
            False if a task that cannot be interrupted is running
        """
        self._require_open()
        if not self._can_start_task():
            print(f"[WARN] Cannot reindex while {type(self.scheduler.current_task).__name__} runs")
            return False
        return self._start_full_scan(write_on_complete)

    def _start_full_scan(self, write_on_complete: bool) -> bool:
        self.index.clear()
        self.index.source_timestamp = self.reader.modification_time()
        return self.index_archive(write_on_complete)

    def _on_scan_complete(self, task: ScanArchiveTask, write_on_complete: bool):
        if task.was_aborted:
            print(f"[INFO] Scan stopped at entry {task.current_id} of {task.end_id}")
        if write_on_complete:
            if self._closing:
                # Counts as close()'s single write attempt
                self._close_write_attempted = True
            self.save_index()

    def save_index(self) -> bool:
        """
        Queue a write of the index.

        Returns:
            True if the write task was accepted
        """
        self._require_open()
        write_task = WriteIndexTask(self.index, self.index_path)
        write_task.add_on_complete_handler(lambda: self._record_write(write_task))
        return self.scheduler.perform_task(write_task)

    def _record_write(self, task: WriteIndexTask):
        self.last_write_error = task.error

    # ==========================================================================
    # VIEWING
    # ==========================================================================

    def view_entry(self, entry: Union[IndexEntry, int]) -> FileReader:
        """
        Re-read an indexed entry and resolve its reader for display.

        Args:
            entry: IndexEntry or entry id

        Returns:
            FileReader with the entry's bytes

        Raises:
            KeyError: if the entry id is not indexed
        """
        self._require_open()
        if not isinstance(entry, IndexEntry):
            found = self.index.find_entry(entry)
            if found is None:
                raise KeyError(f"Entry {entry} is not indexed")
            entry = found

        data = self.reader.read_entry(entry.entry_id)
        file_reader = resolve_reader(entry.file_type, data or b"", self.config.sniff_unknown_types)
        if self.viewer:
            self.viewer(entry, file_reader)
        return file_reader

    # ==========================================================================
    # CLOSING
    # ==========================================================================

    def close(self) -> bool:
        """
        Prepare for shutdown.

        Aborts the running task if possible (its completion handlers still
        run), otherwise waits for it. Then writes the index once if it is
        dirty. Returns True when everything is finished and the caller may
        terminate; False means work was queued on the scheduler and close()
        will be called again automatically when it completes.
        """
        if self._closed:
            return True
        self._closing = True

        while self.scheduler.has_task:
            task = self.scheduler.current_task
            if not self.scheduler.abort_current(notify=True):
                if self._close_deferred_on is not task:
                    self._close_deferred_on = task
                    task.add_on_complete_handler(self.close)
                return False

        if self.is_open and self.index.is_dirty and not self._close_write_attempted:
            # One attempt only: a write that failed once is likely to fail again
            self._close_write_attempted = True
            write_task = WriteIndexTask(self.index, self.index_path)
            write_task.add_on_complete_handler(lambda: self._on_close_write_complete(write_task))
            if self.scheduler.perform_task(write_task):
                return False

        if self.reader is not None:
            self.reader.close()
        self._closed = True
        print(f"[INFO] Browser closed")
        return True

    def _on_close_write_complete(self, task: WriteIndexTask):
        self._record_write(task)
        self.close()

    def shutdown(self) -> bool:
        """Close, running queued work on the scheduler until finished."""
        while not self.close():
            self.scheduler.run_until_idle()
        return self._closed
