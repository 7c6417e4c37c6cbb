# ==============================================================================
# SCAN ARCHIVE TASK MODULE
# ==============================================================================
# Builds or extends an ArchiveIndex from an open archive, one entry per step.
#
# The scan covers the half-open id range
#     [index.highest_entry_id, reader.entry_count())
# so re-running it after an abort, or after the archive grew, continues
# exactly where the previous scan stopped and never classifies an id twice.
# highest_entry_id advances after every entry, which keeps an aborted scan
# consistent: every id below it is indexed, none above it is.
#
# Each entry is classified by the FormatRegistry from its declared type and
# its actual bytes, then filed under:
#     [<variant group>, <declared type label>, "<lo>-<hi>"]
# where the last level buckets entry ids (disabled when bucket_size is 0).
# ==============================================================================

from typing import List, Optional

from ..archives.base_reader import ArchiveReader
from ..core.index import ArchiveIndex, IndexEntry
from ..formats.file_types import FileType, ReaderKind
from ..formats.registry import resolve_reader
from .base import Task

DEFAULT_BUCKET_SIZE = 1000


def category_path_for(kind: ReaderKind, file_type: FileType, entry_id: int,
                      bucket_size: int = DEFAULT_BUCKET_SIZE) -> List[str]:
    """
    Derive the category path of a classified entry.

    Example:
        >>> category_path_for(ReaderKind.IMAGE, FileType.ATEX, 1234)
        ['Textures', 'ATEX', '1000-1999']
    """
    path = [kind.group, file_type.label]
    if bucket_size > 0:
        low = (entry_id // bucket_size) * bucket_size
        path.append(f"{low}-{low + bucket_size - 1}")
    return path


def display_name_for(entry_id: int, stored_name: Optional[str]) -> str:
    """Use the archive's own name (without directories) when it has one."""
    if stored_name:
        base = stored_name.replace('\\', '/').rstrip('/').rsplit('/', 1)[-1]
        if base:
            return base
    return str(entry_id)


class ScanArchiveTask(Task):
    """
    Task that classifies archive entries into an index.

    Attributes:
        index (ArchiveIndex):   Index being extended
        reader (ArchiveReader): Open archive
        bucket_size (int):      Entry ids per category bucket (0 = none)
        sniff_unknown (bool):   Header-sniff entries with no declared type
    """

    def __init__(self, index: ArchiveIndex, reader: ArchiveReader,
                 bucket_size: int = DEFAULT_BUCKET_SIZE,
                 sniff_unknown: bool = True, debug: bool = False):
        super().__init__()
        self.index = index
        self.reader = reader
        self.bucket_size = bucket_size
        self.sniff_unknown = sniff_unknown
        self.debug = debug
        self._start_id = 0
        self._end_id = 0
        self._current_id = 0

    @property
    def start_id(self) -> int:
        return self._start_id

    @property
    def end_id(self) -> int:
        return self._end_id

    @property
    def current_id(self) -> int:
        return self._current_id

    def init(self) -> bool:
        if not self.reader.is_open:
            print(f"[ERROR] Cannot scan: archive is not open")
            return False

        start = self.index.highest_entry_id
        end = self.reader.entry_count()
        if start > end:
            print(f"[ERROR] Cannot scan: index is ahead of the archive ({start} > {end})")
            return False

        self._start_id = start
        self._end_id = end
        self._current_id = start
        self._max_progress = end - start
        self._current_progress = 0
        self._text = f"Scanning archive: {start}/{end}"
        super().init()

        if start == end:
            self.finish()
        else:
            print(f"[INFO] Scanning entries {start} to {end - 1}")
        return True

    def perform(self):
        if self.is_done():
            return

        entry_id = self._current_id
        data = self.reader.read_entry(entry_id)
        if data is None:
            print(f"[WARN] Could not read entry {entry_id}, indexing it as raw")
            data = b""

        file_type = self.reader.entry_type_hint(entry_id)
        file_reader = resolve_reader(file_type, data, self.sniff_unknown)

        entry = IndexEntry(
            entry_id=entry_id,
            file_type=file_type,
            reader_kind=file_reader.kind,
            category_path=category_path_for(file_reader.kind, file_type, entry_id, self.bucket_size),
            name=display_name_for(entry_id, self.reader.entry_name(entry_id)),
        )
        self.index.add_entry(entry)
        if self.debug:
            print(f"[DEBUG] {entry_id}: {file_type.value} -> {file_reader.kind.value}")

        self._current_id = entry_id + 1
        self.index.highest_entry_id = self._current_id
        self._current_progress = self._current_id - self._start_id
        self._text = f"Scanning archive: {self._current_id}/{self._end_id}"

        if self._current_id >= self._end_id:
            print(f"[SUCCESS] Scanned {self._end_id - self._start_id} entries")
            self.finish()
