# ==============================================================================
# BASE READER MODULE
# ==============================================================================
# Abstract base class for read-only archive accessors, plus an
# ArchiveRegistry for picking the right accessor for a file.
#
# An accessor exposes an archive as a dense list of entries numbered
# 0..entry_count()-1 in archive table order. For each entry it can return
# the uncompressed bytes, the type the archive metadata declares, and a
# name if the archive stores one.
#
# To add support for a new archive format:
#   1. Subclass ArchiveReader and implement all abstract methods
#   2. Call ArchiveRegistry.register(MyReader) at module level
#   3. Import the module in archives/__init__.py
# ==============================================================================

import os
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ..formats.file_types import FileType


def archive_modification_time(path: str) -> int:
    """
    Get an archive's modification time in whole seconds.

    Returns:
        Integer mtime, or 0 if the file cannot be stat'ed
    """
    try:
        return int(os.stat(path).st_mtime)
    except OSError:
        return 0


# ==============================================================================
# BASE READER ABSTRACT CLASS
# ==============================================================================
class ArchiveReader(ABC):
    """
    Abstract base class for archive accessors.

    The typical workflow is:
        1. Create reader instance
        2. Open an archive with open()
        3. Query entry_count() and read entries by id
        4. Close with close()

    Or use as a context manager:
        with GRFReader() as reader:
            reader.open("data.grf")
            data = reader.read_entry(0)
    """

    def __init__(self):
        self.archive_path: Optional[str] = None
        self._is_open = False

    # ==========================================================================
    # ABSTRACT PROPERTIES - Must be implemented by subclasses
    # ==========================================================================

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Human-readable name of the archive format."""

    @property
    @abstractmethod
    def supported_extensions(self) -> List[str]:
        """File extensions including the dot (e.g., ['.grf', '.gpf'])."""

    @property
    @abstractmethod
    def reader_id(self) -> str:
        """Short unique identifier (e.g., "grf")."""

    # ==========================================================================
    # ABSTRACT METHODS - Must be implemented by subclasses
    # ==========================================================================

    @abstractmethod
    def detect(self, path: str) -> bool:
        """
        Check if this reader can handle the given file.

        Should check the extension and the file signature.
        """

    @abstractmethod
    def open(self, archive_path: str) -> bool:
        """
        Open an archive for reading.

        Returns:
            True if successfully opened, False otherwise
        """

    @abstractmethod
    def close(self):
        """Close the archive and release resources."""

    @abstractmethod
    def entry_count(self) -> int:
        """Number of entries; ids run from 0 to entry_count() - 1."""

    @abstractmethod
    def read_entry(self, entry_id: int) -> Optional[bytes]:
        """
        Get the uncompressed bytes of an entry.

        Returns:
            Entry contents, or None if the entry cannot be read
        """

    @abstractmethod
    def entry_type_hint(self, entry_id: int) -> FileType:
        """Type declared for the entry by the archive metadata."""

    # ==========================================================================
    # COMMON METHODS
    # ==========================================================================

    @property
    def is_open(self) -> bool:
        return self._is_open

    def entry_name(self, entry_id: int) -> Optional[str]:
        """Stored name of the entry, or None if the format has no names."""
        return None

    def modification_time(self) -> int:
        """Modification time of the open archive (0 if none is open)."""
        if not self.archive_path:
            return 0
        return archive_modification_time(self.archive_path)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


# ==============================================================================
# ARCHIVE REGISTRY
# ==============================================================================
class ArchiveRegistry:
    """
    Registry of available archive readers.

    Usage:
        ArchiveRegistry.register(GRFReader)
        reader = ArchiveRegistry.get_reader_for_file("data.grf")
    """

    _readers: Dict[str, type] = {}

    @classmethod
    def register(cls, reader_class: type):
        """Register a reader class under its reader_id."""
        reader_id = reader_class().reader_id
        cls._readers[reader_id] = reader_class
        return reader_class

    @classmethod
    def get_reader_for_file(cls, file_path: str) -> Optional[ArchiveReader]:
        """
        Find a reader that recognises the file, without opening it.

        Returns:
            A fresh, unopened reader instance, or None
        """
        for reader_id, reader_class in cls._readers.items():
            reader = reader_class()
            try:
                if reader.detect(file_path):
                    return reader
            except OSError as e:
                print(f"[WARN] Error checking reader {reader_id}: {e}")
        return None

    @classmethod
    def list_supported_extensions(cls) -> List[str]:
        extensions = []
        for reader_class in cls._readers.values():
            extensions.extend(reader_class().supported_extensions)
        return sorted(set(extensions))
