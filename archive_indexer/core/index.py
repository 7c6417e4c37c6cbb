# ==============================================================================
# ARCHIVE INDEX MODULE
# ==============================================================================
# In-memory index of a scanned archive.
#
# The index owns a flat, id-keyed collection of IndexEntry objects and a
# category tree whose nodes reference (but do not own) those entries. It
# also carries the bookkeeping needed to resume scanning and to validate a
# persisted copy:
#
#   - source_timestamp:  archive modification time the index belongs to
#   - highest_entry_id:  one past the last scanned entry id; scanning
#                        resumes from here
#   - dirty:             changed since it was last persisted
#
# The index performs no I/O. Tasks mutate it one at a time (see tasks/).
# ==============================================================================

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from ..formats.file_types import FileType, ReaderKind
from .errors import DuplicateEntryError


# ==============================================================================
# INDEX ENTRY
# ==============================================================================
@dataclass(frozen=True)
class IndexEntry:
    """
    One classified archive entry.

    Attributes:
        entry_id (int):            Archive entry id
        file_type (FileType):      Type declared by the archive
        reader_kind (ReaderKind):  Variant resolved by header sniffing
        category_path (tuple):     Category names from the root down
        name (str):                Display name
    """
    entry_id: int
    file_type: FileType
    reader_kind: ReaderKind
    category_path: Tuple[str, ...]
    name: str

    def __post_init__(self):
        # Accept any sequence for convenience but store a tuple
        object.__setattr__(self, 'category_path', tuple(self.category_path))


# ==============================================================================
# CATEGORY
# ==============================================================================
class IndexCategory:
    """
    Node in the category tree.

    Child names are unique among siblings and keep insertion order. The
    root category has an empty name.
    """

    def __init__(self, name: str = "", parent: Optional['IndexCategory'] = None):
        self.name = name
        self.parent = parent
        self._children: List['IndexCategory'] = []
        self._children_by_name: Dict[str, 'IndexCategory'] = {}
        self._entries: List[IndexEntry] = []

    def __repr__(self):
        return f"<IndexCategory(path='{'/'.join(self.path)}', entries={len(self._entries)})>"

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def path(self) -> Tuple[str, ...]:
        """Names from below the root down to this category."""
        names = []
        node = self
        while node is not None and not node.is_root:
            names.append(node.name)
            node = node.parent
        return tuple(reversed(names))

    @property
    def children(self) -> Tuple['IndexCategory', ...]:
        return tuple(self._children)

    @property
    def entries(self) -> Tuple[IndexEntry, ...]:
        return tuple(self._entries)

    def find_child(self, name: str) -> Optional['IndexCategory']:
        return self._children_by_name.get(name)

    def add_child(self, name: str) -> 'IndexCategory':
        """Get the child named `name`, creating it if needed."""
        child = self._children_by_name.get(name)
        if child is None:
            child = IndexCategory(name, self)
            self._children.append(child)
            self._children_by_name[name] = child
        return child

    def add_entry(self, entry: IndexEntry):
        self._entries.append(entry)

    def num_entries(self, recursive: bool = False) -> int:
        """Count entries directly in this category, or in the whole subtree."""
        count = len(self._entries)
        if recursive:
            count += sum(child.num_entries(True) for child in self._children)
        return count

    def iter_categories(self) -> Iterator['IndexCategory']:
        """Depth-first iteration over this category and its descendants."""
        yield self
        for child in self._children:
            yield from child.iter_categories()

    def to_tree(self) -> tuple:
        """Nested (name, entry ids, children) tuples describing the subtree."""
        return (
            self.name,
            tuple(entry.entry_id for entry in self._entries),
            tuple(child.to_tree() for child in self._children),
        )


# ==============================================================================
# ARCHIVE INDEX
# ==============================================================================
class ArchiveIndex:
    """
    The queryable index of one archive.

    Invariants:
        - entry ids are unique
        - highest_entry_id never decreases except through clear()
        - is_dirty is True whenever entries, source_timestamp or
          highest_entry_id changed since mark_clean()
    """

    def __init__(self):
        self._entries: Dict[int, IndexEntry] = {}
        self._root = IndexCategory()
        self._source_timestamp = 0
        self._highest_entry_id = 0
        self._dirty = False

    def __repr__(self):
        return (f"<ArchiveIndex(entries={len(self._entries)}, "
                f"highest={self._highest_entry_id}, dirty={self._dirty})>")

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entry_id: int) -> bool:
        return entry_id in self._entries

    def __eq__(self, other):
        if not isinstance(other, ArchiveIndex):
            return NotImplemented
        return (self._source_timestamp == other._source_timestamp
                and self._highest_entry_id == other._highest_entry_id
                and self.entries == other.entries
                and self._root.to_tree() == other._root.to_tree())

    __hash__ = None

    # -------------------------------------------------------------------------
    # STATE
    # -------------------------------------------------------------------------

    @property
    def source_timestamp(self) -> int:
        return self._source_timestamp

    @source_timestamp.setter
    def source_timestamp(self, value: int):
        value = int(value)
        if value != self._source_timestamp:
            self._source_timestamp = value
            self._dirty = True

    @property
    def highest_entry_id(self) -> int:
        return self._highest_entry_id

    @highest_entry_id.setter
    def highest_entry_id(self, value: int):
        value = int(value)
        if value < self._highest_entry_id:
            raise ValueError(
                f"highest_entry_id cannot move backwards ({self._highest_entry_id} -> {value})"
            )
        if value != self._highest_entry_id:
            self._highest_entry_id = value
            self._dirty = True

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    def mark_clean(self):
        """Record that the current state has been persisted."""
        self._dirty = False

    def clear(self):
        """Drop all entries and categories and reset the bookkeeping."""
        self._entries = {}
        self._root = IndexCategory()
        self._source_timestamp = 0
        self._highest_entry_id = 0
        self._dirty = True

    def assign(self, other: 'ArchiveIndex'):
        """Replace this index's contents with those of `other` (bulk load)."""
        self._entries = dict(other._entries)
        self._root = other._root
        self._source_timestamp = other._source_timestamp
        self._highest_entry_id = other._highest_entry_id
        self._dirty = other._dirty

    # -------------------------------------------------------------------------
    # ENTRIES
    # -------------------------------------------------------------------------

    @property
    def num_entries(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> List[IndexEntry]:
        """All entries in insertion order."""
        return list(self._entries.values())

    def find_entry(self, entry_id: int) -> Optional[IndexEntry]:
        return self._entries.get(entry_id)

    def add_entry(self, entry: IndexEntry) -> IndexEntry:
        """
        Add an entry and file it under its category path.

        Raises:
            DuplicateEntryError: if the entry id is already indexed
        """
        if entry.entry_id in self._entries:
            raise DuplicateEntryError(entry.entry_id)
        self._entries[entry.entry_id] = entry
        self.category(entry.category_path).add_entry(entry)
        self._dirty = True
        return entry

    # -------------------------------------------------------------------------
    # CATEGORIES
    # -------------------------------------------------------------------------

    @property
    def root(self) -> IndexCategory:
        return self._root

    def category(self, path: Sequence[str]) -> IndexCategory:
        """Get the category at `path`, creating missing levels."""
        node = self._root
        for name in path:
            node = node.add_child(name)
        return node

    def find_category(self, path: Sequence[str]) -> Optional[IndexCategory]:
        """Get the category at `path`, or None if any level is missing."""
        node = self._root
        for name in path:
            node = node.find_child(name)
            if node is None:
                return None
        return node

    def category_tree(self) -> tuple:
        return self._root.to_tree()
