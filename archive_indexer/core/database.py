# ==============================================================================
# INDEX DATABASE MODULE
# ==============================================================================
# On-disk format of a persisted archive index. Each *.idx file is a small
# SQLite database accessed through the SQLAlchemy ORM.
#
# Tables:
#   - index_info: one row; format version, archive timestamp, scan position
#   - categories: category tree, ids assigned in depth-first pre-order so a
#                 parent always has a smaller id than its children and
#                 siblings keep their order
#   - entries:    indexed entries in insertion order (sequence column)
#
# Writes go to "<name>.idx.tmp" which is renamed over the target once the
# transaction has committed, so an interrupted write never leaves a
# half-written index behind.
#
# Usage:
#   db = IndexDatabase("C:\\Users\\me\\AppData\\Roaming\\ArchiveIndexer\\indexes\\1c291ca3.idx")
#   db.write(index)
#   loaded = db.read()     # raises CorruptIndexError on bad contents
# ==============================================================================

import os
from datetime import datetime
from typing import Dict, List

from sqlalchemy import create_engine, Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from ..formats.file_types import FileType, ReaderKind
from .errors import CorruptIndexError
from .index import ArchiveIndex, IndexCategory, IndexEntry

# Bumped whenever the table layout changes; older files are treated as corrupt
INDEX_FORMAT_VERSION = 1

# ==============================================================================
# SQLAlchemy Base Class
# ==============================================================================
Base = declarative_base()


# ==============================================================================
# INDEX INFO MODEL
# ==============================================================================
class IndexInfo(Base):
    """
    Header row of a persisted index.

    Attributes:
        format_version (int):   INDEX_FORMAT_VERSION at write time
        source_timestamp (int): Archive modification time the index belongs to
        highest_entry_id (int): Scan position (one past the last scanned id)
        entry_count (int):      Number of rows in the entries table
        written_at (datetime):  When the file was written
    """
    __tablename__ = 'index_info'

    id = Column(Integer, primary_key=True)
    format_version = Column(Integer, nullable=False)
    source_timestamp = Column(Integer, nullable=False)
    highest_entry_id = Column(Integer, nullable=False)
    entry_count = Column(Integer, nullable=False)
    written_at = Column(DateTime, default=datetime.now)

    def __repr__(self):
        return (f"<IndexInfo(version={self.format_version}, "
                f"timestamp={self.source_timestamp}, highest={self.highest_entry_id})>")


# ==============================================================================
# CATEGORY MODEL
# ==============================================================================
class CategoryRecord(Base):
    """A node of the category tree. The root row has parent_id NULL."""
    __tablename__ = 'categories'

    id = Column(Integer, primary_key=True, autoincrement=False)
    parent_id = Column(Integer, ForeignKey('categories.id'), nullable=True)
    name = Column(String(255), nullable=False)

    def __repr__(self):
        return f"<CategoryRecord(id={self.id}, parent={self.parent_id}, name='{self.name}')>"


# ==============================================================================
# ENTRY MODEL
# ==============================================================================
class EntryRecord(Base):
    """An indexed archive entry."""
    __tablename__ = 'entries'

    entry_id = Column(Integer, primary_key=True, autoincrement=False)
    sequence = Column(Integer, nullable=False)
    file_type = Column(String(32), nullable=False)
    reader_kind = Column(String(32), nullable=False)
    category_id = Column(Integer, ForeignKey('categories.id'), nullable=False)
    name = Column(Text, nullable=False)

    def __repr__(self):
        return f"<EntryRecord(entry_id={self.entry_id}, kind='{self.reader_kind}')>"


# ==============================================================================
# INDEX DATABASE CLASS
# ==============================================================================
class IndexDatabase:
    """
    Reader/writer for one persisted index file.

    Attributes:
        db_path (str): Path to the *.idx file
    """

    def __init__(self, db_path: str):
        self.db_path = db_path

    @property
    def temp_path(self) -> str:
        return f"{self.db_path}.tmp"

    # -------------------------------------------------------------------------
    # WRITING
    # -------------------------------------------------------------------------

    def write(self, index: ArchiveIndex):
        """
        Persist an index, replacing any previous file atomically.

        Does not touch the index's dirty flag; the caller decides.

        Raises:
            OSError: if the file cannot be created or renamed
            SQLAlchemyError: if the database cannot be written
        """
        self._remove_temp()

        categories, category_ids = self._category_rows(index.root)
        entries = [
            {
                'entry_id': entry.entry_id,
                'sequence': sequence,
                'file_type': entry.file_type.value,
                'reader_kind': entry.reader_kind.value,
                'category_id': category_ids[entry.category_path],
                'name': entry.name,
            }
            for sequence, entry in enumerate(index.entries)
        ]

        engine = create_engine(f'sqlite:///{self.temp_path}', echo=False)
        try:
            Base.metadata.create_all(engine)
            Session = sessionmaker(bind=engine)
            session = Session()
            try:
                session.add(IndexInfo(
                    id=1,
                    format_version=INDEX_FORMAT_VERSION,
                    source_timestamp=index.source_timestamp,
                    highest_entry_id=index.highest_entry_id,
                    entry_count=len(entries),
                ))
                session.bulk_insert_mappings(CategoryRecord, categories)
                session.bulk_insert_mappings(EntryRecord, entries)
                session.commit()
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()
        except Exception:
            engine.dispose()
            self._remove_temp()
            raise
        engine.dispose()

        try:
            os.replace(self.temp_path, self.db_path)
        except OSError:
            self._remove_temp()
            raise

    @staticmethod
    def _category_rows(root: IndexCategory):
        """Number categories in pre-order; returns (rows, path -> id)."""
        rows: List[dict] = []
        ids: Dict[tuple, int] = {}
        for category in root.iter_categories():
            category_id = len(rows)
            ids[category.path] = category_id
            parent_id = None if category.is_root else ids[category.parent.path]
            rows.append({'id': category_id, 'parent_id': parent_id, 'name': category.name})
        return rows, ids

    def _remove_temp(self):
        if os.path.exists(self.temp_path):
            os.remove(self.temp_path)

    # -------------------------------------------------------------------------
    # READING
    # -------------------------------------------------------------------------

    def read(self) -> ArchiveIndex:
        """
        Load the persisted index.

        Returns:
            A new, clean ArchiveIndex

        Raises:
            CorruptIndexError: if the file is not a valid index
        """
        engine = create_engine(f'sqlite:///{self.db_path}', echo=False)
        Session = sessionmaker(bind=engine)
        session = Session()
        try:
            return self._read(session)
        except SQLAlchemyError as e:
            raise CorruptIndexError(f"Unreadable index {self.db_path}: {e}") from e
        except (ValueError, KeyError, TypeError) as e:
            raise CorruptIndexError(f"Invalid index contents in {self.db_path}: {e}") from e
        finally:
            session.close()
            engine.dispose()

    def _read(self, session) -> ArchiveIndex:
        infos = session.query(IndexInfo).all()
        if len(infos) != 1:
            raise CorruptIndexError(f"Expected one header row, found {len(infos)}")
        info = infos[0]
        if info.format_version != INDEX_FORMAT_VERSION:
            raise CorruptIndexError(
                f"Unsupported index format version {info.format_version}"
            )

        index = ArchiveIndex()

        # Categories (pre-order ids: parents are always seen first)
        paths: Dict[int, tuple] = {}
        for record in session.query(CategoryRecord).order_by(CategoryRecord.id):
            if record.parent_id is None:
                if paths:
                    raise CorruptIndexError("Category tree has more than one root")
                paths[record.id] = ()
                continue
            if record.parent_id not in paths:
                raise CorruptIndexError(f"Category {record.id} has unknown parent {record.parent_id}")
            parent_path = paths[record.parent_id]
            parent = index.find_category(parent_path)
            if parent.find_child(record.name) is not None:
                raise CorruptIndexError(f"Duplicate category name '{record.name}'")
            parent.add_child(record.name)
            paths[record.id] = parent_path + (record.name,)

        # Entries
        count = 0
        for record in session.query(EntryRecord).order_by(EntryRecord.sequence):
            if record.entry_id < 0 or record.entry_id >= info.highest_entry_id:
                raise CorruptIndexError(f"Entry {record.entry_id} lies beyond the scan position")
            index.add_entry(IndexEntry(
                entry_id=record.entry_id,
                file_type=FileType(record.file_type),
                reader_kind=ReaderKind(record.reader_kind),
                category_path=paths[record.category_id],
                name=record.name,
            ))
            count += 1

        if count != info.entry_count:
            raise CorruptIndexError(f"Expected {info.entry_count} entries, found {count}")

        index.source_timestamp = info.source_timestamp
        index.highest_entry_id = info.highest_entry_id
        index.mark_clean()
        return index
