from archive_indexer.core.index import ArchiveIndex
from archive_indexer.formats.file_types import FileType, ReaderKind
from archive_indexer.tasks import ScanArchiveTask, TaskScheduler, category_path_for, display_name_for


def run_scan(index, archive, **kwargs):
    scheduler = TaskScheduler()
    task = ScanArchiveTask(index, archive, **kwargs)
    accepted = scheduler.perform_task(task)
    scheduler.run_until_idle()
    return task, accepted


class TestCategoryPath:
    def test_bucketed_path(self):
        assert category_path_for(ReaderKind.IMAGE, FileType.ATEX, 1234) == ["Textures", "ATEX", "1000-1999"]

    def test_custom_bucket_size(self):
        assert category_path_for(ReaderKind.MODEL, FileType.MODEL, 7, bucket_size=5) == ["Models", "Model", "5-9"]

    def test_bucketing_disabled(self):
        assert category_path_for(ReaderKind.RAW, FileType.UNKNOWN, 7, bucket_size=0) == ["Raw", "Unknown"]


class TestDisplayName:
    def test_uses_base_name(self):
        assert display_name_for(3, "data\\texture\\foo.bmp") == "foo.bmp"
        assert display_name_for(3, "data/sprite/bar.spr") == "bar.spr"

    def test_falls_back_to_id(self):
        assert display_name_for(3, None) == "3"
        assert display_name_for(3, "") == "3"


class TestScanArchiveTask:
    def test_full_scan(self, memory_archive, entries_factory):
        archive = memory_archive(entries_factory(10))
        archive.open("mem")
        index = ArchiveIndex()

        task, accepted = run_scan(index, archive)

        assert accepted
        assert task.state.value == "done"
        assert index.num_entries == 10
        assert index.highest_entry_id == 10
        assert archive.reads == list(range(10))
        assert index.find_entry(0).reader_kind is ReaderKind.IMAGE
        assert index.find_entry(1).reader_kind is ReaderKind.MODEL
        assert index.find_entry(2).reader_kind is ReaderKind.RAW
        assert index.find_entry(2).category_path == ("Raw", "Unknown", "0-999")

    def test_every_id_indexed_exactly_once(self, memory_archive, entries_factory):
        archive = memory_archive(entries_factory(7))
        archive.open("mem")
        index = ArchiveIndex()
        run_scan(index, archive)
        assert sorted(e.entry_id for e in index.entries) == list(range(7))

    def test_resumes_from_highest_entry_id(self, memory_archive, entries_factory):
        archive = memory_archive(entries_factory(5))
        archive.open("mem")
        index = ArchiveIndex()
        run_scan(index, archive)

        archive.entries.extend(entries_factory(3, start=5))
        archive.reads.clear()
        task, accepted = run_scan(index, archive)

        assert accepted
        assert task.start_id == 5
        assert task.end_id == 8
        assert archive.reads == [5, 6, 7]
        assert index.highest_entry_id == 8

    def test_up_to_date_index_finishes_immediately(self, memory_archive, entries_factory):
        archive = memory_archive(entries_factory(4))
        archive.open("mem")
        index = ArchiveIndex()
        run_scan(index, archive)
        archive.reads.clear()

        scheduler = TaskScheduler()
        task = ScanArchiveTask(index, archive)
        assert scheduler.perform_task(task)
        assert task.is_done()
        scheduler.run_until_idle()
        assert archive.reads == []

    def test_empty_archive(self, memory_archive):
        archive = memory_archive([])
        archive.open("mem")
        index = ArchiveIndex()
        task, accepted = run_scan(index, archive)
        assert accepted
        assert index.num_entries == 0
        assert index.highest_entry_id == 0

    def test_rejected_when_index_is_ahead(self, memory_archive, entries_factory):
        archive = memory_archive(entries_factory(2))
        archive.open("mem")
        index = ArchiveIndex()
        index.highest_entry_id = 5
        task, accepted = run_scan(index, archive)
        assert not accepted
        assert archive.reads == []

    def test_rejected_when_archive_closed(self, memory_archive, entries_factory):
        archive = memory_archive(entries_factory(2))
        task, accepted = run_scan(ArchiveIndex(), archive)
        assert not accepted

    def test_abort_keeps_consistent_prefix(self, memory_archive, entries_factory):
        archive = memory_archive(entries_factory(10))
        archive.open("mem")
        index = ArchiveIndex()
        scheduler = TaskScheduler()
        task = ScanArchiveTask(index, archive)
        scheduler.perform_task(task)
        for _ in range(4):
            scheduler.step()
        assert scheduler.abort_current()

        assert task.was_aborted
        assert index.highest_entry_id == 4
        assert sorted(e.entry_id for e in index.entries) == [0, 1, 2, 3]

        # Resuming indexes only the rest
        archive.reads.clear()
        run_scan(index, archive)
        assert archive.reads == list(range(4, 10))
        assert index.num_entries == 10

    def test_unreadable_entry_is_indexed_as_raw(self, memory_archive):
        archive = memory_archive([(FileType.ATEX, None)])
        archive.open("mem")
        index = ArchiveIndex()
        run_scan(index, archive)
        entry = index.find_entry(0)
        assert entry.reader_kind is ReaderKind.RAW
        assert entry.file_type is FileType.ATEX

    def test_sniffing_can_be_disabled(self, memory_archive, payloads):
        archive = memory_archive([(FileType.UNKNOWN, payloads['png'])])
        archive.open("mem")
        index = ArchiveIndex()
        run_scan(index, archive, sniff_unknown=False)
        assert index.find_entry(0).reader_kind is ReaderKind.RAW

    def test_entry_names(self, memory_archive, payloads):
        archive = memory_archive([(FileType.ATEX, payloads['atex'], "data\\texture\\a.atex"),
                                  (FileType.ATEX, payloads['atex'])])
        archive.open("mem")
        index = ArchiveIndex()
        run_scan(index, archive)
        assert index.find_entry(0).name == "a.atex"
        assert index.find_entry(1).name == "1"

    def test_progress(self, memory_archive, entries_factory):
        archive = memory_archive(entries_factory(3))
        archive.open("mem")
        reports = []
        scheduler = TaskScheduler(lambda *args: reports.append(args))
        scheduler.perform_task(ScanArchiveTask(ArchiveIndex(), archive))
        scheduler.run_until_idle()
        assert reports[0][:2] == (0, 3)
        assert reports[-1] == (3, 3, "")
