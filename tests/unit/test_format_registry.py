import pytest

from archive_indexer.formats import FileType, FormatRegistry, ReaderKind, file_type_for_name, resolve_reader
from archive_indexer.formats import signatures


class TestFileTypeForName:
    @pytest.mark.parametrize("name, expected", [
        ("data/texture/foo.ATEX", FileType.ATEX),
        ("data\\model\\prontera\\house.rsm", FileType.MODEL),
        ("sound.mp3", FileType.PACKED_MP3),
        ("picture.jpg", FileType.JPEG),
        ("readme.txt", FileType.UNKNOWN),
        ("no_extension", FileType.UNKNOWN),
        ("", FileType.UNKNOWN),
        (None, FileType.UNKNOWN),
    ])
    def test_extensions(self, name, expected):
        assert file_type_for_name(name) == expected


class TestSignatures:
    def test_pack_file_type(self, payloads):
        assert signatures.pack_file_type(payloads['model']) == b"MODL"
        assert signatures.pack_file_type(b"PF\x00") == b""
        assert signatures.pack_file_type(payloads['junk']) == b""

    def test_bmp_needs_full_file_header(self):
        assert not signatures.is_image_header(b"BM")
        assert signatures.is_image_header(b"BM" + b"\x00" * 12)

    def test_webp_needs_fourcc(self):
        assert signatures.is_image_header(b"RIFF\x10\x00\x00\x00WEBPVP8 ")
        assert not signatures.is_image_header(b"RIFF\x10\x00\x00\x00WAVEfmt ")

    def test_empty_input(self):
        for check in FormatRegistry.VALIDATORS.values():
            assert check(b"") is False


class TestResolve:
    def test_declared_type_with_valid_header(self, payloads):
        reader = resolve_reader(FileType.ATEX, payloads['atex'])
        assert reader.kind is ReaderKind.IMAGE
        assert reader.file_type is FileType.ATEX
        assert reader.data == payloads['atex']

    def test_declared_type_with_wrong_header_falls_back_to_raw(self, payloads):
        reader = resolve_reader(FileType.ATEX, payloads['model'])
        assert reader.kind is ReaderKind.RAW
        assert reader.is_raw

    def test_declared_type_restricts_candidates(self, payloads):
        # A model header declared as strings is not sniffed as a model
        assert resolve_reader(FileType.STRING_FILE, payloads['model']).kind is ReaderKind.RAW

    def test_sound_candidates_in_order(self, payloads):
        assert resolve_reader(FileType.PACKED_MP3, payloads['packed_sound']).kind is ReaderKind.PACKED_SOUND
        assert resolve_reader(FileType.PACKED_MP3, payloads['asnd']).kind is ReaderKind.ASND_SOUND
        assert resolve_reader(FileType.ASND_MP3, payloads['asnd']).kind is ReaderKind.ASND_SOUND
        assert resolve_reader(FileType.ASND_MP3, payloads['packed_sound']).kind is ReaderKind.PACKED_SOUND

    def test_unknown_is_sniffed(self, payloads):
        assert resolve_reader(FileType.UNKNOWN, payloads['png']).kind is ReaderKind.IMAGE
        assert resolve_reader(FileType.UNKNOWN, payloads['bank']).kind is ReaderKind.SOUND_BANK
        assert resolve_reader(FileType.UNKNOWN, payloads['strings']).kind is ReaderKind.STRING_TABLE
        assert resolve_reader(FileType.UNKNOWN, payloads['junk']).kind is ReaderKind.RAW

    def test_unknown_without_sniffing_is_raw(self, payloads):
        reader = resolve_reader(FileType.UNKNOWN, payloads['png'], sniff_unknown=False)
        assert reader.kind is ReaderKind.RAW

    def test_empty_data_is_raw(self):
        reader = resolve_reader(FileType.PNG, b"")
        assert reader.kind is ReaderKind.RAW
        assert reader.size == 0

    def test_accepts_bytearray(self, payloads):
        reader = resolve_reader(FileType.MODEL, bytearray(payloads['model']))
        assert reader.kind is ReaderKind.MODEL
        assert isinstance(reader.data, bytes)

    def test_resolution_is_deterministic(self, payloads):
        first = resolve_reader(FileType.UNKNOWN, payloads['asnd'])
        second = resolve_reader(FileType.UNKNOWN, payloads['asnd'])
        assert first == second

    def test_header_preview(self, payloads):
        reader = resolve_reader(FileType.ATEX, payloads['atex'])
        assert reader.header(4) == b"ATEX"
        assert len(reader.header()) == 16


class TestCandidates:
    def test_raw_is_never_a_candidate(self):
        for file_type in FileType:
            assert ReaderKind.RAW not in FormatRegistry.candidates_for(file_type)

    def test_unknown_candidates_depend_on_sniffing(self):
        assert FormatRegistry.candidates_for(FileType.UNKNOWN) == FormatRegistry.SNIFF_ORDER
        assert FormatRegistry.candidates_for(FileType.UNKNOWN, sniff_unknown=False) == ()

    def test_supported_types_exclude_unknown(self):
        supported = FormatRegistry.list_supported_types()
        assert FileType.UNKNOWN not in supported
        assert FileType.ATEX in supported
        assert FileType.SOUND_BANK in supported

    def test_every_kind_has_a_group(self):
        for kind in ReaderKind:
            assert kind.group
        assert ReaderKind.IMAGE.group == "Textures"
