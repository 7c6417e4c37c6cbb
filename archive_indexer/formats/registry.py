# ==============================================================================
# FORMAT REGISTRY MODULE
# ==============================================================================
# Picks the decoder variant for an archive entry.
#
# The archive's declared type is only a pre-filter: it narrows the list of
# candidate variants, and each candidate must then accept the entry's
# header bytes. The first candidate whose header validator accepts the
# bytes wins; if none does, the entry resolves to ReaderKind.RAW, which
# accepts anything. A declared type never resolves to an unrelated
# variant, so stale or wrong metadata degrades to RAW instead of producing
# a mistyped reader.
#
# Resolution is pure: same (file_type, bytes) always gives the same result.
#
# Usage:
#   from archive_indexer.formats import resolve_reader, FileType
#   reader = resolve_reader(FileType.DDS, data)
#   if reader.kind is ReaderKind.IMAGE:
#       ...
# ==============================================================================

from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple

from .file_types import FileType, ReaderKind, IMAGE_FILE_TYPES
from . import signatures


# ==============================================================================
# FILE READER VARIANT
# ==============================================================================
@dataclass(frozen=True)
class FileReader:
    """
    Result of format dispatch: a tagged variant over ReaderKind.

    Attributes:
        kind (ReaderKind):    Resolved decoder variant
        file_type (FileType): Type the archive declared for the entry
        data (bytes):         Raw entry bytes, unmodified
    """
    kind: ReaderKind
    file_type: FileType
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def is_raw(self) -> bool:
        return self.kind is ReaderKind.RAW

    def header(self, length: int = 16) -> bytes:
        """First bytes of the entry, for previews and diagnostics."""
        return self.data[:length]


# ==============================================================================
# FORMAT REGISTRY
# ==============================================================================
class FormatRegistry:
    """
    Closed registry mapping declared types to header-validated variants.

    VALIDATORS holds one header check per specific variant. CANDIDATES
    lists, per declared type, the variants worth trying, most specific
    first. Types missing from CANDIDATES (and UNKNOWN when sniffing is
    off) go straight to RAW.
    """

    VALIDATORS: Dict[ReaderKind, Callable[[bytes], bool]] = {
        ReaderKind.IMAGE: signatures.is_image_header,
        ReaderKind.MODEL: signatures.is_model_header,
        ReaderKind.STRING_TABLE: signatures.is_string_table_header,
        ReaderKind.PACKED_SOUND: signatures.is_packed_sound_header,
        ReaderKind.ASND_SOUND: signatures.is_asnd_header,
        ReaderKind.SOUND_BANK: signatures.is_sound_bank_header,
    }

    # Order used when the archive declares nothing
    SNIFF_ORDER: Tuple[ReaderKind, ...] = (
        ReaderKind.IMAGE,
        ReaderKind.MODEL,
        ReaderKind.STRING_TABLE,
        ReaderKind.SOUND_BANK,
        ReaderKind.PACKED_SOUND,
        ReaderKind.ASND_SOUND,
    )

    CANDIDATES: Dict[FileType, Tuple[ReaderKind, ...]] = {
        **{file_type: (ReaderKind.IMAGE,) for file_type in IMAGE_FILE_TYPES},
        FileType.MODEL: (ReaderKind.MODEL,),
        FileType.STRING_FILE: (ReaderKind.STRING_TABLE,),
        FileType.PACKED_MP3: (ReaderKind.PACKED_SOUND, ReaderKind.ASND_SOUND),
        FileType.PACKED_OGG: (ReaderKind.PACKED_SOUND, ReaderKind.ASND_SOUND),
        FileType.ASND_MP3: (ReaderKind.ASND_SOUND, ReaderKind.PACKED_SOUND),
        FileType.SOUND_BANK: (ReaderKind.SOUND_BANK,),
    }

    @classmethod
    def candidates_for(cls, file_type: FileType, sniff_unknown: bool = True) -> Tuple[ReaderKind, ...]:
        """
        Get the candidate variants for a declared type, most specific first.

        RAW is never listed; it is the implicit last resort.
        """
        if file_type is FileType.UNKNOWN:
            return cls.SNIFF_ORDER if sniff_unknown else ()
        return cls.CANDIDATES.get(file_type, ())

    @classmethod
    def resolve(cls, file_type: FileType, data: bytes, sniff_unknown: bool = True) -> FileReader:
        """
        Resolve the decoder variant for an entry.

        Args:
            file_type: Type declared by the archive (untrusted)
            data: Raw entry bytes
            sniff_unknown: Try every variant when file_type is UNKNOWN

        Returns:
            FileReader whose kind passed header validation, or a RAW reader
        """
        payload = bytes(data)
        for kind in cls.candidates_for(file_type, sniff_unknown):
            if cls.VALIDATORS[kind](payload):
                return FileReader(kind=kind, file_type=file_type, data=payload)
        return FileReader(kind=ReaderKind.RAW, file_type=file_type, data=payload)

    @classmethod
    def list_supported_types(cls) -> List[FileType]:
        """Get the declared types that can resolve to a specific variant."""
        return sorted(cls.CANDIDATES, key=lambda file_type: file_type.value)


def resolve_reader(file_type: FileType, data: bytes, sniff_unknown: bool = True) -> FileReader:
    """Convenience wrapper around FormatRegistry.resolve()."""
    return FormatRegistry.resolve(file_type, data, sniff_unknown)
