# ==============================================================================
# FILE TYPES MODULE
# ==============================================================================
# Enumerations shared by the archive readers, the format registry and the
# index:
#
#   - FileType:   the type an archive *declares* for an entry (from its
#                 metadata, e.g. the file extension). Only a hint.
#   - ReaderKind: the decoder variant an entry resolves to after its bytes
#                 were header-sniffed. RAW accepts anything.
#
# The extension table maps names found in archive file tables to declared
# hints. Unknown extensions map to FileType.UNKNOWN.
# ==============================================================================

import os
from enum import Enum
from typing import Dict, Optional


class FileType(str, Enum):
    """Declared type hint of an archive entry."""

    UNKNOWN = "unknown"

    # Images
    ATEX = "atex"
    ATTX = "attx"
    ATEC = "atec"
    ATEP = "atep"
    ATEU = "ateu"
    ATET = "atet"
    DDS = "dds"
    JPEG = "jpeg"
    WEBP = "webp"
    PNG = "png"
    BMP = "bmp"

    # Models
    MODEL = "model"

    # Strings
    STRING_FILE = "string_file"

    # Sounds
    PACKED_MP3 = "packed_mp3"
    PACKED_OGG = "packed_ogg"
    ASND_MP3 = "asnd_mp3"
    SOUND_BANK = "sound_bank"

    @property
    def label(self) -> str:
        return FILE_TYPE_LABELS[self]


class ReaderKind(str, Enum):
    """Resolved decoder variant of an archive entry."""

    RAW = "raw"
    IMAGE = "image"
    MODEL = "model"
    STRING_TABLE = "string_table"
    PACKED_SOUND = "packed_sound"
    ASND_SOUND = "asnd_sound"
    SOUND_BANK = "sound_bank"

    @property
    def group(self) -> str:
        """Top-level category name used in the index tree."""
        return READER_KIND_GROUPS[self]


IMAGE_FILE_TYPES = frozenset({
    FileType.ATEX, FileType.ATTX, FileType.ATEC, FileType.ATEP,
    FileType.ATEU, FileType.ATET, FileType.DDS, FileType.JPEG,
    FileType.WEBP, FileType.PNG, FileType.BMP,
})

FILE_TYPE_LABELS: Dict[FileType, str] = {
    FileType.UNKNOWN: "Unknown",
    FileType.ATEX: "ATEX",
    FileType.ATTX: "ATTX",
    FileType.ATEC: "ATEC",
    FileType.ATEP: "ATEP",
    FileType.ATEU: "ATEU",
    FileType.ATET: "ATET",
    FileType.DDS: "DDS",
    FileType.JPEG: "JPEG",
    FileType.WEBP: "WebP",
    FileType.PNG: "PNG",
    FileType.BMP: "BMP",
    FileType.MODEL: "Model",
    FileType.STRING_FILE: "Strings",
    FileType.PACKED_MP3: "Packed MP3",
    FileType.PACKED_OGG: "Packed OGG",
    FileType.ASND_MP3: "asnd MP3",
    FileType.SOUND_BANK: "Bank",
}

READER_KIND_GROUPS: Dict[ReaderKind, str] = {
    ReaderKind.RAW: "Raw",
    ReaderKind.IMAGE: "Textures",
    ReaderKind.MODEL: "Models",
    ReaderKind.STRING_TABLE: "Strings",
    ReaderKind.PACKED_SOUND: "Sounds",
    ReaderKind.ASND_SOUND: "Sounds",
    ReaderKind.SOUND_BANK: "Sound Banks",
}


# ==============================================================================
# EXTENSION MAPPING
# ==============================================================================

EXTENSION_FILE_TYPES: Dict[str, FileType] = {
    '.atex': FileType.ATEX,
    '.attx': FileType.ATTX,
    '.atec': FileType.ATEC,
    '.atep': FileType.ATEP,
    '.ateu': FileType.ATEU,
    '.atet': FileType.ATET,
    '.dds': FileType.DDS,
    '.jpg': FileType.JPEG,
    '.jpeg': FileType.JPEG,
    '.webp': FileType.WEBP,
    '.png': FileType.PNG,
    '.bmp': FileType.BMP,
    '.modl': FileType.MODEL,
    '.rsm': FileType.MODEL,
    '.strs': FileType.STRING_FILE,
    '.mp3': FileType.PACKED_MP3,
    '.ogg': FileType.PACKED_OGG,
    '.asnd': FileType.ASND_MP3,
    '.abnk': FileType.SOUND_BANK,
    '.bnk': FileType.SOUND_BANK,
}


def file_type_for_name(name: Optional[str]) -> FileType:
    """
    Get the declared type hint for an entry name.

    Args:
        name: Entry path inside the archive (any separator), or None

    Returns:
        FileType matching the extension, FileType.UNKNOWN otherwise
    """
    if not name:
        return FileType.UNKNOWN
    ext = os.path.splitext(name.replace('\\', '/'))[1].lower()
    return EXTENSION_FILE_TYPES.get(ext, FileType.UNKNOWN)
