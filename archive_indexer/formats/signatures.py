# ==============================================================================
# SIGNATURES MODULE
# ==============================================================================
# Magic numbers and header validators for every decoder variant.
#
# Each validator takes the raw entry bytes and answers whether the buffer
# starts with the structure its variant expects. Validators only look at
# headers; they never decode payloads. A buffer shorter than a signature
# never matches it.
#
# Pack files ("PF" container):
#   offset 0: b"PF"
#   offset 2: u16 flags, offset 4: u16 zero, offset 6: u16 header size
#   offset 8: fourcc content type (b"MODL", b"ASND", b"ABNK", ...)
# ==============================================================================

from typing import Union

Buffer = Union[bytes, bytearray, memoryview]

# Image fourccs stored at offset 0
IMAGE_FOURCCS = (b"ATEX", b"ATTX", b"ATEC", b"ATEP", b"ATEU", b"ATET", b"DDS ")
JPEG_SIGNATURE = b"\xFF\xD8\xFF"
PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
BMP_SIGNATURE = b"BM"
RIFF_SIGNATURE = b"RIFF"
WEBP_FOURCC = b"WEBP"

# Pack file container
PF_SIGNATURE = b"PF"
PF_HEADER_SIZE = 12
PF_MODEL_FOURCC = b"MODL"
PF_SOUND_FOURCC = b"ASND"
PF_BANK_FOURCC = b"ABNK"

# Ragnarok Online RSM model
RSM_SIGNATURE = b"GRSM"

# Bare headers
STRING_TABLE_SIGNATURE = b"strs"
ASND_SIGNATURE = b"asnd"


def _starts_with(data: Buffer, signature: bytes) -> bool:
    return len(data) >= len(signature) and bytes(data[:len(signature)]) == signature


def pack_file_type(data: Buffer) -> bytes:
    """
    Get the content fourcc of a pack file.

    Returns:
        The 4-byte fourcc, or b"" if data is not a pack file
    """
    if len(data) < PF_HEADER_SIZE or not _starts_with(data, PF_SIGNATURE):
        return b""
    return bytes(data[8:12])


def is_image_header(data: Buffer) -> bool:
    """Check for any supported texture/image header."""
    if len(data) >= 4 and bytes(data[:4]) in IMAGE_FOURCCS:
        return True
    if _starts_with(data, JPEG_SIGNATURE) or _starts_with(data, PNG_SIGNATURE):
        return True
    if len(data) >= 12 and _starts_with(data, RIFF_SIGNATURE) and bytes(data[8:12]) == WEBP_FOURCC:
        return True
    # "BM" alone is too weak; also require the 14 byte file header to fit
    return len(data) >= 14 and _starts_with(data, BMP_SIGNATURE)


def is_model_header(data: Buffer) -> bool:
    return pack_file_type(data) == PF_MODEL_FOURCC or _starts_with(data, RSM_SIGNATURE)


def is_string_table_header(data: Buffer) -> bool:
    return _starts_with(data, STRING_TABLE_SIGNATURE)


def is_packed_sound_header(data: Buffer) -> bool:
    return pack_file_type(data) == PF_SOUND_FOURCC


def is_asnd_header(data: Buffer) -> bool:
    return _starts_with(data, ASND_SIGNATURE)


def is_sound_bank_header(data: Buffer) -> bool:
    return pack_file_type(data) == PF_BANK_FOURCC
