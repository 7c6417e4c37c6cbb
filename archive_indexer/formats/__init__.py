# ==============================================================================
# FORMATS MODULE INIT
# ==============================================================================
# Entry classification by header sniffing.
#
#   - FileType:       declared type hints from archive metadata
#   - ReaderKind:     resolved decoder variants
#   - FormatRegistry: hint pre-filter + header validation dispatch
#   - FileReader:     the resolved (kind, declared type, bytes) variant
# ==============================================================================

from .file_types import FileType, ReaderKind, file_type_for_name
from .registry import FileReader, FormatRegistry, resolve_reader

__all__ = [
    'FileType',
    'ReaderKind',
    'file_type_for_name',
    'FileReader',
    'FormatRegistry',
    'resolve_reader',
]
