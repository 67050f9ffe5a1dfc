"""Extension → category lookup used by uploads and the conversion façade."""
from typing import Dict, Iterable, Optional

from document_pdf_gallery.config import Config
from document_pdf_gallery.models import FileCategory

_TYPE_TABLES = {
    FileCategory.PDF: Config.PDF_TYPES,
    FileCategory.WORD: Config.WORD_TYPES,
    FileCategory.EXCEL: Config.EXCEL_TYPES,
    FileCategory.IMAGE: Config.IMAGE_TYPES,
}


def _build_lookup(tables) -> Dict[str, FileCategory]:
    lookup = {}
    for category, extensions in tables.items():
        for ext in extensions:
            lookup[ext.lower()] = category
    return lookup


_LOOKUP = _build_lookup(_TYPE_TABLES)

ALLOWED_EXTENSIONS = frozenset(_LOOKUP)


def normalize_extension(extension: str) -> str:
    return (extension or "").strip().lstrip(".").lower()


def get_file_type(extension: str) -> Optional[FileCategory]:
    """Return the category for an extension, or None when it is not accepted."""
    return _LOOKUP.get(normalize_extension(extension))


def extensions_for(category: FileCategory) -> Iterable[str]:
    return tuple(_TYPE_TABLES[FileCategory(category)])


def accept_attribute() -> str:
    """Value for the upload input's ``accept`` attribute, in configuration order."""
    return ",".join(f".{ext}" for extensions in _TYPE_TABLES.values() for ext in extensions)
