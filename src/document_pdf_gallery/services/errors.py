"""Error kinds raised by the conversion pipeline and storage layer."""
from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from document_pdf_gallery.services.conversion.result import AttemptResult


class ConversionError(Exception):
    """Base class for every conversion/storage failure surfaced to callers."""


class UnsupportedFileType(ConversionError):
    def __init__(self, extension: str):
        self.extension = extension
        super().__init__(f"Unsupported file extension: {extension}")


class SourceNotFound(ConversionError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Source file not found: {path}")


class ConversionMethodFailed(ConversionError):
    """One strategy failed; the chain moves on to the next one."""


class RenderError(ConversionMethodFailed):
    """HTML rendering produced no usable PDF or exceeded its budget."""


class ExternalToolUnavailable(ConversionError):
    """An optional binary or library is not installed."""


class ConversionExhausted(ConversionError):
    def __init__(self, category: str, attempts: Sequence["AttemptResult"]):
        self.category = category
        self.attempts = list(attempts)
        reasons = "; ".join(f"{a.method}: {a.error}" for a in self.attempts) or "no conversion methods configured"
        super().__init__(f"Failed to convert {category} document to PDF ({reasons})")


class StorageWriteFailed(ConversionError):
    """Writing to the public storage disk failed."""
