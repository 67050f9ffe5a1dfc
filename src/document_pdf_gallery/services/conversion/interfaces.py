from __future__ import annotations

from typing import Iterable, Protocol

from document_pdf_gallery.services.conversion.result import AttemptResult


class ConversionStrategy(Protocol):
    """One way of turning a source document into a PDF."""

    name: str
    categories: Iterable[str]

    def available(self) -> bool:
        """Whether the libraries/binaries this strategy needs are present."""
        ...

    def attempt(self, source_path: str, output_path: str, category: str) -> AttemptResult:
        """Try to write ``output_path``; never raises for recoverable failures."""
        ...


class ConversionService(Protocol):
    """Conversion façade: source file in, PDF path out."""

    def convert(self, source_path: str, output_path: str, file_type: str | None = None) -> str:
        """Convert the given file.

        Args:
            source_path: Absolute path to the file to convert.
            output_path: Where the PDF is written.
            file_type: Optional category hint ('pdf', 'word', 'excel', 'image'). Derived from the
                extension when omitted.
        Returns:
            The output path.
        """
        ...
