from __future__ import annotations

import logging
import os
import shutil
import tempfile
from typing import Dict, List, Mapping, Optional, Sequence

from document_pdf_gallery.models import FileCategory
from document_pdf_gallery.services.conversion.interfaces import ConversionService, ConversionStrategy
from document_pdf_gallery.services.conversion.result import AttemptResult
from document_pdf_gallery.services.errors import ConversionExhausted, SourceNotFound, UnsupportedFileType
from document_pdf_gallery.services.file_types import get_file_type

logger = logging.getLogger(__name__)


class DefaultConversionService(ConversionService):
    """Resolves the category of a source file and runs that category's strategy chain.

    ``chains`` maps a category value ('word', 'excel', 'image') to the ordered
    strategies to try. PDFs are never converted, only copied.
    """

    def __init__(self, chains: Mapping[str, Sequence[ConversionStrategy]], storage=None, pdfs_dir: str = 'files/pdfs'):
        self.chains: Dict[str, List[ConversionStrategy]] = {k: list(v) for k, v in chains.items()}
        self.storage = storage
        self.pdfs_dir = pdfs_dir

    @staticmethod
    def get_file_type(extension: str) -> Optional[str]:
        category = get_file_type(extension)
        return category.value if category else None

    def convert(self, source_path: str, output_path: str, file_type: str | None = None) -> str:
        if not os.path.isfile(source_path):
            raise SourceNotFound(source_path)

        if file_type is None:
            extension = os.path.splitext(source_path)[1]
            file_type = self.get_file_type(extension)
            if file_type is None:
                raise UnsupportedFileType(extension.lstrip('.').lower())
        else:
            try:
                file_type = FileCategory(file_type).value
            except ValueError:
                raise UnsupportedFileType(file_type) from None

        output_dir = os.path.dirname(os.path.abspath(output_path))
        os.makedirs(output_dir, exist_ok=True)

        if file_type == FileCategory.PDF.value:
            if os.path.abspath(source_path) != os.path.abspath(output_path):
                shutil.copyfile(source_path, output_path)
            return output_path

        result = self.run_chain(file_type, source_path, output_path)
        logger.info("Converted %s to PDF via %s", os.path.basename(source_path), result.method)
        return output_path

    def convert_to_pdf(self, source_path: str, file_type: str, hash_name: str) -> str:
        """Convert into the public disk at ``files/pdfs/<hash_name>.pdf``; returns the relative path."""
        if self.storage is None:
            raise RuntimeError("Storage is not configured for this service. Use convert() instead.")
        pdf_path = f"{self.pdfs_dir}/{hash_name}.pdf"
        self.convert(source_path, self.storage.path(pdf_path), file_type)
        return pdf_path

    def run_chain(self, category: str, source_path: str, output_path: str) -> AttemptResult:
        """Try each strategy once, in order; raise ConversionExhausted if none succeeds.

        Every attempt writes into its own temp file beside ``output_path`` which is
        moved into place only on success, so a failed chain leaves no output behind.
        """
        attempts: List[AttemptResult] = []
        output_dir = os.path.dirname(os.path.abspath(output_path))

        for strategy in self.chains.get(category, []):
            fd, partial_path = tempfile.mkstemp(prefix='.partial_', suffix='.pdf', dir=output_dir)
            os.close(fd)
            try:
                result = strategy.attempt(source_path, partial_path, category)
                if result.ok:
                    os.replace(partial_path, output_path)
                    result.output_path = output_path
                    return result
            finally:
                if os.path.exists(partial_path):
                    os.remove(partial_path)

            attempts.append(result)
            if result.unavailable:
                logger.info("Skipping %s for %s: %s", result.method, os.path.basename(source_path), result.error)
            else:
                logger.warning("%s conversion failed for %s, trying next method: %s",
                               result.method, os.path.basename(source_path), result.error)

        error = ConversionExhausted(category, attempts)
        logger.error(str(error))
        raise error

    def describe_chains(self) -> Dict[str, List[dict]]:
        return {
            category: [{'name': s.name, 'available': s.available()} for s in strategies]
            for category, strategies in self.chains.items()
        }
