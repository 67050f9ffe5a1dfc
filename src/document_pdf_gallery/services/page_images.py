"""Helpers for the screenshot-per-page conversion: page counting and image → PDF assembly."""
import os
import re
from typing import Sequence, Union

from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from document_pdf_gallery.services.errors import ConversionMethodFailed

# Matches page objects but not the /Pages tree node
_PAGE_PATTERN = re.compile(rb'/Type\s*/Page[^s]')


def count_pdf_pages(pdf: Union[str, bytes]) -> int:
    """Estimate the page count by matching page objects in the raw PDF bytes (minimum 1)."""
    if isinstance(pdf, str):
        if not os.path.exists(pdf):
            return 1
        with open(pdf, 'rb') as f:
            pdf = f.read()
    return max(1, len(_PAGE_PATTERN.findall(pdf)))


def combine_images_to_pdf(image_paths: Sequence[str], pdf_path: str, page_size=A4) -> None:
    """Write one image per page, stretched full-bleed over the page with no margins."""
    if not image_paths:
        raise ConversionMethodFailed("No images provided for PDF generation")

    page_width, page_height = page_size
    pdf = canvas.Canvas(pdf_path, pagesize=page_size)
    for image_path in image_paths:
        pdf.drawImage(ImageReader(image_path), 0, 0, width=page_width, height=page_height, mask='auto')
        pdf.showPage()
    pdf.save()
