"""HTML → PDF rendering with a fixed option set (xhtml2pdf on top of ReportLab).

xhtml2pdf parses with html5lib and ReportLab subsets every embedded TrueType
font, so those two behaviours need no switches here. The remaining options are
explicit, including the byte budget that bounds a single render.
"""
import io
import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple

from bs4 import BeautifulSoup
from reportlab.lib import pagesizes
from xhtml2pdf import pisa

from document_pdf_gallery.services.errors import RenderError

logger = logging.getLogger(__name__)

PORTRAIT = 'portrait'
LANDSCAPE = 'landscape'


@dataclass(frozen=True)
class RendererOptions:
    page_size: str = 'A4'
    dpi: int = 150
    default_font: str = 'Helvetica'
    media_type: str = 'print'
    remote_enabled: bool = True
    scripts_enabled: bool = False
    min_output_bytes: int = 100
    max_html_bytes: int = 64 * 1024 * 1024

    @classmethod
    def from_config(cls, config) -> "RendererOptions":
        return cls(
            dpi=config.get('PDF_DPI', 150),
            min_output_bytes=config.get('PDF_MIN_BYTES', 100),
            max_html_bytes=config.get('PDF_MAX_HTML_BYTES', 64 * 1024 * 1024),
        )


def page_dimensions(options: RendererOptions, orientation: str = PORTRAIT) -> Tuple[float, float]:
    """Page width/height in points for the configured paper size."""
    size = getattr(pagesizes, options.page_size.upper(), pagesizes.A4)
    if orientation == LANDSCAPE:
        return pagesizes.landscape(size)
    return pagesizes.portrait(size)


def pixels_to_points(pixels: int, dpi: int) -> float:
    return pixels * 72.0 / dpi


def _make_link_callback(options: RendererOptions, base_dir: Optional[str]):
    def link_callback(uri, rel):
        if uri.startswith('data:'):
            return uri
        if uri.startswith(('http://', 'https://')):
            return uri if options.remote_enabled else ''
        if base_dir and not os.path.isabs(uri):
            return os.path.join(base_dir, uri)
        return uri
    return link_callback


def _matches_media(media_attr: Optional[str], media_type: str) -> bool:
    if not media_attr:
        return True
    media = {m.strip().lower() for m in media_attr.split(',')}
    return 'all' in media or media_type in media


def prepare_html(html: str, options: RendererOptions, orientation: str = PORTRAIT) -> str:
    """Drop scripts and off-media stylesheets, then pin the page size and default font."""
    soup = BeautifulSoup(html, 'html.parser')
    if not options.scripts_enabled:
        for tag in soup.find_all('script'):
            tag.decompose()
    for tag in soup.find_all(['style', 'link']):
        if not _matches_media(tag.get('media'), options.media_type):
            tag.decompose()

    page_css = soup.new_tag('style')
    page_css.string = (
        f"@page {{ size: {options.page_size.lower()} {orientation}; }}\n"
        f"body {{ font-family: {options.default_font}; }}"
    )
    # Placed first so the document's own styles still win
    if soup.head is not None:
        soup.head.insert(0, page_css)
    else:
        soup.insert(0, page_css)
    return str(soup)


def render_html_to_pdf(html: str, output_path: str, orientation: str = PORTRAIT,
                       options: Optional[RendererOptions] = None, base_dir: Optional[str] = None) -> int:
    """Render HTML to a PDF file and return the number of bytes written.

    Raises:
        RenderError: the input exceeds the byte budget, xhtml2pdf reports errors,
            or the output is smaller than ``min_output_bytes``.
    """
    options = options or RendererOptions()
    if len(html.encode('utf-8')) > options.max_html_bytes:
        raise RenderError(f"HTML input exceeds render budget of {options.max_html_bytes} bytes")

    prepared = prepare_html(html, options, orientation)
    buffer = io.BytesIO()
    try:
        status = pisa.CreatePDF(
            src=prepared,
            dest=buffer,
            encoding='utf-8',
            link_callback=_make_link_callback(options, base_dir),
        )
    except Exception as e:
        raise RenderError(f"PDF generation failed: {e}") from e

    if status.err:
        raise RenderError(f"PDF generation failed: xhtml2pdf reported {status.err} error(s)")

    output = buffer.getvalue()
    if len(output) < options.min_output_bytes:
        raise RenderError("Generated PDF is empty or corrupted")

    with open(output_path, 'wb') as f:
        f.write(output)

    if not os.path.exists(output_path) or os.path.getsize(output_path) < options.min_output_bytes:
        raise RenderError("Failed to write PDF file")

    logger.debug("Rendered %s bytes of PDF to %s (%s)", len(output), output_path, orientation)
    return len(output)
