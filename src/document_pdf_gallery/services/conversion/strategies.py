"""Conversion strategies for the word/excel/image chains.

Each strategy reports availability up front and turns every recoverable
failure into an ``AttemptResult``; the façade decides what to try next.
"""
from __future__ import annotations

import importlib.util
import logging
import os
import tempfile
from dataclasses import dataclass, field
from typing import Tuple

from document_pdf_gallery.models import FileCategory
from document_pdf_gallery.services import html_builder, libreoffice, native_writers
from document_pdf_gallery.services.conversion.registry import register
from document_pdf_gallery.services.conversion.result import AttemptResult
from document_pdf_gallery.services.errors import ConversionMethodFailed, ExternalToolUnavailable
from document_pdf_gallery.services.html_renderer import (
    LANDSCAPE,
    PORTRAIT,
    RendererOptions,
    render_html_to_pdf,
)
from document_pdf_gallery.services.image_optimizer import optimize_image_for_pdf, read_image_info
from document_pdf_gallery.services.page_images import combine_images_to_pdf, count_pdf_pages

logger = logging.getLogger(__name__)

# A4 at 96 DPI in CSS pixels
A4_WIDTH_PX = 794
A4_HEIGHT_PX = 1123


@dataclass(frozen=True)
class StrategySettings:
    renderer: RendererOptions = field(default_factory=RendererOptions)
    libreoffice_timeout: float = 120
    browser_timeout_ms: int = 60000
    image_max_width: int = 2000
    image_max_height: int = 2000

    @classmethod
    def from_config(cls, config) -> "StrategySettings":
        return cls(
            renderer=RendererOptions.from_config(config),
            libreoffice_timeout=config.get('LIBREOFFICE_TIMEOUT', 120),
            browser_timeout_ms=config.get('BROWSER_TIMEOUT_MS', 60000),
            image_max_width=config.get('IMAGE_MAX_WIDTH', 2000),
            image_max_height=config.get('IMAGE_MAX_HEIGHT', 2000),
        )


def source_html(source_path: str, category: str) -> str:
    """Format-specific HTML writer output wrapped in the minimal CSS shell."""
    if category == FileCategory.WORD.value:
        body = html_builder.word_to_html(source_path)
    elif category == FileCategory.EXCEL.value:
        body = html_builder.excel_to_html(source_path)
    else:
        raise ConversionMethodFailed(f"No HTML writer for category '{category}'")
    return html_builder.wrap_html_minimal(body)


def orientation_for(category: str) -> str:
    return LANDSCAPE if category == FileCategory.EXCEL.value else PORTRAIT


class BaseStrategy:
    name = ''
    categories: Tuple[str, ...] = ()

    def __init__(self, settings: StrategySettings | None = None):
        self.settings = settings or StrategySettings()

    def available(self) -> bool:
        return True

    def run(self, source_path: str, output_path: str, category: str) -> None:
        raise NotImplementedError

    def attempt(self, source_path: str, output_path: str, category: str) -> AttemptResult:
        if not self.available():
            return AttemptResult.skipped(self.name, f"{self.name} dependencies are not installed")
        try:
            self.run(source_path, output_path, category)
        except ExternalToolUnavailable as e:
            return AttemptResult.skipped(self.name, str(e))
        except ConversionMethodFailed as e:
            return AttemptResult.failure(self.name, str(e))
        except Exception as e:
            logger.debug("%s failed for %s", self.name, source_path, exc_info=True)
            return AttemptResult.failure(self.name, f"{type(e).__name__}: {e}")

        if not os.path.exists(output_path) or os.path.getsize(output_path) == 0:
            return AttemptResult.failure(self.name, "no PDF was written")
        return AttemptResult.success(self.name, output_path)


@register('image-based')
class BrowserImageStrategy(BaseStrategy):
    """HTML → headless Chromium screenshots per A4 page → image PDF."""
    categories = (FileCategory.WORD.value, FileCategory.EXCEL.value)

    def available(self) -> bool:
        return importlib.util.find_spec('playwright') is not None

    def run(self, source_path, output_path, category):
        from playwright.sync_api import Error as PlaywrightError
        from playwright.sync_api import sync_playwright

        html = source_html(source_path, category)
        margin = {'top': '15px', 'right': '15px', 'bottom': '15px', 'left': '15px'}

        with tempfile.TemporaryDirectory(prefix='browser_pages_') as workdir:
            html_file = os.path.join(workdir, 'document.html')
            with open(html_file, 'w', encoding='utf-8') as f:
                f.write(html)

            image_paths = []
            try:
                with sync_playwright() as p:
                    browser = p.chromium.launch(headless=True)
                    try:
                        page = browser.new_page(viewport={'width': A4_WIDTH_PX, 'height': A4_HEIGHT_PX})
                        page.set_default_timeout(self.settings.browser_timeout_ms)
                        page.goto(f"file://{html_file}", wait_until='load')
                        page.emulate_media(media='print')

                        probe_pdf = os.path.join(workdir, 'count.pdf')
                        page.pdf(path=probe_pdf, format='A4', print_background=True, margin=margin)
                        page_count = count_pdf_pages(probe_pdf)

                        page.set_viewport_size({'width': A4_WIDTH_PX, 'height': A4_HEIGHT_PX * page_count})
                        for number in range(page_count):
                            image_path = os.path.join(workdir, f'page_{number + 1}.png')
                            page.screenshot(
                                path=image_path,
                                type='png',
                                clip={'x': 0, 'y': number * A4_HEIGHT_PX, 'width': A4_WIDTH_PX, 'height': A4_HEIGHT_PX},
                            )
                            image_paths.append(image_path)
                    finally:
                        browser.close()
            except PlaywrightError as e:
                raise ConversionMethodFailed(f"Headless browser rendering failed: {e}") from e

            combine_images_to_pdf(image_paths, output_path)
        logger.info("Rendered %s page image(s) for %s", len(image_paths), os.path.basename(source_path))


@register('libreoffice')
class LibreOfficeStrategy(BaseStrategy):
    categories = (FileCategory.WORD.value, FileCategory.EXCEL.value)

    def available(self) -> bool:
        return libreoffice.is_available()

    def run(self, source_path, output_path, category):
        libreoffice.convert_with_libreoffice(source_path, output_path, timeout=self.settings.libreoffice_timeout)


@register('native')
class NativeWriterStrategy(BaseStrategy):
    """Library writer straight to PDF; a minimal-CSS HTML render backs it up."""
    categories = (FileCategory.WORD.value, FileCategory.EXCEL.value)

    def run(self, source_path, output_path, category):
        try:
            if category == FileCategory.WORD.value:
                native_writers.write_word_pdf(source_path, output_path)
            elif category == FileCategory.EXCEL.value:
                area = native_writers.write_excel_pdf(source_path, output_path)
                logger.debug("Excel print area for %s: %s", source_path, area)
            else:
                raise ConversionMethodFailed(f"No native writer for category '{category}'")
            return
        except Exception as e:
            logger.warning("Native %s PDF writer failed, falling back to HTML method: %s", category, e)
            native_error = e

        try:
            render_html_to_pdf(source_html(source_path, category), output_path,
                               orientation_for(category), self.settings.renderer)
        except Exception as e:
            raise ConversionMethodFailed(f"native writer failed ({native_error}); HTML fallback failed ({e})") from e


@register('html')
class HtmlRenderStrategy(BaseStrategy):
    categories = (FileCategory.WORD.value, FileCategory.EXCEL.value)

    def run(self, source_path, output_path, category):
        render_html_to_pdf(source_html(source_path, category), output_path,
                           orientation_for(category), self.settings.renderer)


@register('image')
class ImageStrategy(BaseStrategy):
    """Single image, optimized and centred on an A4 page oriented like the image."""
    categories = (FileCategory.IMAGE.value,)

    def run(self, source_path, output_path, category):
        width, height, mime_type = read_image_info(source_path)
        orientation = LANDSCAPE if width > height else PORTRAIT
        image = optimize_image_for_pdf(
            source_path, mime_type, width, height,
            max_width=self.settings.image_max_width, max_height=self.settings.image_max_height,
        )
        html = html_builder.image_page_html(image, orientation, self.settings.renderer)
        render_html_to_pdf(html, output_path, orientation, self.settings.renderer)
