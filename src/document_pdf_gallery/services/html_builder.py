"""Build the intermediate HTML fed to the renderer and the headless browser."""
import html as html_lib
import os
from typing import Optional, Tuple

import mammoth
from bs4 import BeautifulSoup, Doctype

from document_pdf_gallery.services import spreadsheet
from document_pdf_gallery.services.errors import ConversionMethodFailed
from document_pdf_gallery.services.html_renderer import (
    PORTRAIT,
    RendererOptions,
    page_dimensions,
    pixels_to_points,
)
from document_pdf_gallery.services.image_optimizer import OptimizedImage

MINIMAL_CSS = """
<style>
    * { box-sizing: border-box; }
    body {
        margin: 15px;
        font-size: 11pt;
    }
    img { max-width: 100%; height: auto; }
    @page { margin: 1cm; }
</style>"""

SHEET_CSS = """
<style>
    table.sheet { border-collapse: collapse; }
    table.sheet td { border: 0.5px solid #d0d0d0; padding: 2px 4px; font-size: 9pt; vertical-align: top; }
</style>"""

IMAGE_PAGE_MARGIN_PX = 10


def wrap_html_minimal(html: str) -> str:
    """Re-wrap a writer's HTML in a minimal shell that keeps its own <style> blocks.

    The document's html/head/body wrapper is dropped; styles are hoisted into the
    new <head> after the minimal CSS so the original formatting still wins.
    """
    soup = BeautifulSoup(html, 'html.parser')
    existing_styles = [str(tag) for tag in soup.find_all('style')]
    for tag in soup.find_all('style'):
        tag.decompose()
    for tag in soup.find_all('head'):
        tag.decompose()
    for tag in soup.find_all(['html', 'body']):
        tag.unwrap()
    for item in list(soup.contents):
        if isinstance(item, Doctype):
            item.extract()

    return (
        '<!DOCTYPE html>\n<html>\n<head>\n    <meta charset="UTF-8">\n'
        f"    {MINIMAL_CSS}\n    {chr(10).join(existing_styles)}\n"
        f"</head>\n<body>{soup.decode_contents()}</body>\n</html>"
    )


def word_to_html(source_path: str) -> str:
    """Convert a .docx to an HTML fragment (images inlined as data URIs)."""
    ext = os.path.splitext(source_path)[1].lstrip('.').lower()
    if ext != 'docx':
        raise ConversionMethodFailed(f"Word format '.{ext}' has no HTML writer; office suite required")
    with open(source_path, 'rb') as f:
        result = mammoth.convert_to_html(f)
    if not result.value or not result.value.strip():
        raise ConversionMethodFailed(f"HTML writer produced no content for {os.path.basename(source_path)}")
    return result.value


def _cell_style(cell) -> str:
    rules = []
    font = cell.font
    if font is not None:
        if font.b:
            rules.append('font-weight: bold')
        if font.i:
            rules.append('font-style: italic')
        color = getattr(font.color, 'rgb', None) if font.color is not None else None
        if isinstance(color, str) and len(color) == 8 and color not in ('FF000000', '00000000'):
            rules.append(f'color: #{color[2:]}')
    fill = cell.fill
    if fill is not None and fill.fill_type == 'solid':
        rgb = getattr(fill.fgColor, 'rgb', None)
        if isinstance(rgb, str) and len(rgb) == 8 and rgb != '00000000':
            rules.append(f'background-color: #{rgb[2:]}')
    alignment = cell.alignment
    if alignment is not None and alignment.horizontal in ('left', 'center', 'right'):
        rules.append(f'text-align: {alignment.horizontal}')
    elif isinstance(cell.value, (int, float)):
        rules.append('text-align: right')
    return '; '.join(rules)


def _merge_spans(sheet):
    """Map of top-left cell -> (rowspan, colspan) plus the set of covered cells."""
    spans, covered = {}, set()
    for merged in sheet.merged_cells.ranges:
        spans[(merged.min_row, merged.min_col)] = (
            merged.max_row - merged.min_row + 1,
            merged.max_col - merged.min_col + 1,
        )
        for row in range(merged.min_row, merged.max_row + 1):
            for col in range(merged.min_col, merged.max_col + 1):
                if (row, col) != (merged.min_row, merged.min_col):
                    covered.add((row, col))
    return spans, covered


def excel_to_html(source_path: str) -> str:
    """Render the first worksheet's used range as an HTML table with basic cell styling."""
    sheet = spreadsheet.load_first_sheet(source_path)
    max_row, max_col = spreadsheet.used_range(sheet)
    spans, covered = _merge_spans(sheet)

    parts = [SHEET_CSS, '<table class="sheet">']
    for col in range(1, max_col + 1):
        parts.append(f'<col style="width: {spreadsheet.column_width_points(sheet, col):.1f}pt">')
    for row in range(1, max_row + 1):
        parts.append('<tr>')
        for col in range(1, max_col + 1):
            if (row, col) in covered:
                continue
            cell = sheet.cell(row=row, column=col)
            attrs = ''
            if (row, col) in spans:
                rowspan, colspan = spans[(row, col)]
                attrs = f' rowspan="{rowspan}" colspan="{colspan}"'
            style = _cell_style(cell)
            if style:
                attrs += f' style="{style}"'
            parts.append(f'<td{attrs}>{html_lib.escape(spreadsheet.cell_text(cell.value))}</td>')
        parts.append('</tr>')
    parts.append('</table>')
    return '\n'.join(parts)


def image_display_size(image: OptimizedImage, orientation: str, options: RendererOptions) -> Tuple[float, float]:
    """Size in points at the renderer DPI, shrunk to fit the page content box."""
    page_width, page_height = page_dimensions(options, orientation)
    margin = pixels_to_points(IMAGE_PAGE_MARGIN_PX, 96)
    max_width, max_height = page_width - 2 * margin, page_height - 2 * margin
    width = pixels_to_points(image.width, options.dpi)
    height = pixels_to_points(image.height, options.dpi)
    scale = min(1.0, max_width / width, max_height / height)
    return width * scale, height * scale


def image_page_html(image: OptimizedImage, orientation: str = PORTRAIT,
                    options: Optional[RendererOptions] = None) -> str:
    """A single centred image on one page."""
    options = options or RendererOptions()
    _, page_height = page_dimensions(options, orientation)
    margin = pixels_to_points(IMAGE_PAGE_MARGIN_PX, 96)
    width, height = image_display_size(image, orientation, options)
    top = max(0.0, (page_height - 2 * margin - height) / 2)
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <style>
        @page {{ margin: {margin:.2f}pt; }}
        * {{ margin: 0; padding: 0; }}
        body {{ text-align: center; }}
    </style>
</head>
<body>
    <div style="padding-top: {top:.2f}pt; text-align: center;">
        <img src="{image.data_uri}" alt="Image" style="width: {width:.2f}pt; height: {height:.2f}pt;" />
    </div>
</body>
</html>"""
