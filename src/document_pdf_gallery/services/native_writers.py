"""Direct library → PDF writers (python-docx / openpyxl into ReportLab platypus)."""
import os
from xml.sax.saxutils import escape

from docx import Document as load_docx
from docx.table import Table as DocxTable
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape, portrait
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from document_pdf_gallery.services import spreadsheet
from document_pdf_gallery.services.errors import ConversionMethodFailed

PAGE_MARGIN = 1 * cm

_HEADING_STYLES = {
    'Title': 'Title',
    'Heading 1': 'Heading1',
    'Heading 2': 'Heading2',
    'Heading 3': 'Heading3',
    'Heading 4': 'Heading4',
}


def _run_markup(paragraph) -> str:
    parts = []
    for run in paragraph.runs:
        text = escape(run.text or '')
        if not text:
            continue
        if run.bold:
            text = f"<b>{text}</b>"
        if run.italic:
            text = f"<i>{text}</i>"
        if run.underline:
            text = f"<u>{text}</u>"
        parts.append(text)
    return ''.join(parts)


def _docx_table(table: DocxTable, width: float, body_style) -> Table:
    rows = [[Paragraph(escape(cell.text), body_style) for cell in row.cells] for row in table.rows]
    columns = max((len(r) for r in rows), default=1)
    for row in rows:
        row.extend(Paragraph('', body_style) for _ in range(columns - len(row)))
    flowable = Table(rows, colWidths=[width / columns] * columns)
    flowable.setStyle(TableStyle([
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
    ]))
    return flowable


def write_word_pdf(source_path: str, pdf_path: str) -> None:
    ext = os.path.splitext(source_path)[1].lstrip('.').lower()
    if ext != 'docx':
        raise ConversionMethodFailed(f"Word format '.{ext}' cannot be read by python-docx")

    document = load_docx(source_path)
    styles = getSampleStyleSheet()
    body_style = styles['BodyText']
    page_size = portrait(A4)
    frame_width = page_size[0] - 2 * PAGE_MARGIN

    story = []
    for block in document.iter_inner_content():
        if isinstance(block, DocxTable):
            story.append(_docx_table(block, frame_width, body_style))
            story.append(Spacer(1, 6))
            continue
        markup = _run_markup(block)
        if not markup.strip():
            story.append(Spacer(1, 6))
            continue
        style_name = _HEADING_STYLES.get(block.style.name if block.style is not None else '', 'BodyText')
        story.append(Paragraph(markup, styles[style_name]))

    if not any(not isinstance(f, Spacer) for f in story):
        raise ConversionMethodFailed("Word document has no renderable content")

    SimpleDocTemplate(
        pdf_path, pagesize=page_size,
        leftMargin=PAGE_MARGIN, rightMargin=PAGE_MARGIN, topMargin=PAGE_MARGIN, bottomMargin=PAGE_MARGIN,
    ).build(story)


def write_excel_pdf(source_path: str, pdf_path: str) -> str:
    """Render the first sheet following its print setup; returns the print area used."""
    sheet = spreadsheet.load_first_sheet(source_path)
    print_area = spreadsheet.apply_print_setup(sheet)
    max_row, max_col = spreadsheet.used_range(sheet)

    setup = sheet.page_setup
    page_size = landscape(A4) if setup.orientation == sheet.ORIENTATION_LANDSCAPE else portrait(A4)
    frame_width = page_size[0] - 2 * PAGE_MARGIN

    widths = [spreadsheet.column_width_points(sheet, col) for col in range(1, max_col + 1)]
    scale = 1.0
    if sheet.sheet_properties.pageSetUpPr.fitToPage and setup.fitToWidth == 1:
        scale = min(1.0, frame_width / sum(widths))
    font_size = max(4.0, 9 * scale)
    cell_style = ParagraphStyle('cell', fontName='Helvetica', fontSize=font_size, leading=font_size * 1.2)

    rows = []
    for row in range(1, max_row + 1):
        cells = []
        for col in range(1, max_col + 1):
            cell = sheet.cell(row=row, column=col)
            text = escape(spreadsheet.cell_text(cell.value))
            if cell.font is not None and cell.font.b and text:
                text = f"<b>{text}</b>"
            cells.append(Paragraph(text, cell_style))
        rows.append(cells)

    table = Table(rows, colWidths=[w * scale for w in widths], hAlign='LEFT')
    table.setStyle(TableStyle([
        ('GRID', (0, 0), (-1, -1), 0.25, colors.lightgrey),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('LEFTPADDING', (0, 0), (-1, -1), 2),
        ('RIGHTPADDING', (0, 0), (-1, -1), 2),
    ]))

    SimpleDocTemplate(
        pdf_path, pagesize=page_size,
        leftMargin=PAGE_MARGIN, rightMargin=PAGE_MARGIN, topMargin=PAGE_MARGIN, bottomMargin=PAGE_MARGIN,
    ).build([table])
    return print_area
