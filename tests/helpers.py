import re

from docx import Document as DocxDocument
from openpyxl import Workbook
from PIL import Image

_MEDIA_BOX = re.compile(rb'/MediaBox\s*\[\s*0\s+0\s+([\d.]+)\s+([\d.]+)\s*\]')


def media_box(pdf_path):
    """(width, height) in points of the first page."""
    with open(pdf_path, 'rb') as f:
        match = _MEDIA_BOX.search(f.read())
    assert match, f"no MediaBox in {pdf_path}"
    return float(match.group(1)), float(match.group(2))


def is_pdf(path):
    with open(path, 'rb') as f:
        return f.read(5) == b'%PDF-'


def make_image(path, size=(64, 48), color=(200, 30, 30), fmt=None):
    Image.new('RGB', size, color).save(path, format=fmt)
    return path


def make_docx(path, paragraphs=("Quarterly report", "Revenue grew in every region.")):
    document = DocxDocument()
    document.add_heading(paragraphs[0], level=1)
    for text in paragraphs[1:]:
        document.add_paragraph(text)
    document.save(path)
    return path


def make_xlsx(path, rows=None, column_width=30):
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = 'Data'
    for row in rows or [["Region", "Q1", "Q2"], ["North", 120, 135], ["South", 98, 101], ["West", 77, 90]]:
        sheet.append(row)
    for letter in 'ABC':
        sheet.column_dimensions[letter].width = column_width
    workbook.save(path)
    return path
