"""Worksheet loading and print setup shared by the Excel writers (openpyxl)."""
import csv
import datetime
import os
from typing import Tuple

from openpyxl import Workbook, load_workbook
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from document_pdf_gallery.services.errors import ConversionMethodFailed

OPENPYXL_TYPES = ('xlsx', 'xlsm')


def load_first_sheet(path: str) -> Worksheet:
    """Load the first worksheet of an .xlsx/.xlsm workbook or a .csv file."""
    ext = os.path.splitext(path)[1].lstrip('.').lower()
    if ext in OPENPYXL_TYPES:
        workbook = load_workbook(path, data_only=True)
        workbook.active = 0
        return workbook.active
    if ext == 'csv':
        workbook = Workbook()
        sheet = workbook.active
        with open(path, newline='', encoding='utf-8-sig', errors='replace') as f:
            for row in csv.reader(f):
                sheet.append(row)
        return sheet
    raise ConversionMethodFailed(f"Spreadsheet format '.{ext}' cannot be read by openpyxl")


def used_range(sheet: Worksheet) -> Tuple[int, int]:
    """Highest row and column that actually hold a value (styled empty cells are ignored)."""
    max_row = max_col = 0
    for row in sheet.iter_rows():
        for cell in row:
            if cell.value is not None and cell.value != '':
                max_row = max(max_row, cell.row)
                max_col = max(max_col, cell.column)
    return max(max_row, 1), max(max_col, 1)


def apply_print_setup(sheet: Worksheet) -> str:
    """Landscape A4, one page wide, print area limited to the used range.

    Returns the print area reference, e.g. ``A1:D20``.
    """
    max_row, max_col = used_range(sheet)
    setup = sheet.page_setup
    setup.orientation = sheet.ORIENTATION_LANDSCAPE
    setup.paperSize = sheet.PAPERSIZE_A4
    setup.fitToWidth = 1
    setup.fitToHeight = 0
    sheet.sheet_properties.pageSetUpPr.fitToPage = True
    sheet.print_options.horizontalCentered = False
    sheet.print_options.verticalCentered = False
    area = f"A1:{get_column_letter(max_col)}{max_row}"
    sheet.print_area = area
    return area


def cell_text(value) -> str:
    if value is None:
        return ''
    if isinstance(value, datetime.datetime):
        return value.strftime('%Y-%m-%d %H:%M') if (value.hour or value.minute) else value.strftime('%Y-%m-%d')
    if isinstance(value, datetime.date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def column_width_points(sheet: Worksheet, column_index: int) -> float:
    """Approximate column width in points (Excel width units are ~7px at 96 DPI)."""
    dimension = sheet.column_dimensions.get(get_column_letter(column_index))
    width = dimension.width if dimension is not None and dimension.width else 8.43
    return width * 7 * 0.75
