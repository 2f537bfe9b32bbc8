"""Read the first sheet of an uploaded workbook into header-keyed row dicts.

`.xlsx` goes through openpyxl, legacy `.xls` through xlrd and `.csv`
through the csv module. Headers are whatever the vendor typed in the first
row; matching them to product fields is the normalizer's job.
"""
from __future__ import annotations

import csv
import logging
from io import StringIO
from pathlib import Path
from typing import Any, Dict, List, Sequence

import xlrd
from openpyxl import load_workbook

from .errors import EmptyFileError, UnreadableFileError
from .fields import is_blank, to_text

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


def _read_xlsx(path: Path) -> List[Sequence[Any]]:
    wb = load_workbook(path, data_only=True)
    try:
        ws = wb.worksheets[0]
        return [list(r) for r in ws.iter_rows(values_only=True)]
    finally:
        wb.close()


def _read_xls(path: Path) -> List[Sequence[Any]]:
    book = xlrd.open_workbook(str(path))
    sheet = book.sheet_by_index(0)
    table = []
    for r in range(sheet.nrows):
        values = []
        for cell in sheet.row(r):
            if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
                values.append(None)
            elif cell.ctype == xlrd.XL_CELL_DATE:
                values.append(xlrd.xldate_as_datetime(cell.value, book.datemode))
            elif cell.ctype == xlrd.XL_CELL_BOOLEAN:
                values.append(bool(cell.value))
            else:
                values.append(cell.value)
        table.append(values)
    return table


def _read_csv(path: Path) -> List[Sequence[Any]]:
    # tolerate BOM and the usual spreadsheet export delimiters
    text = path.read_bytes().decode("utf-8-sig")
    delimiter = ","
    try:
        sample = "\n".join(text.splitlines()[:5])
        delimiter = csv.Sniffer().sniff(sample, delimiters=[",", ";", "\t", "|"]).delimiter
    except csv.Error:
        delimiter = ","
    return [row for row in csv.reader(StringIO(text), delimiter=delimiter)]


READERS = {
    ".csv": _read_csv,
    ".xls": _read_xls,
}


def table_to_rows(table: List[Sequence[Any]]) -> List[Row]:
    """Key every data row by the header row.

    Columns with a blank header are dropped; repeated headers get a
    ``_1``, ``_2`` suffix. Blank rows in the middle are kept (the batch
    counts them as skipped) but trailing blank rows are trimmed.
    """
    if not table:
        return []
    headers: List[Any] = []
    seen: Dict[str, int] = {}
    for cell in table[0]:
        header = to_text(cell)
        if not header:
            headers.append(None)
            continue
        if header in seen:
            seen[header] += 1
            header = f"{header}_{seen[header]}"
        else:
            seen[header] = 0
        headers.append(header)

    rows: List[Row] = []
    for values in table[1:]:
        row: Row = {}
        for idx, header in enumerate(headers):
            if header is None:
                continue
            row[header] = values[idx] if idx < len(values) else None
        rows.append(row)

    while rows and all(is_blank(v) for v in rows[-1].values()):
        rows.pop()
    return rows


def load_rows(path) -> List[Row]:
    """Load the first sheet of ``path`` as a list of row dicts.

    Raises UnreadableFileError when the file cannot be parsed as a
    spreadsheet and EmptyFileError when it holds no data rows.
    """
    path = Path(path)
    reader = READERS.get(path.suffix.lower(), _read_xlsx)
    try:
        table = reader(path)
    except Exception as e:
        logger.warning("could not parse upload %s: %s", path.name, e)
        raise UnreadableFileError(f"Could not read spreadsheet: {e}") from e

    rows = table_to_rows(table)
    if not rows:
        raise EmptyFileError("Excel file is empty")
    logger.info("loaded %d rows from %s", len(rows), path.name)
    return rows
