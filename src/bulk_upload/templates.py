"""Downloadable upload templates, one per store type.

Headers are the primary alias of every template field in the store
profile, so a filled-in template always maps back onto the normalizer.
"""
from __future__ import annotations

import re
from io import BytesIO
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from .profiles import get_profile

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
SHEET_TITLE = "Products"
MIN_COLUMN_WIDTH = 10
MAX_COLUMN_WIDTH = 50

# grocery and vegetables share the general profile
TEMPLATE_TYPES = ("general", "medical", "restaurant", "grocery", "vegetables")


def template_filename(template_type: Optional[str]) -> str:
    slug = re.sub(r"[^a-z0-9_-]+", "", (template_type or "").strip().lower()) or "general"
    return f"{slug}-template.xlsx"


def generate_template(store_type: Optional[str]) -> bytes:
    """Build the template workbook for ``store_type`` and return xlsx bytes."""
    profile = get_profile(store_type)
    headers = profile.template_headers()

    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE
    ws.append(list(headers))
    for sample in profile.sample_rows:
        ws.append([None if v == "" else v for v in sample])

    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color="305496", end_color="305496", fill_type="solid")
    for cell in ws[1]:
        cell.font = header_font
        cell.fill = header_fill
    ws.freeze_panes = "A2"

    # size each column to its longest value
    for idx, header in enumerate(headers, start=1):
        values = [header] + [sample[idx - 1] for sample in profile.sample_rows if idx - 1 < len(sample)]
        longest = max(len(str(v)) for v in values if v is not None)
        width = min(max(longest + 2, MIN_COLUMN_WIDTH), MAX_COLUMN_WIDTH)
        ws.column_dimensions[get_column_letter(idx)].width = width

    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()
