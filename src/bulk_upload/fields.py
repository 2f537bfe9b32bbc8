"""Field lookup and cell coercion helpers for vendor spreadsheets.

Vendor sheets are not schema-controlled: the same logical column can show up
as "MRP", "mrp " or "Price" depending on who exported it. `extract_field`
resolves a logical field from a raw row by trying an ordered alias list, and
the `to_*` coercers turn whatever the cell held into a typed scalar. None of
these functions raise on bad data; every one takes an explicit default.
"""
from __future__ import annotations

import math
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

TRUTHY = frozenset({"yes", "true", "1", "y"})

# Excel serial day 0 (accounts for the 1900 leap-year bug)
_EXCEL_EPOCH = datetime(1899, 12, 30)
_DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%d/%m/%Y", "%d-%m-%Y", "%d.%m.%Y", "%Y-%m", "%m/%Y")


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def extract_field(row: Dict[str, Any], aliases: Iterable[str], default: Any = "") -> Any:
    """Return the first non-blank value stored under one of ``aliases``.

    Exact header matches are tried first, in alias order. If none hit, the
    aliases are tried again against the row's headers case-insensitively
    (and ignoring surrounding whitespace). Falls back to ``default``.
    """
    if not row:
        return default
    aliases = list(aliases)
    for alias in aliases:
        value = row.get(alias)
        if not is_blank(value):
            return value

    folded: Dict[str, List[str]] = {}
    for header in row:
        if header is None:
            continue
        folded.setdefault(str(header).strip().lower(), []).append(header)
    for alias in aliases:
        for header in folded.get(alias.strip().lower(), []):
            value = row[header]
            if not is_blank(value):
                return value
    return default


def to_text(value: Any, default: str = "") -> str:
    if is_blank(value):
        return default
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        # 2.0 from a numeric cell should read back as "2"
        return str(int(value))
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


def _clean_numeric(value: Any) -> Optional[str]:
    s = str(value).strip().replace(",", "")
    for symbol in ("₹", "$", "€", "£", "Rs.", "Rs", "%"):
        s = s.replace(symbol, "")
    return s.strip() or None


def to_number(value: Any, default: float = 0) -> float:
    if is_blank(value):
        return default
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        num = float(value)
    else:
        cleaned = _clean_numeric(value)
        if cleaned is None:
            return default
        try:
            num = float(cleaned)
        except ValueError:
            return default
    if not math.isfinite(num):
        return default
    return num


def to_integer(value: Any, default: int = 0) -> int:
    num = to_number(value, default=None)
    if num is None:
        return default
    return int(num)


def to_boolean(value: Any, default: bool = False) -> bool:
    if is_blank(value):
        return default
    if isinstance(value, bool):
        return value
    if str(value).strip().lower() in TRUTHY:
        return True
    return default


def to_list(value: Any, sep: str = ",") -> List[str]:
    """Split a delimited cell ("Chicken, Butter, Cream") into trimmed items."""
    text = to_text(value)
    if not text:
        return []
    return [part.strip() for part in text.split(sep) if part.strip()]


def to_date(value: Any) -> Optional[str]:
    """Normalize a date cell to ISO ``YYYY-MM-DD``; None when not a date.

    Accepts real date cells, Excel serial numbers and a handful of common
    text layouts. Month-only values ("2025-12") resolve to the first day.
    """
    if is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (int, float)):
        if not math.isfinite(value) or value <= 0 or value > 2958465:
            return None
        return (_EXCEL_EPOCH + timedelta(days=float(value))).date().isoformat()
    text = str(value).strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue
    return None
