"""Batch processor: run every sheet row through the store type's normalizer."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .fields import is_blank
from .normalizer import Draft, normalize_row
from .profiles import StoreProfile, get_profile

logger = logging.getLogger(__name__)

MAX_REPORTED_ERRORS = 10
# data starts on sheet row 2 (row 1 is the header)
FIRST_DATA_ROW = 2
REJECTED_ROW_MESSAGE = "Missing product name or valid price"


@dataclass
class BatchResult:
    drafts: List[Draft] = field(default_factory=list)
    skipped_count: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)
    error_count: int = 0
    total_rows: int = 0


def is_blank_row(row: Optional[Dict[str, Any]]) -> bool:
    return not row or all(is_blank(v) for v in row.values())


def process_rows(
    rows: List[Dict[str, Any]],
    store_type: Optional[str],
    store_id: Any,
    vendor_id: Any,
    profiles: Optional[Mapping[str, StoreProfile]] = None,
    max_errors: int = MAX_REPORTED_ERRORS,
) -> BatchResult:
    """Normalize ``rows`` in order and collect drafts, skips and row errors.

    Blank rows are skipped silently. Rows the normalizer rejects, and rows
    whose normalization raises, are skipped and reported with their 1-based
    sheet row number. Only the first ``max_errors`` errors are kept.
    """
    profile = get_profile(store_type, profiles)
    result = BatchResult(total_rows=len(rows))

    def reject(idx: int, message: str) -> None:
        result.skipped_count += 1
        result.error_count += 1
        if len(result.errors) < max_errors:
            result.errors.append({"row": idx + FIRST_DATA_ROW, "error": message})

    for idx, row in enumerate(rows):
        if is_blank_row(row):
            result.skipped_count += 1
            continue
        try:
            draft = normalize_row(row, store_id, vendor_id, profile)
        except Exception as e:
            logger.warning("row %d failed to normalize: %s", idx + FIRST_DATA_ROW, e, exc_info=True)
            reject(idx, str(e) or e.__class__.__name__)
            continue
        if draft is None:
            reject(idx, REJECTED_ROW_MESSAGE)
            continue
        result.drafts.append(draft)

    logger.info(
        "processed %d rows as %s: %d valid, %d skipped",
        result.total_rows, profile.store_type, len(result.drafts), result.skipped_count,
    )
    return result
