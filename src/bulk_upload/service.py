"""Bulk upload orchestration: load -> normalize -> commit, with file cleanup.

The uploaded spreadsheet is a temporary file owned by this call. It is
removed on every exit path, including store lookup failures, unreadable
sheets and database errors during the commit.
"""
from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Optional

from ..dao import CatalogRepo
from ..observability import BULK_UPLOAD_LATENCY, BULK_UPLOAD_ROWS, BULK_UPLOADS
from .batch import process_rows
from .committer import commit_drafts
from .errors import BulkUploadError, StoreNotFoundError
from .sheet_loader import load_rows

logger = logging.getLogger(__name__)


def remove_upload(path) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


def run_bulk_upload(repo: CatalogRepo, file_path, store_type: Optional[str], vendor_id: Any) -> Dict[str, Any]:
    """Import one vendor spreadsheet into the vendor's store.

    ``store_type`` falls back to the store's own type when not declared.
    Returns the upload summary. Raises StoreNotFoundError, EmptyFileError or
    UnreadableFileError before any row is processed; anything raised while
    committing propagates after the file has been removed.
    """
    started = time.monotonic()
    status = "error"
    try:
        store = repo.find_store_for_vendor(vendor_id)
        if store is None:
            raise StoreNotFoundError("Store not found. Create a store first.")
        store_type = store_type or store.get("store_type") or "general"

        rows = load_rows(file_path)
        result = process_rows(rows, store_type, store["id"], vendor_id)
        uploaded = commit_drafts(repo, result.drafts, store["id"])

        BULK_UPLOAD_ROWS.labels(outcome="uploaded").inc(uploaded)
        BULK_UPLOAD_ROWS.labels(outcome="skipped").inc(result.skipped_count)
        status = "ok"
        logger.info(
            "bulk upload for store %s (%s): uploaded %d, skipped %d of %d rows",
            store["id"], store_type, uploaded, result.skipped_count, result.total_rows,
        )
        return {
            "success": True,
            "uploadedCount": uploaded,
            "skippedCount": result.skipped_count,
            "totalRows": result.total_rows,
            "errors": result.errors,
            "message": f"Successfully uploaded {uploaded} products",
        }
    except BulkUploadError:
        status = "rejected"
        raise
    finally:
        remove_upload(file_path)
        BULK_UPLOADS.labels(status=status).inc()
        BULK_UPLOAD_LATENCY.observe(time.monotonic() - started)
