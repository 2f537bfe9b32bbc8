"""Persistence committer: bulk insert drafts and keep store stats honest."""
from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..dao import CatalogRepo
from ..observability import BULK_UPLOAD_ROWS

logger = logging.getLogger(__name__)


def commit_drafts(repo: CatalogRepo, drafts: List[Dict[str, Any]], store_id: Any) -> int:
    """Insert ``drafts`` unordered and return how many were stored.

    The store's ``total_products`` counter moves by the stored count, not
    the attempted one, so partial inserts keep it accurate.
    """
    if not drafts:
        return 0
    inserted = repo.insert_many(drafts)
    rejected = len(drafts) - inserted
    if rejected:
        logger.warning("store %s: %d of %d products rejected by the database", store_id, rejected, len(drafts))
        BULK_UPLOAD_ROWS.labels(outcome="rejected_by_db").inc(rejected)
    if inserted:
        repo.increment_total_products(store_id, inserted)
    return inserted
