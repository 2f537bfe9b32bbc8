from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Any, Dict, List, Optional


Draft = Dict[str, Any]


def get_connection(db_path: str) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path, timeout=5.0)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def transaction(conn: sqlite3.Connection):
    # BEGIN IMMEDIATE so a bulk insert holds the write lock for the whole batch
    conn.execute("BEGIN IMMEDIATE")
    try:
        yield
    except Exception:
        conn.rollback()
        raise
    else:
        conn.commit()


class CatalogRepo:
    """Catalog persistence used by the bulk upload pipeline.

    Expected methods (stubs here for type/reference only):
      - find_store_for_vendor(vendor_id) -> {id, vendor_id, name, store_type, total_products} | None
      - insert_many(drafts) -> number of products actually stored. Unordered:
        a rejected document does not stop the ones after it.
      - increment_total_products(store_id, n)
    """

    def find_store_for_vendor(self, vendor_id: int) -> Optional[Dict[str, Any]]:  # pragma: no cover - implemented by backend
        raise NotImplementedError

    def insert_many(self, drafts: List[Draft]) -> int:  # pragma: no cover - implemented by backend
        raise NotImplementedError

    def increment_total_products(self, store_id: int, n: int) -> None:  # pragma: no cover - implemented by backend
        raise NotImplementedError
