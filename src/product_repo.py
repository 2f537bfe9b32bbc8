import json
import logging
import sqlite3

from .dao import CatalogRepo, transaction

logger = logging.getLogger(__name__)

PRODUCT_COLUMNS = (
    "store_id", "vendor_id", "name", "description", "category", "brand",
    "store_type", "product_type", "price", "discount_price", "unit", "quantity",
    "pack_size", "stock", "stock_quantity", "min_stock", "in_stock", "sku",
    "barcode", "hsn_code", "gst_rate", "expiry_date", "images", "meta",
    "is_active", "is_available", "attributes",
)

# draft keys that map onto their own column; everything else lands in `attributes`
_DIRECT = {
    "name", "description", "category", "brand", "store_type", "product_type",
    "price", "discount_price", "unit", "quantity", "pack_size", "stock",
    "stock_quantity", "min_stock", "barcode", "hsn_code", "gst_rate", "expiry_date",
}
# mirrors the NOT NULL defaults in db/init.sql
_COLUMN_DEFAULTS = {
    "description": "",
    "brand": "",
    "unit": "pcs",
    "quantity": "1",
    "pack_size": "1",
    "stock": 0,
    "stock_quantity": 0,
    "min_stock": 5,
    "barcode": "",
    "hsn_code": "",
    "gst_rate": 0,
}
_HANDLED = _DIRECT | {"store", "vendor", "in_stock", "sku", "images", "meta", "is_active", "is_available"}

INSERT_SQL = "INSERT INTO product ({}) VALUES ({})".format(
    ", ".join(PRODUCT_COLUMNS), ", ".join("?" for _ in PRODUCT_COLUMNS)
)


class SqliteCatalogRepo(CatalogRepo):
    """SQLite implementation of the CatalogRepo interface"""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def find_store_for_vendor(self, vendor_id: int):
        """Get the vendor's active store, or None"""
        cursor = self.conn.execute(
            "SELECT id, vendor_id, name, store_type, total_products FROM store "
            "WHERE vendor_id = ? AND is_active = 1 ORDER BY id LIMIT 1",
            (vendor_id,),
        )
        row = cursor.fetchone()
        return dict(row) if row else None

    def insert_many(self, drafts) -> int:
        """Insert drafts in one transaction, skipping rows the schema rejects.

        Constraint violations (e.g. a SKU already used in this store) drop
        just that product. Any other database error rolls back the batch.
        """
        inserted = 0
        with transaction(self.conn):
            for idx, draft in enumerate(drafts):
                try:
                    self.conn.execute(INSERT_SQL, self._params(draft))
                except sqlite3.IntegrityError as e:
                    logger.warning("product %d (%s) rejected: %s", idx, draft.get("name"), e)
                    continue
                inserted += 1
        return inserted

    def increment_total_products(self, store_id: int, n: int) -> None:
        """Bump the store's product counter by n in a single UPDATE"""
        self.conn.execute(
            "UPDATE store SET total_products = total_products + ? WHERE id = ?",
            (n, store_id),
        )
        self.conn.commit()

    def get_store(self, store_id: int):
        row = self.conn.execute(
            "SELECT id, vendor_id, name, store_type, total_products FROM store WHERE id = ?",
            (store_id,),
        ).fetchone()
        return dict(row) if row else None

    def list_products(self, store_id: int):
        """Active products for a store, oldest first"""
        cursor = self.conn.execute(
            "SELECT * FROM product WHERE store_id = ? AND is_active = 1 ORDER BY id",
            (store_id,),
        )
        return cursor.fetchall()

    # --- helpers ---
    @staticmethod
    def _params(draft):
        values = {key: draft.get(key) for key in _DIRECT}
        # medical and restaurant drafts don't carry every general column
        for key, default in _COLUMN_DEFAULTS.items():
            if values[key] is None:
                values[key] = default
        values["store_id"] = draft["store"]
        values["vendor_id"] = draft["vendor"]
        values["in_stock"] = 1 if draft.get("in_stock") else 0
        values["is_active"] = 1 if draft.get("is_active", True) else 0
        values["is_available"] = 1 if draft.get("is_available", True) else 0
        # empty SKUs are stored as NULL so the per-store unique index ignores them
        values["sku"] = draft.get("sku") or None
        values["images"] = json.dumps(draft.get("images") or [])
        values["meta"] = json.dumps(draft.get("meta") or {})
        extra = {k: v for k, v in draft.items() if k not in _HANDLED}
        values["attributes"] = json.dumps(extra, default=str)
        return tuple(values[col] for col in PRODUCT_COLUMNS)
