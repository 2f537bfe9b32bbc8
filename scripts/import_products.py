#!/usr/bin/env python3
"""Run a bulk product import from the command line (no HTTP).

Usage examples:
  # import a pharmacy sheet for vendor 7
  python scripts/import_products.py --vendor-id 7 --store-type medical stock.xlsx

  # create the store first if the vendor has none yet
  python scripts/import_products.py --vendor-id 7 --create-store "City Pharmacy" --store-type medical stock.xlsx

The source file is copied to a temp file first; the pipeline deletes the
copy when it finishes and leaves your original alone.
"""
from __future__ import annotations
import argparse
import json
import os
import shutil
import sys
import tempfile
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.bulk_upload.errors import BulkUploadError  # noqa: E402
from src.bulk_upload.profiles import get_profile  # noqa: E402
from src.bulk_upload.service import run_bulk_upload  # noqa: E402
from src.dao import get_connection  # noqa: E402
from src.main import create_store, init_db  # noqa: E402
from src.observability import configure_logging  # noqa: E402
from src.product_repo import SqliteCatalogRepo  # noqa: E402


def get_db_path() -> Path:
    return Path(os.environ.get("APP_DB_PATH", str(ROOT / "app.sqlite")))


def copy_to_temp(src: Path) -> Path:
    fd, tmp = tempfile.mkstemp(suffix=src.suffix.lower())
    os.close(fd)
    shutil.copyfile(src, tmp)
    return Path(tmp)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Bulk import products from a spreadsheet")
    parser.add_argument("file", type=Path, help=".xlsx, .xls or .csv file")
    parser.add_argument("--vendor-id", type=int, required=True)
    parser.add_argument("--store-type", type=str, default=None)
    parser.add_argument("--create-store", metavar="NAME", default=None, help="create a store for the vendor if missing")
    parser.add_argument("--list", action="store_true", help="list the store's active products afterwards (stderr)")
    args = parser.parse_args(argv)

    if not args.file.exists():
        print(f"File not found: {args.file}", file=sys.stderr)
        return 2

    configure_logging()
    db_path = init_db(str(get_db_path()))
    conn = get_connection(db_path)
    try:
        repo = SqliteCatalogRepo(conn)
        if args.create_store and repo.find_store_for_vendor(args.vendor_id) is None:
            create_store(conn, args.vendor_id, args.create_store, get_profile(args.store_type).store_type)
        try:
            summary = run_bulk_upload(repo, copy_to_temp(args.file), args.store_type, args.vendor_id)
        except BulkUploadError as e:
            print(json.dumps({"success": False, "error": str(e)}))
            return 1
        store = repo.get_store(repo.find_store_for_vendor(args.vendor_id)["id"])
        print(f"Store {store['id']} ({store['name']}) now has {store['total_products']} products", file=sys.stderr)
        if args.list:
            for p in repo.list_products(store["id"]):
                print(f"  {p['id']:>5}  {p['name']}  {p['price']:.2f}  stock={p['stock']}", file=sys.stderr)
    finally:
        conn.close()
    print(json.dumps(summary, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
