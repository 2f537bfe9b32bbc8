import re
from io import BytesIO

import pytest
from openpyxl import Workbook, load_workbook
from prometheus_client import REGISTRY
from werkzeug.datastructures import FileStorage

from src.app import create_app
from src.bulk_upload.routes import _save_upload
from src.bulk_upload.templates import XLSX_MIMETYPE
from src.main import create_store
from src.product_repo import SqliteCatalogRepo


def xlsx_bytes(headers, rows):
    wb = Workbook()
    ws = wb.active
    ws.append(headers)
    for r in rows:
        ws.append(r)
    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def app(db_path, upload_dir):
    return create_app({"APP_DB_PATH": db_path, "UPLOAD_DIR": str(upload_dir), "TESTING": True})


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def restaurant_vendor(conn):
    create_store(conn, 42, "Spice Hub", "restaurant")
    return 42


def post_sheet(client, vendor_id, data, filename="menu.xlsx", mimetype=XLSX_MIMETYPE, store_type="restaurant"):
    headers = {"X-Vendor-Id": str(vendor_id)} if vendor_id else {}
    form = {"file": (BytesIO(data), filename, mimetype)}
    if store_type:
        form["storeType"] = store_type
    return client.post(
        "/api/vendor/products/bulk-upload",
        data=form,
        headers=headers,
        content_type="multipart/form-data",
    )


def test_bulk_upload_success(client, conn, restaurant_vendor, upload_dir):
    data = xlsx_bytes(["Item Name", "Price", "Selling Price", "Veg/Non-Veg"], [
        ["Butter Chicken", 320, 299, "Non-Veg"],
        ["Paneer Tikka", 220, 199, "Veg"],
        ["No Price", None, None, "Veg"],
    ])
    rv = post_sheet(client, restaurant_vendor, data)
    assert rv.status_code == 200
    body = rv.get_json()
    assert body["success"] is True
    assert body["uploadedCount"] == 2
    assert body["skippedCount"] == 1
    assert body["totalRows"] == 3
    assert body["errors"] == [{"row": 4, "error": "Missing product name or valid price"}]
    assert list(upload_dir.iterdir()) == []

    store = SqliteCatalogRepo(conn).find_store_for_vendor(restaurant_vendor)
    assert store["total_products"] == 2


def test_bulk_upload_csv(client, restaurant_vendor):
    data = b"Item Name,Price\nMasala Dosa,90\n"
    rv = post_sheet(client, restaurant_vendor, data, filename="menu.csv", mimetype="text/csv")
    assert rv.status_code == 200
    assert rv.get_json()["uploadedCount"] == 1


def test_requires_vendor_identity(client):
    rv = post_sheet(client, None, b"x")
    assert rv.status_code == 401
    assert rv.get_json()["success"] is False


def test_missing_file(client, restaurant_vendor):
    rv = client.post(
        "/api/vendor/products/bulk-upload",
        data={"storeType": "restaurant"},
        headers={"X-Vendor-Id": str(restaurant_vendor)},
        content_type="multipart/form-data",
    )
    assert rv.status_code == 400
    assert rv.get_json() == {"success": False, "error": "No file uploaded"}


def test_rejects_wrong_mimetype(client, restaurant_vendor, upload_dir):
    rv = post_sheet(client, restaurant_vendor, b"%PDF-1.4", filename="menu.pdf", mimetype="application/pdf")
    assert rv.status_code == 400
    assert "Invalid file type" in rv.get_json()["error"]
    assert not upload_dir.exists() or list(upload_dir.iterdir()) == []


def test_empty_sheet_is_400(client, restaurant_vendor, upload_dir):
    rv = post_sheet(client, restaurant_vendor, xlsx_bytes(["Item Name", "Price"], []))
    assert rv.status_code == 400
    assert rv.get_json() == {"success": False, "error": "Excel file is empty"}
    assert list(upload_dir.iterdir()) == []


def test_corrupt_sheet_is_400(client, restaurant_vendor):
    rv = post_sheet(client, restaurant_vendor, b"not a workbook")
    assert rv.status_code == 400
    assert rv.get_json()["success"] is False


def test_store_not_found_is_404(client, upload_dir):
    rv = post_sheet(client, 999, xlsx_bytes(["Item Name", "Price"], [["Idli", 40]]))
    assert rv.status_code == 404
    assert rv.get_json()["success"] is False
    assert list(upload_dir.iterdir()) == []


def test_commit_failure_is_structured_500_and_cleans_up(client, restaurant_vendor, upload_dir, monkeypatch):
    def broken_insert(self, drafts):
        raise RuntimeError("database unreachable")

    monkeypatch.setattr(SqliteCatalogRepo, "insert_many", broken_insert)
    rv = post_sheet(client, restaurant_vendor, xlsx_bytes(["Item Name", "Price"], [["Idli", 40]]))
    assert rv.status_code == 500
    assert rv.get_json() == {"success": False, "error": "database unreachable"}
    assert list(upload_dir.iterdir()) == []


def test_oversized_upload_is_413(db_path, upload_dir, conn):
    create_store(conn, 5, "Tiny", "general")
    app = create_app({"APP_DB_PATH": db_path, "UPLOAD_DIR": str(upload_dir), "MAX_CONTENT_LENGTH": 1024})
    rv = post_sheet(app.test_client(), 5, b"x" * 4096, store_type="general")
    assert rv.status_code == 413
    assert rv.get_json() == {"success": False, "error": "File too large"}


@pytest.mark.parametrize("template_type", ["medical", "restaurant", "general", "grocery"])
def test_template_download(client, template_type):
    rv = client.get(f"/api/vendor/templates/{template_type}")
    assert rv.status_code == 200
    assert rv.mimetype == XLSX_MIMETYPE
    assert rv.headers["Content-Disposition"] == f"attachment; filename={template_type}-template.xlsx"
    ws = load_workbook(BytesIO(rv.data)).worksheets[0]
    assert ws.max_row >= 2


def test_health_and_metrics(client):
    assert client.get("/health").get_json() == {"status": "ok"}
    client.get("/api/vendor/templates/general")
    rv = client.get("/metrics")
    assert rv.status_code == 200
    assert b"template_downloads_total" in rv.data


def test_unknown_template_types_share_one_metric_series(client):
    def downloads(label):
        return REGISTRY.get_sample_value("template_downloads_total", {"store_type": label}) or 0

    before = downloads("other")
    for i in range(5):
        assert client.get(f"/api/vendor/templates/junk{i}").status_code == 200
    assert downloads("other") == before + 5
    assert all(REGISTRY.get_sample_value("template_downloads_total", {"store_type": f"junk{i}"}) is None for i in range(5))

    before = downloads("vegetables")
    client.get("/api/vendor/templates/Vegetables")
    assert downloads("vegetables") == before + 1


def test_saved_uploads_get_distinct_names(app, upload_dir):
    with app.test_request_context():
        first = _save_upload(FileStorage(BytesIO(b"a,b\n1,2\n"), filename="../../menu.csv", content_type="text/csv"))
        second = _save_upload(FileStorage(BytesIO(b"a,b\n1,2\n"), filename="menu.csv", content_type="text/csv"))
    assert first != second
    assert first.parent == second.parent == upload_dir
    assert re.fullmatch(r"[0-9a-f]{32}\.csv", first.name)
