from __future__ import annotations
from flask import Blueprint, request, abort, jsonify, session, current_app, Response
from pathlib import Path
from werkzeug.exceptions import HTTPException
from werkzeug.utils import secure_filename
import logging
import os
import uuid

from ..dao import get_connection
from ..observability import TEMPLATE_DOWNLOADS
from ..product_repo import SqliteCatalogRepo
from .errors import BulkUploadError
from .service import remove_upload, run_bulk_upload
from .templates import TEMPLATE_TYPES, XLSX_MIMETYPE, generate_template, template_filename

logger = logging.getLogger(__name__)

bulk_bp = Blueprint("bulk_upload", __name__, url_prefix="/api/vendor")

ALLOWED_MIMETYPES = {
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-excel",
    "text/csv",
}
ALLOWED_EXTENSIONS = {".xlsx", ".xls", ".csv"}


def get_conn():
    root = Path(__file__).resolve().parents[2]
    db_path = current_app.config.get("APP_DB_PATH") or os.environ.get("APP_DB_PATH") or str(root / "app.sqlite")
    return get_connection(db_path)


def _current_vendor_id() -> int:
    """Vendor id from the login session, or the X-Vendor-Id header set by the gateway."""
    vendor_id = session.get("user_id") or request.headers.get("X-Vendor-Id")
    if not vendor_id:
        abort(401, "Authentication required")
    try:
        return int(vendor_id)
    except (TypeError, ValueError):
        abort(401, "Invalid vendor identity")


def _is_allowed(upload) -> bool:
    ext = os.path.splitext(upload.filename or "")[1].lower()
    mimetype = (upload.mimetype or "").lower()
    if mimetype in ALLOWED_MIMETYPES:
        return True
    # some clients send spreadsheets as octet-stream; trust the extension then
    return mimetype in ("", "application/octet-stream") and ext in ALLOWED_EXTENSIONS


def _save_upload(upload) -> Path:
    upload_dir = Path(current_app.config.get("UPLOAD_DIR") or "uploads/excel")
    upload_dir.mkdir(parents=True, exist_ok=True)
    ext = os.path.splitext(secure_filename(upload.filename or ""))[1].lower()
    if ext not in ALLOWED_EXTENSIONS:
        ext = ".csv" if upload.mimetype == "text/csv" else ".xlsx"
    target = upload_dir / f"{uuid.uuid4().hex}{ext}"
    try:
        upload.save(str(target))
    except Exception:
        # don't leave a half-written file behind
        remove_upload(target)
        raise
    return target


@bulk_bp.post("/products/bulk-upload")
def bulk_upload():
    """Import products for the caller's store from an Excel/CSV upload."""
    vendor_id = _current_vendor_id()
    upload = request.files.get("file")
    if upload is None or not upload.filename:
        abort(400, "No file uploaded")
    if not _is_allowed(upload):
        abort(400, "Invalid file type. Only Excel and CSV files are allowed.")

    store_type = (request.form.get("storeType") or "").strip() or None
    conn = get_conn()
    try:
        path = _save_upload(upload)
        summary = run_bulk_upload(SqliteCatalogRepo(conn), path, store_type, vendor_id)
    except BulkUploadError as e:
        return jsonify({"success": False, "error": str(e)}), e.status_code
    except Exception as e:
        logger.exception("bulk upload failed for vendor %s", vendor_id)
        return jsonify({"success": False, "error": str(e) or "Bulk upload failed"}), 500
    finally:
        conn.close()
    return jsonify(summary)


@bulk_bp.get("/templates/<template_type>")
def download_template(template_type: str):
    """Blank upload template (headers + sample rows) for a store type."""
    data = generate_template(template_type)
    label = template_type.strip().lower()
    # unknown types share one "other" series
    TEMPLATE_DOWNLOADS.labels(store_type=label if label in TEMPLATE_TYPES else "other").inc()
    filename = template_filename(template_type)
    return Response(
        data,
        mimetype=XLSX_MIMETYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


# JSON error handler: return consistent JSON with {success, error}
@bulk_bp.errorhandler(400)
@bulk_bp.errorhandler(401)
@bulk_bp.errorhandler(404)
@bulk_bp.errorhandler(413)
@bulk_bp.errorhandler(500)
def json_error_handler(err):
    if isinstance(err, HTTPException):
        code = err.code or 500
        description = err.description
    else:
        code = 500
        description = str(err)
    if code == 413:
        description = "File too large"
    return jsonify({"success": False, "error": description}), code
