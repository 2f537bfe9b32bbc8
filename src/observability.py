from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from pythonjsonlogger import jsonlogger
import logging
import os
from flask import Response

# Basic metrics
HTTP_REQUESTS = Counter('http_requests_total', 'HTTP requests', ['method', 'endpoint', 'status'])

# Bulk upload metrics
BULK_UPLOADS = Counter('bulk_uploads_total', 'Bulk product uploads by final status', ['status'])
BULK_UPLOAD_ROWS = Counter('bulk_upload_rows_total', 'Spreadsheet rows by outcome', ['outcome'])
BULK_UPLOAD_LATENCY = Histogram('bulk_upload_duration_seconds', 'Parse + normalize + commit time per upload')
TEMPLATE_DOWNLOADS = Counter('template_downloads_total', 'Upload template downloads', ['store_type'])


def configure_logging(level=None):
    if level is None:
        level = os.environ.get("LOG_LEVEL", "INFO").upper()
    handler = logging.StreamHandler()
    formatter = jsonlogger.JsonFormatter('%(asctime)s %(levelname)s %(name)s %(message)s')
    handler.setFormatter(formatter)
    root = logging.getLogger()
    # Avoid adding duplicate handlers
    if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
        root.addHandler(handler)
    root.setLevel(level)


def metrics_endpoint():
    """Return a Flask Response with current Prometheus metrics."""
    data = generate_latest()
    return Response(data, mimetype=CONTENT_TYPE_LATEST)
