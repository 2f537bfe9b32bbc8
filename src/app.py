from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

from .bulk_upload.routes import bulk_bp
from .main import init_db
from .observability import HTTP_REQUESTS, configure_logging, metrics_endpoint


def create_app(test_config: Optional[Dict[str, Any]] = None) -> Flask:
    app = Flask(__name__)
    app.secret_key = os.environ.get("APP_SECRET_KEY", "dev-insecure-secret")

    root = Path(__file__).resolve().parents[1]
    app.config.update(
        APP_DB_PATH=os.environ.get("APP_DB_PATH", str(root / "app.sqlite")),
        UPLOAD_DIR=os.environ.get("UPLOAD_DIR", str(root / "uploads" / "excel")),
        # uploads above this are rejected with 413 before any parsing
        MAX_CONTENT_LENGTH=int(os.environ.get("MAX_UPLOAD_MB", "10")) * 1024 * 1024,
    )
    if test_config:
        app.config.update(test_config)

    configure_logging()
    init_db(app.config["APP_DB_PATH"])

    app.register_blueprint(bulk_bp)

    @app.after_request
    def count_request(response):
        endpoint = request.url_rule.rule if request.url_rule else "unmatched"
        HTTP_REQUESTS.labels(request.method, endpoint, response.status_code).inc()
        return response

    @app.get("/health")
    def health():
        return jsonify({"status": "ok"})

    @app.get("/metrics")
    def metrics():
        return metrics_endpoint()

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(debug=True, host="127.0.0.1", port=int(os.environ.get("PORT", "5000")))
