"""Flask application factory for the row insertion endpoint."""

from __future__ import annotations

import json
import logging
import time
import uuid

from flask import Flask, g, request
from flask_sqlalchemy import SQLAlchemy

from config import AppConfig, load_config

# Shared SQLAlchemy instance (importable from services)
db = SQLAlchemy()

# One JSON line per request: request_id, route, status, latency (ms), error_code.
request_log = logging.getLogger("registry_bench.request")
REQUEST_ID_HEADER = "X-Request-ID"


def _configure_request_log() -> None:
    if request_log.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    request_log.addHandler(handler)
    request_log.setLevel(logging.INFO)
    request_log.propagate = False


def _error_code(response) -> str | None:
    if response.status_code < 400:
        return None
    payload = response.get_json(silent=True) if response.is_json else None
    if isinstance(payload, dict) and payload.get("code"):
        return str(payload["code"])
    return f"HTTP_{response.status_code}"


def _emit_request_line(status: int, error_code: str | None) -> None:
    started = g.get("request_started_at")
    latency = 0.0 if started is None else round((time.perf_counter() - started) * 1000, 2)
    rule = request.url_rule
    request_log.info(
        json.dumps(
            {
                "request_id": g.get("request_id"),
                "route": rule.rule if rule is not None else request.path,
                "status": status,
                "latency": latency,
                "error_code": error_code,
            },
            separators=(",", ":"),
        )
    )
    g.request_logged = True


def get_app_config(app: Flask) -> AppConfig:
    return app.extensions["registry_bench.config"]


def create_app(cfg: AppConfig | None = None, db_uri_override: str | None = None):
    """
    Build the Flask app.

    Args:
        cfg: explicit configuration; loaded from the environment when omitted
        db_uri_override: database URI to use instead of ``cfg.postgres.db_uri``

    Returns:
        Flask app instance
    """
    app = Flask(__name__)
    cfg = cfg or load_config()

    effective_db_uri = db_uri_override or cfg.postgres.db_uri
    app.config["SQLALCHEMY_DATABASE_URI"] = effective_db_uri
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    if str(effective_db_uri).startswith("postgres"):
        app.config["SQLALCHEMY_ENGINE_OPTIONS"] = {"pool_pre_ping": True}
    app.config["SECRET_KEY"] = cfg.secret_key
    app.extensions["registry_bench.config"] = cfg

    db.init_app(app)

    from registry_bench.routes.api_insert import api_insert_bp

    app.register_blueprint(api_insert_bp)

    _configure_request_log()

    @app.before_request
    def mark_request_started():
        g.request_id = (request.headers.get(REQUEST_ID_HEADER) or "").strip()[:128] or uuid.uuid4().hex
        g.request_started_at = time.perf_counter()

    @app.after_request
    def log_request_response(response):
        if "request_id" not in g:
            g.request_id = uuid.uuid4().hex
        _emit_request_line(response.status_code, _error_code(response))
        response.headers[REQUEST_ID_HEADER] = g.request_id
        return response

    @app.teardown_request
    def log_request_exception(exc):
        if exc is not None and not g.get("request_logged"):
            _emit_request_line(500, "INTERNAL_SERVER_ERROR")

    return app
