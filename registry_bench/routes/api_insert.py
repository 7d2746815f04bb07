from flask import Blueprint, current_app, jsonify, request

from registry_bench import get_app_config
from registry_bench.services import insert_service
from registry_bench.services.api_response import insert_error, insert_ok
from registry_bench.services.variants import parse_variant

api_insert_bp = Blueprint("api_insert", __name__)


@api_insert_bp.get("/health")
def health():
    return jsonify({"status": "ok"})


@api_insert_bp.post("/api/insert-one")
def insert_one():
    cfg = get_app_config(current_app)
    payload = request.get_json(silent=True)
    if payload is None and not request.get_data():
        payload = {}
    if not isinstance(payload, dict):
        return insert_error("INVALID_ROW", "Body must be a JSON object.")

    partial = dict(payload)
    requested = request.args.get("table") or partial.pop("table", None)
    partial.pop("table", None)
    try:
        variant = parse_variant(str(requested) if requested else cfg.bench.table_variant)
    except ValueError as exc:
        return insert_error("INVALID_TABLE", str(exc))

    try:
        row = insert_service.build_row(partial)
    except ValueError as exc:
        return insert_error("INVALID_ROW", str(exc))

    try:
        insert_service.insert_row(cfg, variant, row)
    except Exception as exc:
        current_app.logger.error("Insert into %s failed: %s", variant.table_name, exc)
        return insert_error("INSERT_FAILED", "Insert failed.", status=500, error=str(exc))

    return insert_ok(variant.table_name)
