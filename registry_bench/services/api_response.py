from __future__ import annotations

from flask import jsonify


def insert_ok(table: str):
    # ``table`` is also top-level: the load test reads it without unwrapping ``data``.
    return (
        jsonify(
            {
                "ok": True,
                "code": "CREATED",
                "message": "Row inserted.",
                "data": {"table": table},
                "table": table,
            }
        ),
        201,
    )


def insert_error(code: str, message: str, status: int = 400, error: str | None = None):
    payload = {"ok": False, "code": code, "message": message, "data": None}
    if error is not None:
        payload["error"] = error
    return jsonify(payload), status
