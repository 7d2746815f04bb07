from __future__ import annotations

import io
import json
import logging

import pytest

import registry_bench as app_module


@pytest.fixture()
def request_lines():
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(message)s"))
    app_module.request_log.addHandler(handler)
    try:
        yield lambda: [json.loads(line) for line in stream.getvalue().splitlines()]
    finally:
        app_module.request_log.removeHandler(handler)


def test_request_line_has_required_fields(client, request_lines):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.status_code == 200
    (line,) = request_lines()
    assert set(line) == {"request_id", "route", "status", "latency", "error_code"}
    assert line["request_id"] == "req-123"
    assert line["route"] == "/health"
    assert line["status"] == 200
    assert line["error_code"] is None
    assert line["latency"] >= 0


def test_rejected_insert_logs_envelope_code(client, request_lines):
    response = client.post("/api/insert-one?table=bogus", json={})

    assert response.status_code == 400
    (line,) = request_lines()
    assert line["route"] == "/api/insert-one"
    assert line["status"] == 400
    assert line["error_code"] == "INVALID_TABLE"
    assert line["request_id"] == response.headers["X-Request-ID"]


def test_unknown_route_falls_back_to_http_status(client, request_lines):
    response = client.get("/nowhere")

    assert response.status_code == 404
    (line,) = request_lines()
    assert line["route"] == "/nowhere"
    assert line["error_code"] == "HTTP_404"
