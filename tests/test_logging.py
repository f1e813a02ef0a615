from __future__ import annotations

import json
import logging

from purchase_app.core.logging import JsonFormatter, RequestIdFilter, request_id_ctx


def _format(record: logging.LogRecord) -> dict:
    RequestIdFilter().filter(record)
    return json.loads(JsonFormatter().format(record))


def test_formatter_emits_extra_fields_and_request_id():
    token = request_id_ctx.set("abc123")
    try:
        record = logging.makeLogRecord(
            {
                "name": "purchase_app.currency",
                "levelno": logging.WARNING,
                "levelname": "WARNING",
                "msg": "no rate for %s",
                "args": ("Mexico-Peso",),
                "cause": "no_data",
            }
        )
        line = _format(record)
    finally:
        request_id_ctx.reset(token)

    assert line["message"] == "no rate for Mexico-Peso"
    assert line["request_id"] == "abc123"
    assert line["cause"] == "no_data"
    assert line["time"].endswith("Z")
    assert "args" not in line


def test_request_id_defaults_to_dash_outside_requests():
    record = logging.makeLogRecord({"msg": "startup"})
    assert _format(record)["request_id"] == "-"


def test_response_carries_request_id(client):
    echoed = client.get("/health", headers={"X-Request-ID": "trace-1"})
    assert echoed.headers["X-Request-ID"] == "trace-1"

    generated = client.get("/health")
    assert len(generated.headers["X-Request-ID"]) == 32
