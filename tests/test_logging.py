import json
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from stalltrack.core.logging import JsonLogFormatter
from stalltrack.middlewares import completion_level, request_id_ctx_var


def _record(**extra):
    record = logging.LogRecord("stalltrack.services.sale_recorder", logging.INFO, __file__, 1, "sale.recorded", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_flattens_extra_data_and_request_id():
    token = request_id_ctx_var.set("req-123")
    try:
        line = JsonLogFormatter().format(_record(extra_data={"sale_id": 4, "total_price": 29.0}))
    finally:
        request_id_ctx_var.reset(token)

    payload = json.loads(line)
    assert payload["message"] == "sale.recorded"
    assert payload["level"] == "INFO"
    assert payload["request_id"] == "req-123"
    assert payload["sale_id"] == 4
    assert payload["timestamp"].endswith("Z")


def test_formatter_without_request_context():
    payload = json.loads(JsonLogFormatter().format(_record()))
    assert "request_id" not in payload
    assert payload["logger"] == "stalltrack.services.sale_recorder"


def test_formatter_tags_app_name():
    payload = json.loads(JsonLogFormatter("Stall Tracker").format(_record()))
    assert payload["app"] == "Stall Tracker"


def test_request_completion_level_follows_status():
    assert completion_level(201) == logging.INFO
    assert completion_level(400) == logging.WARNING
    assert completion_level(404) == logging.WARNING
    assert completion_level(500) == logging.ERROR
