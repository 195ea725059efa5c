import logging

from flask import g

from app.logging import MaskingFilter, RequestContextFilter, JsonFormatter, mask_sensitive


def _record(msg, level=logging.INFO):
    return logging.LogRecord("billing_test", level, __file__, 1, msg, None, None)


def test_request_id_header_and_propagation(client):
    resp = client.get("/__ok", headers={"X-Request-ID": "my-fixed-id-123"})
    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID") == "my-fixed-id-123"


def test_request_id_generated(client):
    resp = client.get("/__ok")
    assert len(resp.headers.get("X-Request-ID")) == 32


def test_context_filter_tags_owner(app):
    with app.test_request_context("/"):
        g.request_id = "rid-abc"
        g.owner_id = "shop-1"
        record = _record("hello")
        RequestContextFilter().filter(record)
    assert record.request_id == "rid-abc"
    assert record.owner_id == "shop-1"


def test_sensitive_fields_masked_in_info(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    record = _record({"phone": "9876543210", "email": "a@b.co", "total": 10})
    MaskingFilter().filter(record)
    assert record.msg == {"phone": "[REDACTED]", "email": "[REDACTED]", "total": 10}


def test_sensitive_fields_visible_in_debug(monkeypatch):
    monkeypatch.setenv("APP_ENV", "development")
    record = _record({"phone": "9876543210"}, level=logging.DEBUG)
    MaskingFilter().filter(record)
    assert record.msg["phone"] == "9876543210"


def test_debug_masked_in_production(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    record = _record({"phone": "9876543210"}, level=logging.DEBUG)
    MaskingFilter().filter(record)
    assert record.msg["phone"] == "[REDACTED]"


def test_mask_nested():
    data = {"customer": {"name": "Asha", "Address": "12 Road"}, "items": [{"token": "x"}]}
    assert mask_sensitive(data) == {
        "customer": {"name": "Asha", "Address": "[REDACTED]"},
        "items": [{"token": "[REDACTED]"}],
    }


def test_json_formatter_merges_dict_messages():
    record = _record({"event": "invoice_settled", "invoice_no": "INV-00001"})
    record.request_id = "rid"
    out = JsonFormatter().format(record)
    assert '"invoice_no": "INV-00001"' in out
    assert '"request_id": "rid"' in out
