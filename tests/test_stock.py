import pytest
from prometheus_client import REGISTRY

from models import db
from models.item import Item
from app.exceptions import ConflictError, NotFoundError
from app.services.stock import apply_stock_delta, check_availability
from app.services.totals import LineTotal


def _line(item_id, quantity):
    return LineTotal(item_id=item_id, quantity=quantity, unit_price=1, line_total=quantity)


def test_decrement_and_restock(app, make_item):
    item = make_item(stock_qty=10)
    assert apply_stock_delta("shop-1", item.id, -4) == 6
    assert apply_stock_delta("shop-1", item.id, 2) == 8
    db.session.commit()
    assert db.session.get(Item, item.id).stock_qty == 8


def test_decrement_below_zero_refused(app, make_item):
    item = make_item(name="Rice", stock_qty=3)
    with pytest.raises(ConflictError) as exc:
        apply_stock_delta("shop-1", item.id, -5)
    assert "Rice" in exc.value.message
    assert exc.value.details["available"] == 3
    db.session.rollback()
    assert db.session.get(Item, item.id).stock_qty == 3


def test_negative_stock_when_allowed(app, make_item, monkeypatch):
    monkeypatch.setitem(app.config, "ALLOW_NEGATIVE_STOCK", True)
    item = make_item(stock_qty=1)
    assert apply_stock_delta("shop-1", item.id, -3) == -2


def test_unknown_or_foreign_item(app, make_item):
    item = make_item(owner_id="shop-2")
    with pytest.raises(NotFoundError):
        apply_stock_delta("shop-1", item.id, -1)
    with pytest.raises(NotFoundError):
        apply_stock_delta("shop-1", 999, -1)


def test_availability_sums_repeated_lines(app, make_item):
    item = make_item(stock_qty=5)
    with pytest.raises(ConflictError) as exc:
        check_availability("shop-1", [_line(item.id, 3), _line(item.id, 3)])
    assert exc.value.details["items"][0]["requested"] == 6


def test_availability_reports_missing_items(app, make_item):
    item = make_item(stock_qty=5)
    items, missing = check_availability("shop-1", [_line(item.id, 2), _line(404, 1)])
    assert list(items) == [item.id]
    assert missing == [404]


def _low_stock_count():
    return REGISTRY.get_sample_value(
        "billing_low_stock_alerts_total", {"severity": "low-stock"}
    ) or 0


def test_low_stock_counted_once_when_limit_crossed(app, make_item):
    item = make_item(stock_qty=6, low_stock_limit=5)
    before = _low_stock_count()

    apply_stock_delta("shop-1", item.id, -2)
    assert _low_stock_count() == before + 1

    apply_stock_delta("shop-1", item.id, -1)
    assert _low_stock_count() == before + 1


def test_restock_does_not_count_alert(app, make_item):
    item = make_item(stock_qty=2, low_stock_limit=5)
    before = _low_stock_count()
    apply_stock_delta("shop-1", item.id, 1)
    assert _low_stock_count() == before
