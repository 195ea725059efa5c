import logging
from collections import OrderedDict
from flask import current_app
from sqlalchemy import update

from models import db
from models.item import Item
from app.exceptions import NotFoundError, ConflictError
from app.metrics import LOW_STOCK_ALERTS
from app.services.alerts import alert_for

logger = logging.getLogger(__name__)


def _owned_item(owner_id: str, item_id):
    return Item.query.filter_by(id=item_id, owner_id=owner_id).first()


def apply_stock_delta(owner_id: str, item_id, delta: int) -> int:
    """Add ``delta`` to an item's stock and return the new quantity.

    The guard and the write are one conditional UPDATE, so concurrent sales
    cannot both pass the check. Does NOT commit.
    """
    item = _owned_item(owner_id, item_id)
    if not item:
        raise NotFoundError(f"Item {item_id} not found")

    before = item.stock_qty
    stmt = update(Item).where(Item.id == item.id, Item.owner_id == owner_id)
    if delta < 0 and not current_app.config.get("ALLOW_NEGATIVE_STOCK"):
        stmt = stmt.where(Item.stock_qty + delta >= 0)
    stmt = stmt.values(stock_qty=Item.stock_qty + delta).execution_options(
        synchronize_session=False
    )

    result = db.session.execute(stmt)
    db.session.refresh(item)
    if not result.rowcount:
        raise ConflictError(
            f"Insufficient stock for {item.name}",
            details={"item_id": item.id, "available": item.stock_qty, "requested": -delta},
        )
    logger.debug("Stock for item %s moved by %s to %s", item.id, delta, item.stock_qty)
    if before > item.low_stock_limit >= item.stock_qty:
        LOW_STOCK_ALERTS.labels(alert_for(item).severity).inc()
    return item.stock_qty


def requested_quantities(line_items) -> "OrderedDict":
    totals = OrderedDict()
    for line in line_items:
        totals[line.item_id] = totals.get(line.item_id, 0) + line.quantity
    return totals


def check_availability(owner_id: str, line_items):
    """Verify every known item can cover the cart before anything is written.

    Returns ``(items_by_id, missing_ids)``; raises ConflictError listing every
    short item. Missing items are left to the caller's settlement policy.
    """
    wanted = requested_quantities(line_items)
    items = {
        item.id: item
        for item in Item.query.filter(
            Item.owner_id == owner_id, Item.id.in_(list(wanted))
        ).all()
    }
    missing = [item_id for item_id in wanted if item_id not in items]

    if current_app.config.get("ALLOW_NEGATIVE_STOCK"):
        return items, missing

    short = [
        {"item_id": item_id, "name": items[item_id].name,
         "requested": qty, "available": items[item_id].stock_qty}
        for item_id, qty in wanted.items()
        if item_id in items and items[item_id].stock_qty < qty
    ]
    if short:
        names = ", ".join(entry["name"] for entry in short)
        raise ConflictError(f"Insufficient stock for {names}", details={"items": short})
    return items, missing
