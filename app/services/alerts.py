from dataclasses import dataclass
from typing import List

from models.item import Item

OUT_OF_STOCK = "out-of-stock"
LOW_STOCK = "low-stock"


@dataclass
class StockAlert:
    severity: str
    message: str
    item_id: int

    def to_dict(self):
        return {"type": self.severity, "message": self.message, "item_id": self.item_id}


def alert_for(item) -> StockAlert:
    """Classify a single item; returns None when stock is above its limit."""
    if item.stock_qty > item.low_stock_limit:
        return None
    if item.stock_qty <= 0:
        return StockAlert(OUT_OF_STOCK, f"{item.name} is out of stock!", item.id)
    return StockAlert(
        LOW_STOCK,
        f"{item.name} is running low (only {item.stock_qty} left)",
        item.id,
    )


def evaluate_alerts(owner_id: str) -> List[StockAlert]:
    items = (
        Item.query.filter(Item.owner_id == owner_id, Item.stock_qty <= Item.low_stock_limit)
        .order_by(Item.id)
        .all()
    )
    return [alert_for(item) for item in items]
