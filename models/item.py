# --- models/item.py ---
from models import db, BIGINT
from datetime import datetime


class Item(db.Model):
    __tablename__ = "item"
    __table_args__ = (
        db.UniqueConstraint("owner_id", "name", name="uq_item_owner_name"),
        db.Index("ix_item_owner_stock", "owner_id", "stock_qty"),
    )

    id = db.Column(BIGINT, primary_key=True)
    owner_id = db.Column(db.String(64), nullable=False, index=True)

    # Core details
    name = db.Column(db.String(100), nullable=False)
    sku = db.Column(db.String(50), nullable=True)
    category = db.Column(db.String(50), nullable=True)

    # Pricing
    cost_price = db.Column(db.Float, nullable=False)
    selling_price = db.Column(db.Float, nullable=False)

    # Inventory & unit info
    stock_qty = db.Column(db.Integer, nullable=False, default=0)
    low_stock_limit = db.Column(db.Integer, nullable=False, default=5)
    unit = db.Column(db.String(20), nullable=False, default="pcs")     # kg, litre, pcs

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "sku": self.sku,
            "category": self.category,
            "cost_price": self.cost_price,
            "selling_price": self.selling_price,
            "stock_qty": self.stock_qty,
            "low_stock_limit": self.low_stock_limit,
            "unit": self.unit,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Item id={self.id} name={self.name} stock={self.stock_qty}>"
