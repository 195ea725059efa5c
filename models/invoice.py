from datetime import datetime
from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey
from models import db, BIGINT


class Invoice(db.Model):
    __tablename__ = "invoice"
    __table_args__ = (
        db.UniqueConstraint("owner_id", "invoice_no", name="uq_invoice_owner_number"),
        db.Index("ix_invoice_owner_created", "owner_id", "created_at"),
    )
    id = Column(BIGINT, primary_key=True)
    owner_id = Column(String(64), nullable=False)
    invoice_no = Column(String(32), nullable=False)
    # Plain reference: the invoice outlives the customer record
    customer_id = Column(BIGINT, nullable=True, index=True)
    subtotal = Column(Numeric(12, 2), nullable=False)
    discount = Column(Numeric(12, 2), nullable=False, default=0)
    total_amount = Column(Numeric(12, 2), nullable=False)
    paid_amount = Column(Numeric(12, 2), nullable=False, default=0)
    payment_method = Column(String(10), nullable=False)  # cash, card, upi, due
    payment_status = Column(String(10), nullable=False)  # paid, partial, unpaid
    created_at = Column(DateTime, default=datetime.utcnow)

    lines = db.relationship(
        "InvoiceLine",
        backref="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceLine.position",
        lazy=True,
    )

    def to_dict(self, customer=None):
        data = {
            "id": self.id,
            "invoice_no": self.invoice_no,
            "customer_id": self.customer_id,
            "items": [line.to_dict() for line in self.lines],
            "subtotal": float(self.subtotal),
            "discount": float(self.discount or 0),
            "total_amount": float(self.total_amount),
            "paid_amount": float(self.paid_amount or 0),
            "payment_method": self.payment_method,
            "payment_status": self.payment_status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if customer is not None:
            data["customer"] = customer.summary()
        return data


class InvoiceLine(db.Model):
    __tablename__ = "invoice_line"
    id = Column(BIGINT, primary_key=True)
    invoice_id = Column(BIGINT, ForeignKey("invoice.id"), nullable=False)
    position = Column(Integer, nullable=False)
    # No FK on purpose: items can be deleted while invoices are kept
    item_id = Column(BIGINT, nullable=False)
    name = Column(String(100), nullable=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    line_total = Column(Numeric(12, 2), nullable=False)

    def to_dict(self):
        return {
            "item_id": self.item_id,
            "name": self.name,
            "quantity": self.quantity,
            "unit_price": float(self.unit_price),
            "line_total": float(self.line_total),
        }


class InvoiceCounter(db.Model):
    """Per-owner counter row backing invoice number allocation."""

    __tablename__ = "invoice_counter"
    owner_id = Column(String(64), primary_key=True)
    last_value = Column(Integer, nullable=False, default=0)
