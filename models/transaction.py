from sqlalchemy import Column, String, Text, DateTime, Numeric, Boolean
from sqlalchemy.sql import func
from models import db, BIGINT


class Transaction(db.Model):
    __tablename__ = "ledger_transaction"
    id = Column(BIGINT, primary_key=True)
    owner_id = Column(String(64), nullable=False, index=True)
    type = Column(String(10), nullable=False)  # due, payment
    customer_id = Column(BIGINT, nullable=True, index=True)
    invoice_id = Column(BIGINT, nullable=True, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(String(10), nullable=True)
    description = Column(Text, nullable=True)
    # False for payments taken at settlement time; they pay the invoice, not the dues
    applies_to_balance = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=func.now())

    def to_dict(self, invoice=None):
        data = {
            "id": self.id,
            "type": self.type,
            "customer_id": self.customer_id,
            "invoice_id": self.invoice_id,
            "amount": float(self.amount),
            "payment_method": self.payment_method,
            "description": self.description,
            "applies_to_balance": self.applies_to_balance,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if invoice is not None:
            data["invoice"] = {
                "invoice_no": invoice.invoice_no,
                "total_amount": float(invoice.total_amount),
                "payment_status": invoice.payment_status,
            }
        return data
