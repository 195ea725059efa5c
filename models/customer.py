from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, Numeric
from models import db, BIGINT


class Customer(db.Model):
    __tablename__ = "customer"
    __table_args__ = (
        db.UniqueConstraint("owner_id", "phone", name="uq_customer_owner_phone"),
        db.UniqueConstraint("owner_id", "email", name="uq_customer_owner_email"),
    )

    id = Column(BIGINT, primary_key=True)
    owner_id = Column(String(64), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=False)
    email = Column(String(120), nullable=True)
    address = Column(Text, nullable=True)
    dues = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "dues": float(self.dues or 0),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def summary(self):
        return {"id": self.id, "name": self.name, "phone": self.phone}
