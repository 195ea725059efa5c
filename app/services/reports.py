from collections import defaultdict
from datetime import datetime, timedelta

from sqlalchemy import func

from models import db
from models.customer import Customer
from models.invoice import Invoice, InvoiceLine
from models.item import Item
from app.services.alerts import evaluate_alerts
from app.services.totals import to_money, ZERO

PERIODS = {"daily": 1, "weekly": 7, "monthly": 30}


def sales_report(owner_id: str, period: str = None, top: int = 5, now: datetime = None) -> dict:
    """Summarise sales, optionally limited to the last day/week/month."""
    query = Invoice.query.filter(Invoice.owner_id == owner_id)
    if period:
        now = now or datetime.utcnow()
        query = query.filter(Invoice.created_at >= now - timedelta(days=PERIODS[period]))
    invoices = query.all()

    by_status = defaultdict(int)
    for inv in invoices:
        by_status[inv.payment_status] += 1

    invoice_ids = [inv.id for inv in invoices]
    top_items = []
    if invoice_ids:
        rows = (
            db.session.query(
                InvoiceLine.item_id,
                func.max(InvoiceLine.name),
                func.sum(InvoiceLine.quantity),
                func.sum(InvoiceLine.line_total),
            )
            .filter(InvoiceLine.invoice_id.in_(invoice_ids))
            .group_by(InvoiceLine.item_id)
            .order_by(func.sum(InvoiceLine.line_total).desc())
            .limit(top)
            .all()
        )
        top_items = [
            {"item_id": item_id, "name": name, "quantity": int(qty or 0), "revenue": float(revenue or 0)}
            for item_id, name, qty, revenue in rows
        ]

    total_sales = sum((inv.total_amount for inv in invoices), ZERO)
    total_paid = sum((inv.paid_amount for inv in invoices), ZERO)
    return {
        "period": period or "all",
        "summary": {
            "total_invoices": len(invoices),
            "total_sales": float(total_sales),
            "total_paid": float(total_paid),
            "outstanding": float(max(total_sales - total_paid, ZERO)),
            "average_invoice": float(to_money(total_sales / len(invoices))) if invoices else 0.0,
            "by_status": dict(by_status),
        },
        "top_items": top_items,
        "stock_alerts": [alert.to_dict() for alert in evaluate_alerts(owner_id)],
    }


def stock_report(owner_id: str) -> dict:
    items = Item.query.filter_by(owner_id=owner_id).order_by(Item.stock_qty.asc(), Item.id).all()
    low = [item.to_dict() for item in items if item.stock_qty <= item.low_stock_limit]
    stock_value = sum((item.cost_price or 0) * max(item.stock_qty, 0) for item in items)
    return {"total_items": len(items), "stock_value": round(stock_value, 2), "low_stock": low}


def customer_dues_report(owner_id: str) -> list:
    customers = (
        Customer.query.filter(Customer.owner_id == owner_id, Customer.dues > 0)
        .order_by(Customer.dues.desc())
        .all()
    )
    return [c.to_dict() for c in customers]
