"""Invoice number allocation.

Numbers come from a per-owner counter row that is bumped with a single
``UPDATE ... SET last_value = last_value + 1`` so two settlements never read
the same value. Deleted invoices leave gaps; numbers are never reused.
"""
from flask import current_app
from sqlalchemy import update, select, func
from sqlalchemy.exc import IntegrityError

from models import db
from models.invoice import Invoice, InvoiceCounter
from app.exceptions import ConflictError


def format_invoice_number(value: int, prefix: str = None, width: int = None) -> str:
    """Render ``value`` as ``INV-00001``. Values wider than the padding are kept whole."""
    cfg = current_app.config
    prefix = prefix if prefix is not None else cfg.get("INVOICE_NUMBER_PREFIX", "INV")
    width = width if width is not None else cfg.get("INVOICE_NUMBER_WIDTH", 5)
    return f"{prefix}-{value:0{width}d}"


def _bump(owner_id: str):
    stmt = (
        update(InvoiceCounter)
        .where(InvoiceCounter.owner_id == owner_id)
        .values(last_value=InvoiceCounter.last_value + 1)
        .execution_options(synchronize_session=False)
    )
    result = db.session.execute(stmt)
    if not result.rowcount:
        return None
    return db.session.execute(
        select(InvoiceCounter.last_value).where(InvoiceCounter.owner_id == owner_id)
    ).scalar_one()


def allocate_sequence(owner_id: str) -> int:
    """Reserve the next integer for ``owner_id``. Does NOT commit."""
    value = _bump(owner_id)
    if value is not None:
        return value

    # First invoice for this owner: continue after any invoices already on file
    existing = db.session.execute(
        select(func.count(Invoice.id)).where(Invoice.owner_id == owner_id)
    ).scalar_one()
    counter = InvoiceCounter(owner_id=owner_id, last_value=existing + 1)
    db.session.add(counter)
    try:
        db.session.flush()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Invoice number allocation collided, please retry")
    return counter.last_value


def next_invoice_number(owner_id: str) -> str:
    return format_invoice_number(allocate_sequence(owner_id))
