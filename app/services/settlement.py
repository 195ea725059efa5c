"""Invoice settlement.

Turns a cart into a persisted invoice and applies its side effects: stock
decrement, customer dues and ledger transactions, then the customer copy.

``SETTLEMENT_MODE`` picks how failures after the invoice is written behave:

* ``best_effort``: the invoice commits on its own, every later step commits
  separately and a failing step is logged and skipped.
* ``fail_fast``: numbering, invoice, stock and ledger writes share one
  transaction; any failure rolls all of it back and reaches the caller.

The customer copy is always best effort because it runs after commit.
"""
import logging
from flask import current_app

from models import db
from models.customer import Customer
from models.invoice import Invoice, InvoiceLine
from app.exceptions import ValidationError, NotFoundError
from app.metrics import SETTLEMENTS, SETTLEMENT_STEP_FAILURES
from app.telemetry import get_tracer
from app.utils.db import transactional
from app.services.totals import compute_totals
from app.services.sequence import next_invoice_number
from app.services.stock import apply_stock_delta, check_availability
from app.services.ledger import record_due, record_payment
from app.services.documents import render_invoice_document
from app.tasks.notifications import send_invoice_email_task

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)

PAYMENT_METHODS = ("cash", "card", "upi", "due")
BEST_EFFORT = "best_effort"
FAIL_FAST = "fail_fast"


def _load_customer(owner_id, customer_id):
    if customer_id is None:
        return None
    customer = Customer.query.filter_by(id=customer_id, owner_id=owner_id).first()
    if not customer:
        raise NotFoundError(f"Customer {customer_id} not found")
    return customer


def _persist_invoice(owner_id, customer, totals, payment_method, known_items):
    invoice = Invoice(
        owner_id=owner_id,
        invoice_no=next_invoice_number(owner_id),
        customer_id=customer.id if customer else None,
        subtotal=totals.subtotal,
        discount=totals.discount,
        total_amount=totals.total,
        paid_amount=totals.paid_amount,
        payment_method=payment_method,
        payment_status=totals.status,
    )
    for position, line in enumerate(totals.lines, start=1):
        item = known_items.get(line.item_id)
        invoice.lines.append(InvoiceLine(
            position=position,
            item_id=line.item_id,
            name=item.name if item else None,
            quantity=line.quantity,
            unit_price=line.unit_price,
            line_total=line.line_total,
        ))
    db.session.add(invoice)
    db.session.flush()
    return invoice


def _side_effects(owner_id, invoice, customer, totals):
    """Yield ``(step, callable)`` for every write that follows the invoice."""
    for line in invoice.lines:
        yield (
            "stock",
            lambda line=line: apply_stock_delta(owner_id, line.item_id, -line.quantity),
        )
    if customer is not None and totals.paid_amount < totals.total:
        yield (
            "due",
            lambda: record_due(
                owner_id,
                customer.id,
                invoice.id,
                totals.total - totals.paid_amount,
                description=f"Due added for invoice {invoice.invoice_no}",
            ),
        )
    if totals.paid_amount > 0:
        yield (
            "payment",
            lambda: record_payment(
                owner_id,
                customer.id if customer else None,
                invoice.id,
                totals.paid_amount,
                payment_method=invoice.payment_method,
                description=f"Payment received for invoice {invoice.invoice_no}",
                reduce_dues=False,
            ),
        )


def _run_best_effort(invoice, step, fn):
    with tracer.start_as_current_span(f"settlement.{step}"):
        try:
            with transactional(f"Settlement step '{step}' failed for {invoice.invoice_no}"):
                fn()
            return True
        except Exception as e:
            SETTLEMENT_STEP_FAILURES.labels(step).inc()
            logger.warning(
                "Invoice %s kept after '%s' step failed: %s",
                invoice.invoice_no, step, getattr(e, "message", e),
            )
            return False


def notify_customer(invoice, customer=None):
    """Render the invoice and send it to the customer's email when known.

    Returns the rendered document path, or None when notifications are off.
    Failures are logged, never raised: the sale has already been recorded.
    """
    cfg = current_app.config
    if not cfg.get("NOTIFICATIONS_ENABLED"):
        return None
    with tracer.start_as_current_span("settlement.notify"):
        try:
            path = render_invoice_document(invoice, customer)
            if customer is not None and customer.email:
                args = (
                    customer.email,
                    f"Invoice {invoice.invoice_no}",
                    f"Thank you for your purchase! Attached is your invoice {invoice.invoice_no}.",
                    path,
                )
                if cfg.get("NOTIFICATIONS_ASYNC"):
                    send_invoice_email_task.delay(*args)
                else:
                    send_invoice_email_task.apply(args=args).get()
            return path
        except Exception as e:
            SETTLEMENT_STEP_FAILURES.labels("notify").inc()
            logger.error("Invoice %s notification failed: %s", invoice.invoice_no, e, exc_info=True)
            return None


def settle(owner_id, line_items, *, customer_id=None, discount=0, paid_amount=0, payment_method="cash") -> Invoice:
    """Create an invoice from ``line_items`` and apply its stock and ledger effects."""
    cfg = current_app.config
    mode = cfg.get("SETTLEMENT_MODE", BEST_EFFORT)

    with tracer.start_as_current_span("settlement") as span:
        span.set_attribute("settlement.mode", mode)
        if not line_items:
            raise ValidationError("No items in invoice")
        if payment_method not in PAYMENT_METHODS:
            raise ValidationError(
                f"payment_method must be one of {', '.join(PAYMENT_METHODS)}"
            )

        customer = _load_customer(owner_id, customer_id)
        totals = compute_totals(
            line_items, discount, paid_amount, policy=cfg.get("DISCOUNT_POLICY", "allow")
        )
        known_items, missing = check_availability(owner_id, totals.lines)
        if missing:
            if mode == FAIL_FAST:
                raise NotFoundError(
                    f"Item {missing[0]} not found", details={"missing_items": missing}
                )
            logger.warning("Settling cart with unknown items %s for owner %s", missing, owner_id)

        if mode == FAIL_FAST:
            try:
                with transactional("Settlement failed"):
                    invoice = _persist_invoice(owner_id, customer, totals, payment_method, known_items)
                    for _step, fn in _side_effects(owner_id, invoice, customer, totals):
                        fn()
            except Exception:
                SETTLEMENTS.labels(mode, "failed").inc()
                raise
            outcome = "complete"
        else:
            with transactional("Failed to persist invoice"):
                invoice = _persist_invoice(owner_id, customer, totals, payment_method, known_items)
            results = [
                _run_best_effort(invoice, step, fn)
                for step, fn in _side_effects(owner_id, invoice, customer, totals)
            ]
            outcome = "complete" if all(results) else "partial"

        span.set_attribute("invoice.number", invoice.invoice_no)
        SETTLEMENTS.labels(mode, outcome).inc()
        logger.info(
            "Invoice %s settled (%s): total=%.2f paid=%.2f status=%s",
            invoice.invoice_no, outcome, invoice.total_amount,
            invoice.paid_amount, invoice.payment_status,
        )

    notify_customer(invoice, customer)
    return invoice
