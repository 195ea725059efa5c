import logging
from flask import Blueprint, request, current_app
from flask_limiter.util import get_remote_address
from extensions import limiter
from models import db
from models.customer import Customer
from models.invoice import Invoice
from app.version import API_PREFIX
from app.exceptions import NotFoundError
from app.schemas.invoice import CreateInvoiceRequest, QuoteRequest
from app.services.settlement import settle
from app.services.totals import compute_totals
from app.utils import auth_required, current_owner_id, transactional, ok, validate_schema

invoices_bp = Blueprint("invoices", __name__, url_prefix=f"{API_PREFIX}/invoices")


def _owned_invoice(invoice_id):
    invoice = Invoice.query.filter_by(id=invoice_id, owner_id=current_owner_id()).first()
    if not invoice:
        raise NotFoundError("Invoice not found")
    return invoice


@invoices_bp.route("", methods=["POST"])
@limiter.limit(
    lambda: current_app.config["INVOICE_LIMIT_PER_IP"],
    key_func=get_remote_address,
    error_message="Too many invoices from this IP",
)
@auth_required
@validate_schema(CreateInvoiceRequest)
def create_invoice():
    """Settle a cart into an invoice.
    ---
    tags: [Invoices]
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [items]
          properties:
            customer_id: {type: integer}
            items:
              type: array
              items:
                type: object
                properties:
                  item: {type: integer}
                  quantity: {type: integer}
                  price: {type: number}
            discount: {type: number}
            paid_amount: {type: number}
            payment_method: {type: string, enum: [cash, card, upi, due]}
    responses:
      201: {description: Invoice created}
      400: {description: Invalid cart}
      404: {description: Unknown customer}
      409: {description: Insufficient stock}
    """
    data = request.validated_data
    invoice = settle(
        current_owner_id(),
        data.items,
        customer_id=data.customer_id,
        discount=data.discount,
        paid_amount=data.paid_amount,
        payment_method=data.payment_method,
    )
    return ok(invoice.to_dict(), message="Invoice created successfully", status=201)


@invoices_bp.route("/quote", methods=["POST"])
@auth_required
@validate_schema(QuoteRequest)
def quote_invoice():
    """Price a cart without saving anything."""
    data = request.validated_data
    totals = compute_totals(
        data.items,
        data.discount,
        data.paid_amount,
        policy=current_app.config.get("DISCOUNT_POLICY", "allow"),
    )
    return ok(totals.to_dict())


@invoices_bp.route("", methods=["GET"])
@auth_required
def list_invoices():
    invoices = (
        Invoice.query.filter_by(owner_id=current_owner_id())
        .order_by(Invoice.created_at.desc(), Invoice.id.desc())
        .all()
    )
    customer_ids = {inv.customer_id for inv in invoices if inv.customer_id}
    customers = {}
    if customer_ids:
        customers = {
            c.id: c
            for c in Customer.query.filter(
                Customer.owner_id == current_owner_id(), Customer.id.in_(customer_ids)
            ).all()
        }
    return ok([inv.to_dict(customers.get(inv.customer_id)) for inv in invoices])


@invoices_bp.route("/<int:invoice_id>", methods=["GET"])
@auth_required
def get_invoice(invoice_id):
    invoice = _owned_invoice(invoice_id)
    customer = None
    if invoice.customer_id:
        customer = Customer.query.filter_by(
            id=invoice.customer_id, owner_id=current_owner_id()
        ).first()
    return ok(invoice.to_dict(customer))


@invoices_bp.route("/<int:invoice_id>", methods=["DELETE"])
@auth_required
def delete_invoice(invoice_id):
    invoice = _owned_invoice(invoice_id)
    number = invoice.invoice_no
    with transactional("Failed to delete invoice"):
        db.session.delete(invoice)
    logging.info("Invoice %s deleted", number)
    return ok(message="Invoice deleted")
