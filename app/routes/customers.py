import logging
from flask import Blueprint, request
from sqlalchemy.exc import IntegrityError
from models import db
from models.customer import Customer
from models.invoice import Invoice
from app.version import API_PREFIX
from app.exceptions import NotFoundError, ConflictError, ValidationError
from app.schemas.customer import CustomerRequest, UpdateCustomerRequest, DuePaymentRequest
from app.services.ledger import record_payment, customer_transactions
from app.utils import (
    auth_required,
    current_owner_id,
    transactional,
    ok,
    validate_schema,
    normalize_phone,
)

customers_bp = Blueprint("customers", __name__, url_prefix=f"{API_PREFIX}/customers")


def _owned_customer(customer_id):
    customer = Customer.query.filter_by(id=customer_id, owner_id=current_owner_id()).first()
    if not customer:
        raise NotFoundError("Customer not found")
    return customer


def _clean_phone(phone):
    try:
        return normalize_phone(phone)
    except ValueError as e:
        raise ValidationError(str(e))


def _ensure_unique(phone=None, email=None, exclude_id=None):
    base = Customer.query.filter_by(owner_id=current_owner_id())
    if exclude_id is not None:
        base = base.filter(Customer.id != exclude_id)
    if phone and base.filter(Customer.phone == phone).first():
        raise ConflictError("Phone number already exists")
    if email and base.filter(Customer.email == email).first():
        raise ConflictError("Email already exists")


def _save(message):
    try:
        with transactional(message):
            pass
    except IntegrityError:
        raise ConflictError("Customer with this phone or email already exists")


@customers_bp.route("", methods=["POST"])
@auth_required
@validate_schema(CustomerRequest)
def add_customer():
    data = request.validated_data
    phone = _clean_phone(data.phone)
    email = data.email.lower() if data.email else None
    _ensure_unique(phone, email)
    customer = Customer(
        owner_id=current_owner_id(),
        name=data.name,
        phone=phone,
        email=email,
        address=data.address,
    )
    db.session.add(customer)
    _save("Failed to add customer")
    logging.info("New customer added: %s", customer.id)
    return ok(customer.to_dict(), message="Customer added", status=201)


@customers_bp.route("", methods=["GET"])
@auth_required
def get_customers():
    customers = (
        Customer.query.filter_by(owner_id=current_owner_id())
        .order_by(Customer.name.asc())
        .all()
    )
    return ok([c.to_dict() for c in customers])


@customers_bp.route("/<int:customer_id>", methods=["GET"])
@auth_required
def get_customer(customer_id):
    return ok(_owned_customer(customer_id).to_dict())


@customers_bp.route("/<int:customer_id>", methods=["PUT"])
@auth_required
@validate_schema(UpdateCustomerRequest)
def update_customer(customer_id):
    customer = _owned_customer(customer_id)
    data = request.validated_data
    changes = data.model_dump(include=data.model_fields_set)
    if changes.get("phone"):
        changes["phone"] = _clean_phone(changes["phone"])
    if changes.get("email"):
        changes["email"] = changes["email"].lower()
    _ensure_unique(changes.get("phone"), changes.get("email"), exclude_id=customer.id)
    for field, value in changes.items():
        if value is None and field in ("name", "phone"):
            continue
        setattr(customer, field, value)
    _save("Failed to update customer")
    logging.info("Customer updated: %s", customer.id)
    return ok(customer.to_dict(), message="Customer updated")


@customers_bp.route("/<int:customer_id>", methods=["DELETE"])
@auth_required
def delete_customer(customer_id):
    customer = _owned_customer(customer_id)
    with transactional("Failed to delete customer"):
        db.session.delete(customer)
    logging.info("Customer deleted: %s", customer_id)
    return ok(message="Customer deleted")


@customers_bp.route("/<int:customer_id>/transactions", methods=["GET"])
@auth_required
def get_customer_transactions(customer_id):
    customer = _owned_customer(customer_id)
    txns = customer_transactions(current_owner_id(), customer.id)
    invoice_ids = {t.invoice_id for t in txns if t.invoice_id}
    invoices = {}
    if invoice_ids:
        invoices = {
            inv.id: inv
            for inv in Invoice.query.filter(
                Invoice.owner_id == current_owner_id(), Invoice.id.in_(invoice_ids)
            ).all()
        }
    return ok({
        "customer": {"name": customer.name, "phone": customer.phone, "dues": float(customer.dues or 0)},
        "transactions": [t.to_dict(invoices.get(t.invoice_id)) for t in txns],
    })


@customers_bp.route("/<int:customer_id>/payments", methods=["POST"])
@auth_required
@validate_schema(DuePaymentRequest)
def collect_due_payment(customer_id):
    """Record money received against a customer's outstanding dues."""
    customer = _owned_customer(customer_id)
    data = request.validated_data
    with transactional("Failed to record due payment"):
        txn = record_payment(
            current_owner_id(),
            customer.id,
            None,
            data.amount,
            payment_method=data.payment_method,
            description=data.description or "Payment received against dues",
            reduce_dues=True,
        )
    return ok(
        {"transaction": txn.to_dict(), "dues": float(customer.dues)},
        message="Payment recorded",
        status=201,
    )
