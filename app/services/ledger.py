from decimal import Decimal
from sqlalchemy import select, func, case

from models import db
from models.customer import Customer
from models.transaction import Transaction
from app.exceptions import NotFoundError, ValidationError
from app.services.totals import to_money

DUE = "due"
PAYMENT = "payment"


def _locked_customer(owner_id: str, customer_id) -> Customer:
    customer = (
        Customer.query.filter_by(id=customer_id, owner_id=owner_id)
        .with_for_update(of=Customer)
        .first()
    )
    if not customer:
        raise NotFoundError(f"Customer {customer_id} not found")
    return customer


def _positive(amount) -> Decimal:
    money = to_money(amount)
    if money <= 0:
        raise ValidationError("Amount must be greater than zero")
    return money


def record_due(owner_id: str, customer_id, invoice_id, amount, *, description: str = None) -> Transaction:
    """
    Add ``amount`` to the customer's dues and append a ``due`` transaction.
    Does NOT commit; caller is responsible for commit/rollback.
    """
    money = _positive(amount)
    customer = _locked_customer(owner_id, customer_id)
    customer.dues = to_money(customer.dues or 0) + money

    txn = Transaction(
        owner_id=owner_id,
        type=DUE,
        customer_id=customer.id,
        invoice_id=invoice_id,
        amount=money,
        description=description,
        applies_to_balance=True,
    )
    db.session.add(txn)
    return txn


def record_payment(
    owner_id: str,
    customer_id,
    invoice_id,
    amount,
    *,
    payment_method: str = "cash",
    description: str = None,
    reduce_dues: bool = True,
) -> Transaction:
    """
    Append a ``payment`` transaction.

    ``reduce_dues`` decides whether the payment settles outstanding dues.
    Money taken while settling an invoice pays for that invoice only and is
    recorded with ``reduce_dues=False``; collecting an old balance uses True.
    Walk-in payments (no customer) are recorded without a balance.
    Does NOT commit.
    """
    money = _positive(amount)
    applies = bool(reduce_dues and customer_id)
    if customer_id is not None:
        customer = _locked_customer(owner_id, customer_id)
        if applies:
            customer.dues = to_money(customer.dues or 0) - money

    txn = Transaction(
        owner_id=owner_id,
        type=PAYMENT,
        customer_id=customer_id,
        invoice_id=invoice_id,
        amount=money,
        payment_method=payment_method or "cash",
        description=description,
        applies_to_balance=applies,
    )
    db.session.add(txn)
    return txn


def ledger_balance(owner_id: str, customer_id) -> Decimal:
    """Recompute a customer's dues from the transaction log."""
    signed = case(
        (Transaction.type == DUE, Transaction.amount),
        else_=-Transaction.amount,
    )
    total = db.session.execute(
        select(func.coalesce(func.sum(signed), 0)).where(
            Transaction.owner_id == owner_id,
            Transaction.customer_id == customer_id,
            Transaction.applies_to_balance.is_(True),
        )
    ).scalar_one()
    return to_money(total)


def customer_transactions(owner_id: str, customer_id):
    return (
        Transaction.query.filter_by(owner_id=owner_id, customer_id=customer_id)
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .all()
    )
