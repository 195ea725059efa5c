from decimal import Decimal
import pytest

from models import db
from models.customer import Customer
from models.transaction import Transaction
from app.exceptions import NotFoundError, ValidationError
from app.services.ledger import (
    record_due,
    record_payment,
    ledger_balance,
    customer_transactions,
    to_money,
)


def test_to_money_rounds_half_up():
    assert to_money(2.675) == Decimal("2.68")
    assert to_money("10") == Decimal("10.00")


def test_due_raises_customer_dues(app, make_customer):
    customer = make_customer()
    txn = record_due("shop-1", customer.id, 1, 60, description="Due added for invoice INV-00001")
    db.session.commit()
    assert txn.type == "due"
    assert db.session.get(Customer, customer.id).dues == Decimal("60.00")


def test_settlement_payment_does_not_touch_dues(app, make_customer):
    customer = make_customer()
    record_due("shop-1", customer.id, 1, 60)
    record_payment("shop-1", customer.id, 1, 40, payment_method="upi", reduce_dues=False)
    db.session.commit()
    assert db.session.get(Customer, customer.id).dues == Decimal("60.00")
    assert ledger_balance("shop-1", customer.id) == Decimal("60.00")


def test_standalone_payment_reduces_dues(app, make_customer):
    customer = make_customer()
    record_due("shop-1", customer.id, 1, 100)
    record_payment("shop-1", customer.id, None, 30)
    db.session.commit()
    assert db.session.get(Customer, customer.id).dues == Decimal("70.00")
    assert ledger_balance("shop-1", customer.id) == Decimal("70.00")


def test_walk_in_payment_has_no_customer(app):
    txn = record_payment("shop-1", None, 5, 25, payment_method="cash")
    db.session.commit()
    assert txn.customer_id is None
    assert txn.applies_to_balance is False
    assert Transaction.query.count() == 1


def test_amount_must_be_positive(app, make_customer):
    customer = make_customer()
    with pytest.raises(ValidationError):
        record_due("shop-1", customer.id, 1, 0)
    with pytest.raises(ValidationError):
        record_payment("shop-1", customer.id, 1, -5)


def test_customer_of_another_owner_not_found(app, make_customer):
    customer = make_customer(owner_id="shop-2")
    with pytest.raises(NotFoundError):
        record_due("shop-1", customer.id, 1, 10)


def test_transactions_newest_first(app, make_customer):
    customer = make_customer()
    first = record_due("shop-1", customer.id, 1, 10)
    db.session.commit()
    second = record_payment("shop-1", customer.id, None, 5)
    db.session.commit()
    ids = [t.id for t in customer_transactions("shop-1", customer.id)]
    assert ids == [second.id, first.id]
