import os
import sys
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from models import db
from models.item import Item
from models.customer import Customer

OWNER = "shop-1"


@pytest.fixture(scope='session')
def app_instance(tmp_path_factory):
    os.environ.setdefault('APP_ENV', 'testing')
    os.environ.setdefault('DATABASE_URL', 'sqlite:///:memory:')
    from app import create_app
    app = create_app()
    app.config.update(
        TESTING=True,
        SQLALCHEMY_DATABASE_URI='sqlite:///:memory:',
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        INVOICE_DOCUMENT_DIR=str(tmp_path_factory.mktemp("invoices")),
    )
    return app


@pytest.fixture(scope='function')
def app(app_instance):
    with app_instance.app_context():
        db.drop_all()
        db.create_all()
        yield app_instance
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    return app.test_client()


def login(client, owner_id=OWNER):
    r = client.post("/__auth/login_stub", json={"owner_id": owner_id})
    assert r.status_code == 200
    return {"Authorization": f"Bearer {r.get_json()['data']['access']}"}


@pytest.fixture()
def auth_headers(client):
    return login(client)


@pytest.fixture()
def make_item(app):
    def _make(name="Soap", stock_qty=10, selling_price=40.0, cost_price=30.0,
              low_stock_limit=5, owner_id=OWNER):
        item = Item(
            owner_id=owner_id,
            name=name,
            cost_price=cost_price,
            selling_price=selling_price,
            stock_qty=stock_qty,
            low_stock_limit=low_stock_limit,
        )
        db.session.add(item)
        db.session.commit()
        return item
    return _make


@pytest.fixture()
def make_customer(app):
    def _make(name="Asha", phone="9876543210", email=None, owner_id=OWNER):
        customer = Customer(owner_id=owner_id, name=name, phone=phone, email=email, dues=0)
        db.session.add(customer)
        db.session.commit()
        return customer
    return _make
