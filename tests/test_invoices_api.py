from app.version import API_PREFIX
from conftest import login
from models import db
from models.item import Item

URL = f"{API_PREFIX}/invoices"


def test_create_invoice(client, auth_headers, make_item, make_customer):
    item = make_item(stock_qty=10)
    customer = make_customer()
    r = client.post(URL, json={
        "customerId": customer.id,
        "items": [{"item": item.id, "quantity": 2, "price": 50}],
        "discount": 10,
        "paidAmount": 40,
        "paymentMethod": "upi",
    }, headers=auth_headers)
    assert r.status_code == 201
    body = r.get_json()
    assert body["message"] == "Invoice created successfully"
    data = body["data"]
    assert data["invoice_no"] == "INV-00001"
    assert data["subtotal"] == 100
    assert data["total_amount"] == 90
    assert data["payment_status"] == "partial"
    assert data["items"][0]["quantity"] == 2


def test_create_invoice_needs_items(client, auth_headers):
    r = client.post(URL, json={"items": []}, headers=auth_headers)
    assert r.status_code == 400
    assert r.get_json()["message"] == "No items in invoice"


def test_create_invoice_schema_errors(client, auth_headers):
    r = client.post(URL, json={"items": [{"item": 1, "quantity": -1, "price": 5}]},
                    headers=auth_headers)
    assert r.status_code == 400
    body = r.get_json()
    assert body["message"] == "Invalid request body"
    assert body["details"]["errors"][0]["field"].startswith("items")


def test_create_invoice_bad_payment_method(client, auth_headers, make_item):
    item = make_item()
    r = client.post(URL, json={
        "items": [{"item": item.id, "quantity": 1, "price": 5}],
        "payment_method": "cheque",
    }, headers=auth_headers)
    assert r.status_code == 400


def test_insufficient_stock_conflict(client, auth_headers, make_item):
    item = make_item(name="Sugar", stock_qty=1)
    r = client.post(URL, json={"items": [{"item": item.id, "quantity": 3, "price": 5}]},
                    headers=auth_headers)
    assert r.status_code == 409
    assert "Sugar" in r.get_json()["message"]
    r = client.get(URL, headers=auth_headers)
    assert r.get_json()["data"] == []


def test_unknown_customer_not_found(client, auth_headers, make_item):
    item = make_item()
    r = client.post(URL, json={"customer_id": 77, "items": [{"item": item.id, "quantity": 1, "price": 5}]},
                    headers=auth_headers)
    assert r.status_code == 404


def test_quote_saves_nothing(client, auth_headers, make_item):
    item = make_item(stock_qty=10)
    r = client.post(f"{URL}/quote", json={
        "items": [{"item": item.id, "quantity": 3, "price": 10}],
        "discount": 5,
    }, headers=auth_headers)
    assert r.status_code == 200
    data = r.get_json()["data"]
    assert data["total_amount"] == 25
    assert data["payment_status"] == "unpaid"
    db.session.expire_all()
    assert db.session.get(Item, item.id).stock_qty == 10
    assert client.get(URL, headers=auth_headers).get_json()["data"] == []


def test_list_get_delete(client, auth_headers, make_item, make_customer):
    item = make_item(stock_qty=10)
    customer = make_customer()
    created = client.post(URL, json={
        "customer_id": customer.id,
        "items": [{"item": item.id, "quantity": 1, "price": 10}],
        "paid_amount": 10,
    }, headers=auth_headers).get_json()["data"]
    client.post(URL, json={"items": [{"item": item.id, "quantity": 1, "price": 10}]},
                headers=auth_headers)

    listed = client.get(URL, headers=auth_headers).get_json()["data"]
    assert [inv["invoice_no"] for inv in listed] == ["INV-00002", "INV-00001"]
    assert listed[1]["customer"]["name"] == customer.name

    r = client.get(f"{URL}/{created['id']}", headers=auth_headers)
    assert r.status_code == 200
    assert r.get_json()["data"]["customer"]["phone"] == customer.phone

    r = client.delete(f"{URL}/{created['id']}", headers=auth_headers)
    assert r.status_code == 200
    assert r.get_json()["message"] == "Invoice deleted"
    assert client.get(f"{URL}/{created['id']}", headers=auth_headers).status_code == 404

    # numbers are not reused after a delete
    r = client.post(URL, json={"items": [{"item": item.id, "quantity": 1, "price": 10}]},
                    headers=auth_headers)
    assert r.get_json()["data"]["invoice_no"] == "INV-00003"


def test_invoices_scoped_to_owner(client, auth_headers, make_item):
    item = make_item(stock_qty=10)
    created = client.post(URL, json={"items": [{"item": item.id, "quantity": 1, "price": 10}]},
                          headers=auth_headers).get_json()["data"]

    other = login(client, "shop-2")
    assert client.get(URL, headers=other).get_json()["data"] == []
    assert client.get(f"{URL}/{created['id']}", headers=other).status_code == 404
    assert client.delete(f"{URL}/{created['id']}", headers=other).status_code == 404
    r = client.post(URL, json={"items": [{"item": item.id, "quantity": 1, "price": 10}]},
                    headers=other)
    # another owner's item is unknown; best effort still issues its own first number
    assert r.status_code == 201
    assert r.get_json()["data"]["invoice_no"] == "INV-00001"
