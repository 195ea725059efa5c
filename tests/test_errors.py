from app.errors import handle_billing_error
from app.exceptions import UpstreamError, ConflictError
from app.utils.jwt import create_access_token, decode_token, TokenError
import pytest


def test_404_json_envelope(client):
    resp = client.get('/no/such/route')
    assert resp.status_code == 404
    data = resp.get_json()
    assert data['status'] == 'error'
    assert data['code'] == 404
    assert isinstance(data.get('message'), str)


def test_unexpected_500_json_envelope(client):
    resp = client.get('/__boom')
    assert resp.status_code == 500
    data = resp.get_json()
    assert data['status'] == 'error'
    assert data['code'] == 500
    assert 'RuntimeError' not in data['message']


def test_ok_helper_endpoint(client):
    resp = client.get('/__ok')
    assert resp.status_code == 200
    assert resp.get_json() == {
        'status': 'success',
        'message': 'success',
        'data': {'ping': 'pong'}
    }


def test_upstream_error_hides_details(app):
    with app.test_request_context('/'):
        resp, status = handle_billing_error(UpstreamError("smtp relay refused connection"))
    assert status == 502
    assert 'smtp' not in resp.get_json()['message']


def test_conflict_error_carries_details(app):
    with app.test_request_context('/'):
        resp, status = handle_billing_error(ConflictError("Insufficient stock", details={"item_id": 1}))
    assert status == 409
    assert resp.get_json()['details'] == {"item_id": 1}


def test_token_round_trip(app):
    token = create_access_token("shop-9")
    assert decode_token(token)["sub"] == "shop-9"


def test_expired_token_rejected(app):
    token = create_access_token("shop-9", minutes=-1)
    with pytest.raises(TokenError):
        decode_token(token)
