from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from intake.errors import GatewayError, ValidationError
from intake.payments import PaymentOrderGateway, new_receipt_id, to_minor_units


@pytest.mark.parametrize("amount, expected", [
    (10, 1000),
    ("499.99", 49999),
    (19.99, 1999),
    ("0.005", 1),
    ("  250 ", 25000),
])
def test_to_minor_units(amount, expected):
    assert to_minor_units(amount) == expected


@pytest.mark.parametrize("amount", ["abc", "", None, True, "Infinity"])
def test_to_minor_units_rejects_non_numbers(amount):
    with pytest.raises(ValidationError):
        to_minor_units(amount)


def _response(status_code: int, body=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = str(body)
    resp.json.return_value = body
    return resp


def test_create_order_posts_to_orders_endpoint():
    session = MagicMock()
    session.post.return_value = _response(200, {
        "id": "order_9A33XWu170gUtm", "amount": 50000, "currency": "INR", "status": "created", "receipt": "rcpt_1",
    })
    gateway = PaymentOrderGateway("key", "secret", api_url="https://gateway.test/v1/", session=session)

    order = gateway.create_order(50000, "INR", "rcpt_1")

    assert order == {
        "gateway_order_id": "order_9A33XWu170gUtm",
        "amount": 50000,
        "currency": "INR",
        "status": "created",
        "receipt": "rcpt_1",
    }
    args, kwargs = session.post.call_args
    assert args[0] == "https://gateway.test/v1/orders"
    assert kwargs["json"] == {"amount": 50000, "currency": "INR", "receipt": "rcpt_1"}
    assert kwargs["auth"] == ("key", "secret")


def test_unconfigured_gateway_does_not_call_out():
    session = MagicMock()
    gateway = PaymentOrderGateway(None, None, session=session)

    with pytest.raises(GatewayError, match="not configured"):
        gateway.create_order(100, "INR", "rcpt_1")
    session.post.assert_not_called()


def test_transport_errors_become_gateway_errors():
    session = MagicMock()
    session.post.side_effect = requests.ConnectionError("connection refused")
    gateway = PaymentOrderGateway("key", "secret", session=session)

    with pytest.raises(GatewayError, match="unreachable"):
        gateway.create_order(100, "INR", "rcpt_1")


def test_rejected_orders_become_gateway_errors():
    session = MagicMock()
    session.post.return_value = _response(400, {"error": {"description": "amount too small"}})
    gateway = PaymentOrderGateway("key", "secret", session=session)

    with pytest.raises(GatewayError, match="HTTP 400"):
        gateway.create_order(1, "INR", "rcpt_1")


def test_receipt_ids_are_unique():
    assert len({new_receipt_id() for _ in range(100)}) == 100
