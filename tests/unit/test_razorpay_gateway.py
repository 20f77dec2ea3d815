import pytest
import razorpay
import requests

from src.domain.exceptions import PaymentGatewayError, SignatureMismatchError


def _flip(char: str) -> str:
    return "0" if char != "0" else "1"


def test_create_order_sends_paise_and_timeout(gateway, razorpay_client):
    order = gateway.create_order(amount_paise=500000, currency="INR", receipt="receipt_1")

    assert order["amount"] == 500000
    assert order["receipt"] == "receipt_1"
    razorpay_client.order.create.assert_called_once_with(
        data={"amount": 500000, "currency": "INR", "receipt": "receipt_1"},
        timeout=5,
    )


@pytest.mark.parametrize(
    "error",
    [
        razorpay.errors.BadRequestError("amount too small"),
        razorpay.errors.ServerError("upstream down"),
        requests.Timeout("read timed out"),
        requests.ConnectionError("no route"),
    ],
)
def test_create_order_failures_become_gateway_errors(gateway, razorpay_client, error):
    razorpay_client.order.create.side_effect = error

    with pytest.raises(PaymentGatewayError):
        gateway.create_order(amount_paise=100, currency="INR", receipt="receipt_2")


def test_create_order_without_id_is_rejected(gateway, razorpay_client):
    razorpay_client.order.create.side_effect = None
    razorpay_client.order.create.return_value = {}

    with pytest.raises(PaymentGatewayError):
        gateway.create_order(amount_paise=100, currency="INR", receipt="receipt_3")


def test_recomputed_signature_matches(gateway, signer):
    gateway.verify_signature("order_abc", "pay_xyz", signer("order_abc", "pay_xyz"))


def test_any_flipped_character_is_rejected(gateway, signer):
    signature = signer("order_abc", "pay_xyz")

    for position in range(len(signature)):
        forged = signature[:position] + _flip(signature[position]) + signature[position + 1:]
        with pytest.raises(SignatureMismatchError):
            gateway.verify_signature("order_abc", "pay_xyz", forged)


def test_signature_from_other_secret_is_rejected(gateway, signer):
    with pytest.raises(SignatureMismatchError):
        gateway.verify_signature(
            "order_abc",
            "pay_xyz",
            signer("order_abc", "pay_xyz", secret="someone-else"),
        )


def test_signature_is_bound_to_payment_id(gateway, signer):
    with pytest.raises(SignatureMismatchError):
        gateway.verify_signature("order_abc", "pay_other", signer("order_abc", "pay_xyz"))


def test_non_ascii_signature_is_a_mismatch(gateway, signer):
    signature = signer("order_abc", "pay_xyz")

    with pytest.raises(SignatureMismatchError):
        gateway.verify_signature("order_abc", "pay_xyz", "é" + signature[1:])
