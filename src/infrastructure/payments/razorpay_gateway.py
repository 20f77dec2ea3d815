# src/infrastructure/payments/razorpay_gateway.py

from functools import lru_cache
import logging
import os

from dotenv import load_dotenv
import razorpay
import requests

from src.domain.exceptions import PaymentGatewayError, SignatureMismatchError

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class RazorpayGateway:
    """
    Thin wrapper around the Razorpay SDK.

    Amounts are passed in paise. Order creation failures of any kind,
    timeouts included, surface as PaymentGatewayError.
    """

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: razorpay.Client | None = None,
    ):
        self.key_id = key_id
        self.timeout = timeout
        self.client = client or razorpay.Client(auth=(key_id, key_secret))

    def create_order(self, amount_paise: int, currency: str, receipt: str) -> dict:
        try:
            order = self.client.order.create(
                data={
                    "amount": amount_paise,
                    "currency": currency,
                    "receipt": receipt,
                },
                timeout=self.timeout,
            )
        except (
            razorpay.errors.BadRequestError,
            razorpay.errors.GatewayError,
            razorpay.errors.ServerError,
            requests.RequestException,
        ) as exc:
            logger.warning(
                "Razorpay order creation failed for receipt %s: %s",
                receipt,
                exc,
            )
            raise PaymentGatewayError("Unable to create payment order") from exc

        if not order or not order.get("id"):
            raise PaymentGatewayError("Payment gateway returned no order")
        return order

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> None:
        """HMAC-SHA256 over ``order_id|payment_id`` with the key secret."""
        try:
            self.client.utility.verify_payment_signature(
                {
                    "razorpay_order_id": order_id,
                    "razorpay_payment_id": payment_id,
                    "razorpay_signature": signature,
                }
            )
        except (razorpay.errors.SignatureVerificationError, TypeError) as exc:
            # The SDK raises TypeError when either side holds non-ASCII text.
            raise SignatureMismatchError("Invalid payment signature") from exc


@lru_cache(maxsize=1)
def get_payment_gateway() -> RazorpayGateway:
    key_id = os.getenv("RAZORPAY_KEY_ID")
    key_secret = os.getenv("RAZORPAY_KEY_SECRET")
    if not key_id or not key_secret:
        raise PaymentGatewayError(
            "Razorpay keys not configured. Set RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET."
        )
    timeout = float(os.getenv("RAZORPAY_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS)))
    logger.info("Razorpay gateway configured for key %s", key_id)
    return RazorpayGateway(key_id=key_id, key_secret=key_secret, timeout=timeout)
