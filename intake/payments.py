# intake/payments.py
import uuid, logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Optional

import requests

from intake.errors import GatewayError, ValidationError

logger = logging.getLogger(__name__)


def to_minor_units(amount) -> int:
    """Convert a major-unit amount (number or numeric string) to integer minor units."""
    if isinstance(amount, bool):
        raise ValidationError("amount must be a number")
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"invalid amount: {amount!r}")
    if not value.is_finite():
        raise ValidationError(f"invalid amount: {amount!r}")
    return int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def new_receipt_id() -> str:
    return f"rcpt_{uuid.uuid4().hex[:16]}"


class PaymentOrderGateway:
    """
    Thin adapter over the Razorpay Orders API. Settlement and payment
    status reconciliation are the provider's business, not ours.
    """
    def __init__(self, key_id: Optional[str], key_secret: Optional[str],
                 api_url: str = "https://api.razorpay.com/v1", timeout: float = 15.0,
                 session: Optional[requests.Session] = None):
        self.key_id = key_id
        self.key_secret = key_secret
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def create_order(self, amount_minor_units: int, currency: str, receipt_id: str) -> Dict[str, Any]:
        if not self.key_id or not self.key_secret:
            raise GatewayError("payment gateway is not configured")
        payload = {"amount": amount_minor_units, "currency": currency, "receipt": receipt_id}
        try:
            resp = self.session.post(
                f"{self.api_url}/orders",
                json=payload,
                auth=(self.key_id, self.key_secret),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("payment gateway unreachable for receipt %s: %s", receipt_id, exc)
            raise GatewayError("payment gateway unreachable") from exc
        if resp.status_code >= 300:
            logger.error("payment gateway rejected receipt %s: HTTP %s %s", receipt_id, resp.status_code, resp.text[:500])
            raise GatewayError(f"payment gateway rejected the order (HTTP {resp.status_code})")
        try:
            body = resp.json()
        except ValueError as exc:
            raise GatewayError("payment gateway returned a non-JSON response") from exc
        if not isinstance(body, dict) or "id" not in body:
            raise GatewayError("payment gateway response has no order id")
        logger.info("created payment order %s for receipt %s", body["id"], receipt_id)
        return {
            "gateway_order_id": body["id"],
            "amount": body.get("amount", amount_minor_units),
            "currency": body.get("currency", currency),
            "status": body.get("status", "created"),
            "receipt": body.get("receipt", receipt_id),
        }
