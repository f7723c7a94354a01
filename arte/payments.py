"""Polar checkout sessions and webhook events.

Payment only matters to the token pipeline indirectly: a completed order
grants export access to the buyer's email.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from arte import access

log = logging.getLogger(__name__)

POLAR_API_URL = os.getenv("POLAR_API_URL", "https://api.polar.sh/v1").rstrip("/")
POLAR_TIMEOUT_SECS = float(os.getenv("POLAR_TIMEOUT_SECS", "10") or 10)
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000")

GRANTING_CHECKOUT_STATUSES = {"confirmed", "succeeded"}


class PaymentError(RuntimeError):
    pass


class PaymentConfigError(PaymentError):
    pass


@dataclass(frozen=True)
class Checkout:
    id: str
    url: str


@dataclass(frozen=True)
class WebhookResult:
    event_type: Optional[str]
    granted: bool
    email: Optional[str] = None
    message: str = "Webhook received"


def create_checkout() -> Checkout:
    token = os.getenv("POLAR_ACCESS_TOKEN", "").strip()
    if not token:
        raise PaymentConfigError("Polar access token not configured")
    product_id = os.getenv("POLAR_PRODUCT_ID", "").strip()
    if not product_id:
        raise PaymentConfigError("Polar product ID not configured")

    body = {
        "products": [product_id],
        "success_url": os.getenv("POLAR_SUCCESS_URL", f"{PUBLIC_BASE_URL}?payment=success"),
        "embed_origin": PUBLIC_BASE_URL,
    }
    try:
        resp = requests.post(
            f"{POLAR_API_URL}/checkouts/",
            headers={"Authorization": f"Bearer {token}"},
            json=body,
            timeout=POLAR_TIMEOUT_SECS,
        )
    except requests.RequestException as exc:
        raise PaymentError(f"checkout request failed: {exc}") from exc

    if resp.status_code not in (200, 201):
        log.warning("payments.checkout: HTTP %s: %s", resp.status_code, resp.text[:400])
        raise PaymentError(f"checkout service returned HTTP {resp.status_code}")
    try:
        data = resp.json()
        checkout = Checkout(id=str(data["id"]), url=str(data["url"]))
    except (ValueError, KeyError, TypeError) as exc:
        raise PaymentError("checkout service returned an unexpected body") from exc
    log.info("payments.checkout: created id=%s", checkout.id)
    return checkout


def _dig(payload: Dict[str, Any], *path: str) -> Any:
    node: Any = payload
    for part in path:
        if not isinstance(node, dict):
            return None
        node = node.get(part)
    return node


def _order_email(payload: Dict[str, Any]) -> Optional[str]:
    for path in (("data", "customer", "email"), ("data", "user", "email"), ("data", "customer_email"), ("customer_email",)):
        email = _dig(payload, *path)
        if isinstance(email, str) and email.strip():
            return email
    return None


def handle_webhook(payload: Dict[str, Any]) -> WebhookResult:
    """Grant access for completed purchases; acknowledge everything else.

    ``order.created`` without a customer email raises :class:`PaymentError`.
    """
    event_type = payload.get("type") or payload.get("event")

    if event_type == "order.created":
        email = _order_email(payload)
        if not email:
            log.error("payments.webhook: order.created without customer email")
            raise PaymentError("No customer email in order")
        access.grant(email)
        return WebhookResult(event_type, True, email, "Access granted")

    if event_type == "checkout.updated":
        email = _dig(payload, "data", "customer_email")
        status = _dig(payload, "data", "status")
        if email and status in GRANTING_CHECKOUT_STATUSES:
            access.grant(email)
            return WebhookResult(event_type, True, email, "Access granted")
        log.info("payments.webhook: checkout not completed status=%s", status)

    log.info("payments.webhook: acknowledged event=%s", event_type)
    return WebhookResult(event_type, False)
