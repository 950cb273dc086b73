"""
storefront/integrations/payment.py - Payment gateway (iyzico) integration.

A "payment intent" is an iyzico checkout-form session: the backend initializes it
for the cart total and hands the token (the client secret) to the front end,
which completes the card step on iyzico's page. `retrieve_payment` reads the
outcome back by token.

Without API keys the gateway is simulated so development and tests never reach
the network.
"""
import http.client
import json
import logging
import uuid
from decimal import Decimal
from typing import Any, Dict, List

import iyzipay

from storefront.config import settings
from storefront.core.errors import PaymentError

logger = logging.getLogger("storefront.payment")

SIMULATED_PREFIX = "SIMULATED-"


def payments_enabled() -> bool:
    return bool(settings.iyzico_api_key and settings.iyzico_secret_key)


def _options() -> Dict[str, str]:
    return {
        'api_key': settings.iyzico_api_key,
        'secret_key': settings.iyzico_secret_key,
        'base_url': settings.iyzico_base_url,
    }


def _parse(response: Any) -> Dict[str, Any]:
    """The SDK returns an HTTPResponse; older versions hand back a dict."""
    if isinstance(response, dict):
        return response
    raw = response.read() if hasattr(response, 'read') else response
    if isinstance(raw, bytes):
        raw = raw.decode('utf-8')
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise PaymentError("Unreadable response from payment provider") from exc


def _price(value: Decimal) -> str:
    return f"{value:.2f}"


def create_payment_intent(*, conversation_id: str, user: Dict[str, Any],
                          basket: List[Dict[str, Any]], amount: Decimal,
                          currency: str) -> Dict[str, Any]:
    """
    Initializes a checkout form for `amount`.
    - basket: [{id, name, line_total}], the line totals must add up to `amount`.
    Returns the raw provider response (token, paymentPageUrl, checkoutFormContent...).
    """
    if not payments_enabled():
        logger.warning("iyzico API keys not set - simulating payment intent %s", conversation_id)
        return {
            "status": "success",
            "token": f"{SIMULATED_PREFIX}{uuid.uuid4().hex}",
            "paymentPageUrl": None,
            "checkoutFormContent": None,
            "simulated": True,
        }

    name = (user.get('full_name') or "Customer").strip()
    address = {
        "contactName": name,
        "city": "N/A",
        "country": "N/A",
        "address": "N/A",
    }
    request = {
        "locale": "en",
        "conversationId": conversation_id,
        "price": _price(amount),
        "paidPrice": _price(amount),
        "currency": currency.upper(),
        "basketId": conversation_id,
        "paymentGroup": "PRODUCT",
        "callbackUrl": settings.iyzico_callback_url,
        "buyer": {
            "id": user.get('id', ''),
            "name": name.split(" ")[0],
            "surname": name.split(" ")[-1],
            "gsmNumber": user.get('phone') or "",
            "email": user.get('email') or "",
            "identityNumber": "11111111111",  # required by iyzico, not collected by this shop
            "registrationAddress": "N/A",
            "ip": "0.0.0.0",
            "city": "N/A",
            "country": "N/A",
        },
        "shippingAddress": address,
        "billingAddress": address,
        "basketItems": [
            {
                "id": str(item["id"]),
                "name": item.get("name") or "Item",
                "category1": "General",
                "itemType": "PHYSICAL",
                "price": _price(Decimal(str(item["line_total"]))),
            }
            for item in basket
        ],
    }
    try:
        response = iyzipay.CheckoutFormInitialize().create(request, _options())
    except (OSError, http.client.HTTPException) as exc:
        logger.exception("iyzico checkout form initialize failed")
        raise PaymentError(f"Payment provider unreachable: {exc}") from exc

    data = _parse(response)
    if data.get('status') != 'success':
        message = data.get('errorMessage') or "Payment initialization failed"
        logger.warning("iyzico rejected intent %s: %s", conversation_id, message)
        raise PaymentError(message)
    return data


def retrieve_payment(token: str) -> Dict[str, Any]:
    """Checkout form result for `token`; `paymentStatus == "SUCCESS"` means paid."""
    if not payments_enabled():
        # simulated tokens only mean anything while the gateway itself is simulated
        if token.startswith(SIMULATED_PREFIX):
            return {"status": "success", "paymentStatus": "SUCCESS", "paymentId": "SIMULATED", "paidPrice": None}
        raise PaymentError("Payment provider is not configured")

    request = {"locale": "en", "conversationId": token, "token": token}
    try:
        response = iyzipay.CheckoutForm().retrieve(request, _options())
    except (OSError, http.client.HTTPException) as exc:
        logger.exception("iyzico checkout form retrieve failed")
        raise PaymentError(f"Payment provider unreachable: {exc}") from exc
    return _parse(response)
