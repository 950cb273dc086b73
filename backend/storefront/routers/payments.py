"""
storefront/routers/payments.py

- POST /payments/intent   opens an iyzico checkout form for the caller's cart total
- POST /payments/confirm  reads the result back; on success mails a receipt (if SMTP is set up)
"""
import logging
import smtplib
import uuid

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool

from storefront.config import settings
from storefront.core.email_utils import order_confirmation_html, send_email
from storefront.core.errors import InvalidInput
from storefront.core.security import get_current_user
from storefront.deps import get_cart_engine
from storefront.integrations import payment
from storefront.schemas.payment import PaymentConfirmIn, PaymentConfirmOut, PaymentIntentOut
from storefront.services.cart_engine import CartEngine

logger = logging.getLogger("storefront.payment")

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post("/intent", response_model=PaymentIntentOut)
def create_payment_intent(current_user: dict = Depends(get_current_user),
                          engine: CartEngine = Depends(get_cart_engine)):
    cart, products = engine.fetch_with_products(current_user["id"])
    if not cart.lines or cart.total <= 0:
        raise InvalidInput("Invalid amount: cart is empty")

    basket = [
        {
            "id": line.product_id,
            "name": products[line.product_id].name if line.product_id in products else "Item",
            "line_total": line.line_total,
        }
        for line in cart.lines
    ]
    data = payment.create_payment_intent(
        conversation_id=str(uuid.uuid4()),
        user=current_user,
        basket=basket,
        amount=cart.total,
        currency=settings.currency,
    )
    return PaymentIntentOut(
        client_secret=data["token"],
        payment_page_url=data.get("paymentPageUrl"),
        checkout_form_content=data.get("checkoutFormContent"),
        amount=float(cart.total),
        currency=settings.currency.upper(),
        simulated=bool(data.get("simulated")),
    )


@router.post("/confirm", response_model=PaymentConfirmOut)
async def confirm_payment(body: PaymentConfirmIn, current_user: dict = Depends(get_current_user)):
    result = await run_in_threadpool(payment.retrieve_payment, body.token)
    if result.get("status") != "success" or result.get("paymentStatus") != "SUCCESS":
        logger.info("Payment %s not successful: %s", body.token, result.get("errorMessage"))
        raise HTTPException(status_code=400, detail="Payment not successful")

    payment_id = str(result.get("paymentId") or "")
    paid_price = result.get("paidPrice")
    paid = float(paid_price) if paid_price is not None else None

    receipt_to = body.email or current_user.get("email")
    if receipt_to and settings.smtp_configured:
        try:
            await send_email(
                receipt_to,
                "Order confirmation",
                order_confirmation_html(payment_id, paid, settings.currency.upper()),
            )
        except (OSError, smtplib.SMTPException, RuntimeError):
            logger.exception("Confirmation e-mail to %s failed", receipt_to)

    return PaymentConfirmOut(
        status="succeeded",
        payment_id=payment_id,
        paid_price=paid,
        message="Payment successful",
    )
