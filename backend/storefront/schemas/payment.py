# storefront/schemas/payment.py
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class PaymentIntentOut(BaseModel):
    client_secret: str = Field(..., description="Checkout-form token the client completes the payment with")
    payment_page_url: Optional[str] = None
    checkout_form_content: Optional[str] = None
    amount: float
    currency: str
    simulated: bool = False


class PaymentConfirmIn(BaseModel):
    token: str = Field(..., min_length=1)
    email: Optional[EmailStr] = Field(None, description="Receipt address; defaults to the account e-mail")


class PaymentConfirmOut(BaseModel):
    status: str
    payment_id: Optional[str] = None
    paid_price: Optional[float] = None
    message: str
