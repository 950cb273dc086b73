import asyncio
import smtplib
import ssl
from email.message import EmailMessage
from typing import Optional

from storefront.config import settings


async def send_email(to: str, subject: str, html: str, sender_name: Optional[str] = None):
    """
    Plain SMTP sender.
    - Port 465 starts with SSL; with smtp_use_starttls=True (587) it upgrades via STARTTLS.
    - The blocking send runs in the default executor.
    """
    from_addr = settings.smtp_from or settings.smtp_user
    if not (settings.smtp_configured and from_addr):
        raise RuntimeError("SMTP config incomplete: check host/port/user/password/from")

    msg = EmailMessage()
    msg["To"] = to
    msg["From"] = f"{sender_name} <{from_addr}>" if sender_name else from_addr
    msg["Subject"] = subject
    msg.set_content("View this e-mail as HTML.")
    msg.add_alternative(html, subtype="html")

    def _send_blocking():
        context = ssl.create_default_context()
        if settings.smtp_use_starttls:
            with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as server:
                server.ehlo()
                server.starttls(context=context)
                server.ehlo()
                server.login(settings.smtp_user, settings.smtp_password)
                server.send_message(msg)
        else:
            with smtplib.SMTP_SSL(settings.smtp_host, settings.smtp_port, context=context) as server:
                server.login(settings.smtp_user, settings.smtp_password)
                server.send_message(msg)

    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, _send_blocking)


def order_confirmation_html(payment_id: str, amount: Optional[float], currency: str) -> str:
    total = f"{amount:.2f} {currency}" if amount is not None else currency
    return (
        "<h2>Thank you for your order!</h2>"
        f"<p>Your payment <b>{payment_id}</b> was received.</p>"
        f"<p>Total: {total}</p>"
    )
