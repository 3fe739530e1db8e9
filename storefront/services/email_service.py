"""Email service using Resend for transactional emails."""

import base64
import html
import logging
from typing import Any

import resend

from storefront.core.config import get_settings
from storefront.services.invoice_service import format_dkk

logger = logging.getLogger(__name__)

CONFIRMATION_SUBJECT = "Tak for din bestilling! (Ordrebekræftelse)"


def _order_parts(order: dict[str, Any]) -> tuple[list[dict], dict, dict, dict]:
    basket = order.get("basket_details") or {}
    customer = order.get("customer_details") or basket.get("customerDetails") or {}
    delivery = basket.get("deliveryDetails") or {}
    address = delivery.get("deliveryAddress") or {}
    return basket.get("items") or [], customer, delivery, address


def build_confirmation_text(order: dict[str, Any]) -> str:
    """Plain-text body of the order confirmation."""
    items, customer, delivery, address = _order_parts(order)
    lines = [
        "Tak for din bestilling!",
        "",
        "Ordreoplysninger",
        f"Ordre-ID: {order.get('id', '')}",
        f"Status: {order.get('status') or 'ukendt'}",
        "",
        "Produkter:",
    ]
    lines += [f"{item.get('slug', '')} × {item.get('quantity', 0)} ({format_dkk(item.get('totalPrice'))})" for item in items]
    lines += [
        "",
        "Levering:",
        f"Type: {delivery.get('deliveryType') or 'ukendt'}",
        f"Navn: {address.get('name') or ''}",
        f"Adresse: {address.get('address') or ''}",
        f"{address.get('postalCode') or ''} {address.get('city') or ''}".strip(),
        f"Land: {address.get('country') or ''}",
        f"Leveringsgebyr: {format_dkk(delivery.get('deliveryFee'))}",
        "",
        "Kundeoplysninger:",
        f"Navn: {customer.get('fullName') or ''}",
        f"Email: {customer.get('email') or ''}",
        f"Telefon: {customer.get('mobileNumber') or ''}",
        "",
        f"I alt: {format_dkk(order.get('total_price'))} (inkl. moms og pant)",
    ]
    return "\n".join(lines)


def build_confirmation_html(order: dict[str, Any]) -> str:
    """HTML body of the order confirmation."""
    items, customer, delivery, address = _order_parts(order)
    e = html.escape

    item_rows = "".join(
        f"""
            <tr>
                <td style="padding: 6px 0;">{e(str(item.get('slug', '')))} × {e(str(item.get('quantity', 0)))}</td>
                <td style="padding: 6px 0; text-align: right;">{format_dkk(item.get('totalPrice'))}</td>
            </tr>"""
        for item in items
    )

    return f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>Ordrebekræftelse</title>
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <h1 style="color: #111; font-size: 24px;">Tak for din bestilling!</h1>

    <p><strong>Ordreoplysninger</strong><br>
       Ordre-ID: {e(str(order.get('id', '')))}<br>
       Status: {e(str(order.get('status') or 'ukendt'))}</p>

    <table style="width: 100%; border-collapse: collapse;">{item_rows}
    </table>

    <p><strong>Levering:</strong> {e(str(delivery.get('deliveryType') or 'ukendt'))}<br>
       {e(str(address.get('name') or ''))}<br>
       {e(str(address.get('address') or ''))}<br>
       {e(str(address.get('postalCode') or ''))} {e(str(address.get('city') or ''))}<br>
       Leveringsgebyr: {format_dkk(delivery.get('deliveryFee'))}</p>

    <p><strong>Kundeoplysninger:</strong><br>
       Navn: {e(str(customer.get('fullName') or ''))}<br>
       Email: {e(str(customer.get('email') or ''))}<br>
       Telefon: {e(str(customer.get('mobileNumber') or ''))}</p>

    <p style="font-size: 18px;"><strong>I alt:</strong> {format_dkk(order.get('total_price'))} (inkl. moms og pant)</p>
</body>
</html>
"""


class EmailService:
    """Service for sending transactional emails via Resend."""

    def __init__(self) -> None:
        """Initialize email service with Resend API key."""
        settings = get_settings()
        resend.api_key = settings.resend_api_key
        self.from_email = settings.email_from_address
        self.bcc_email = settings.email_bcc_address

    async def send_order_confirmation(
        self,
        order: dict[str, Any],
        invoice_pdf: bytes | None = None,
    ) -> dict[str, Any]:
        """Send the order confirmation with the invoice attached.

        Failures are logged and reported in the result, never raised.

        Args:
            order: Order row.
            invoice_pdf: Optional rendered invoice.

        Returns:
            dict: ``success`` plus the Resend email id or the error.
        """
        _, customer, _, _ = _order_parts(order)
        to_email = customer.get("email")
        if not to_email:
            logger.warning("Order %s has no customer email, confirmation not sent", order.get("id"))
            return {"success": False, "error": "missing customer email"}

        params: dict[str, Any] = {
            "from": self.from_email,
            "to": [to_email],
            "subject": CONFIRMATION_SUBJECT,
            "html": build_confirmation_html(order),
            "text": build_confirmation_text(order),
        }
        if self.bcc_email:
            params["bcc"] = [self.bcc_email]
        if invoice_pdf:
            params["attachments"] = [
                {
                    "filename": f"faktura-{order.get('id', 'ordre')}.pdf",
                    "content": base64.b64encode(invoice_pdf).decode("ascii"),
                }
            ]

        try:
            response = resend.Emails.send(params)

            logger.info("Order confirmation sent to %s for order %s, id: %s", to_email, order.get("id"), response.get("id"))
            return {"success": True, "email_id": response.get("id")}

        except Exception as e:
            logger.error("Failed to send order confirmation for %s to %s: %s", order.get("id"), to_email, str(e))
            return {"success": False, "error": str(e)}
