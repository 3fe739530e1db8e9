"""Invoice PDF rendering with PyMuPDF."""

from datetime import datetime, timezone
from typing import Any

import fitz  # PyMuPDF

# A4 in points
PAGE_WIDTH = 595
PAGE_HEIGHT = 842
MARGIN = 56
LINE_HEIGHT = 16
FONT = "helv"
FONT_BOLD = "hebo"


def format_dkk(amount_ore: int | float | None) -> str:
    """Format an øre amount as DKK with two decimals, e.g. 12345 -> "123.45 DKK"."""
    return f"{(amount_ore or 0) / 100:.2f} DKK"


def _order_date(order: dict[str, Any]) -> str:
    created = order.get("created_at")
    if isinstance(created, str):
        try:
            created = datetime.fromisoformat(created.replace("Z", "+00:00"))
        except ValueError:
            created = None
    if not isinstance(created, datetime):
        created = datetime.now(timezone.utc)
    return created.strftime("%d-%m-%Y")


def invoice_lines(order: dict[str, Any]) -> list[tuple[str, str]]:
    """Build the (label, amount) rows of an invoice."""
    basket = order.get("basket_details") or {}
    rows: list[tuple[str, str]] = []

    for item in basket.get("items") or []:
        label = f"{item.get('slug', '')} x {item.get('quantity', 0)}"
        if item.get("packages_size"):
            label += f" ({item['packages_size']} stk.)"
        rows.append((label, format_dkk(item.get("totalPrice"))))

    recycling = sum(item.get("totalRecyclingFee") or 0 for item in basket.get("items") or [])
    if recycling:
        rows.append(("Pant", format_dkk(recycling)))

    delivery_fee = (basket.get("deliveryDetails") or {}).get("deliveryFee")
    if delivery_fee:
        rows.append(("Levering", format_dkk(delivery_fee)))
    return rows


def render_invoice_pdf(order: dict[str, Any]) -> bytes:
    """Render an order invoice as an in-memory PDF.

    Args:
        order: Order row with basket and customer snapshots.

    Returns:
        bytes: The PDF document.
    """
    customer = order.get("customer_details") or (order.get("basket_details") or {}).get("customerDetails") or {}

    doc = fitz.open()
    try:
        page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        y = MARGIN + 10

        page.insert_text((PAGE_WIDTH / 2 - 40, y), "Invoice", fontsize=22, fontname=FONT_BOLD)
        y += LINE_HEIGHT * 2.5

        for text in (
            f"Order ID: {order.get('id', '')}",
            f"Date: {_order_date(order)}",
            f"Customer Name: {customer.get('fullName') or ''}",
            f"Email: {customer.get('email') or ''}",
        ):
            page.insert_text((MARGIN, y), text, fontsize=11, fontname=FONT)
            y += LINE_HEIGHT

        y += LINE_HEIGHT
        page.insert_text((MARGIN, y), "Items:", fontsize=12, fontname=FONT_BOLD)
        y += LINE_HEIGHT * 1.5

        for label, amount in invoice_lines(order):
            if y > PAGE_HEIGHT - MARGIN * 2:
                page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
                y = MARGIN + 10
            page.insert_text((MARGIN, y), label, fontsize=11, fontname=FONT)
            page.insert_text((PAGE_WIDTH - MARGIN - 110, y), amount, fontsize=11, fontname=FONT)
            y += LINE_HEIGHT

        y += LINE_HEIGHT
        page.insert_text(
            (PAGE_WIDTH - MARGIN - 220, y),
            f"Total Price: {format_dkk(order.get('total_price'))}",
            fontsize=12,
            fontname=FONT_BOLD,
        )
        return doc.tobytes()
    finally:
        doc.close()
