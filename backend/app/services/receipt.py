"""
Comprobante de venta
- Datos estructurados para el frontend
- Texto plano para impresora térmica de 80 mm (42 columnas)
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from app.core.config import settings
from app.models.order import Order

RECEIPT_WIDTH = 42


def format_currency(amount) -> str:
    return f"S/{Decimal(str(amount or 0)):.2f}"


def build_receipt(order: Order, issued_at: Optional[datetime] = None) -> dict:
    """
    Arma el comprobante de una orden.

    La orden debe venir con productos, servicios y cliente ya cargados.
    """
    items = []
    for line in order.products:
        items.append({
            "name": line.name,
            "quantity": line.quantity,
            "price": float(line.price or 0),
            "amount": float(line.subtotal or 0),
            "type": "product",
        })
    for service in order.services:
        items.append({
            "name": service.name,
            "quantity": 1,
            "price": float(service.price or 0),
            "amount": float(service.price or 0),
            "type": "service",
            "notes": service.description,
        })

    subtotal = sum(Decimal(str(item["amount"])) for item in items)

    client = order.client
    customer = {
        "name": client.name if client else "Cliente general",
        "document_type": client.document_type if client else "doc",
        "document_number": client.document_number if client else "-",
        "phone": client.phone if client else None,
    }

    return {
        "order_id": order.id,
        "order_number": order.order_no,
        "issued_at": issued_at or order.created_at or datetime.utcnow(),
        "business": {
            "name": settings.BUSINESS_NAME,
            "address": settings.BUSINESS_ADDRESS,
            "phone": settings.BUSINESS_PHONE,
            "cuit": settings.BUSINESS_CUIT,
            "email": settings.BUSINESS_EMAIL,
            "footer_text": settings.RECEIPT_FOOTER,
        },
        "customer": customer,
        "items": items,
        "subtotal": float(subtotal),
        "total": float(order.total_amount or subtotal),
        "payment_method": order.payment_method_display,
        "status": order.status_display,
        "has_services": len(order.services) > 0,
    }


def _line(left: str, right: str = "", width: int = RECEIPT_WIDTH) -> str:
    """Texto a la izquierda y a la derecha en una misma línea"""
    space = width - len(right)
    if space <= 0:
        return right[-width:]
    return left[:space - 1].ljust(space) + right if right else left[:width]


def _wrap(text: str, width: int = RECEIPT_WIDTH) -> List[str]:
    words = text.split()
    lines, current = [], ""
    for word in words:
        while len(word) > width:
            if current:
                lines.append(current)
                current = ""
            lines.append(word[:width])
            word = word[width:]
        if not current:
            current = word
        elif len(current) + 1 + len(word) <= width:
            current = f"{current} {word}"
        else:
            lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines or [""]


def render_receipt_text(receipt: dict) -> str:
    """Comprobante en texto monoespaciado; ninguna línea supera RECEIPT_WIDTH"""
    separator = "-" * RECEIPT_WIDTH
    business = receipt["business"]
    customer = receipt["customer"]
    issued_at = receipt["issued_at"]
    if isinstance(issued_at, datetime):
        issued_at = issued_at.strftime("%d/%m/%Y %H:%M")

    out: List[str] = []
    for text in _wrap(business["name"]):
        out.append(text.center(RECEIPT_WIDTH).rstrip())
    for text in (business["address"], f"Tel: {business['phone']}", f"CUIT: {business['cuit']}", business["email"]):
        out.extend(t.center(RECEIPT_WIDTH).rstrip() for t in _wrap(text))
    out.append(separator)

    out.append(_line("Comprobante:", receipt["order_number"]))
    out.append(_line("Fecha:", issued_at))
    out.extend(_wrap(f"Cliente: {customer['name']}"))
    out.append(_line(f"{customer['document_type'].upper()}:", customer["document_number"]))
    if customer.get("phone"):
        out.append(_line("Tel:", customer["phone"]))
    out.append(separator)

    out.append(_line("Cant Descripción", "Importe"))
    for item in receipt["items"]:
        name = item["name"] if item["type"] == "product" else f"[S] {item['name']}"
        out.append(_line(f"{item['quantity']:>3}  {name}", format_currency(item["amount"])))
        if item["quantity"] > 1:
            out.append(_line(f"     @ {format_currency(item['price'])}"))
    out.append(separator)

    out.append(_line("SUBTOTAL", format_currency(receipt["subtotal"])))
    out.append(_line("TOTAL", format_currency(receipt["total"])))
    out.append(_line("Pago:", receipt["payment_method"]))
    out.append(_line("Estado:", receipt["status"]))
    out.append(separator)

    if receipt["has_services"]:
        out.extend(_wrap("Los equipos en servicio se entregan con este comprobante."))
    for text in _wrap(business["footer_text"]):
        out.append(text.center(RECEIPT_WIDTH).rstrip())

    return "\n".join(out) + "\n"
