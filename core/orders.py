"""Service order (O.S.) lifecycle and sale finalization."""
from __future__ import annotations

import logging
from decimal import Decimal
from io import BytesIO
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from core.constants import ORDER_STATUS_FLOW, SALES_CATEGORY
from core.errors import ValidationError
from core.models import CartItem, ServiceOrder, Transaction
from core.repositories import Repositories
from core.services import transaction

logger = logging.getLogger(__name__)


def next_status(status: str) -> str:
    """Return the stage after ``status``; the terminal stage maps to itself."""
    if status not in ORDER_STATUS_FLOW:
        raise ValidationError(f"Status inválido: {status}")
    index = ORDER_STATUS_FLOW.index(status)
    return ORDER_STATUS_FLOW[min(index + 1, len(ORDER_STATUS_FLOW) - 1)]


def advance(repos: Repositories, order_id: int) -> ServiceOrder:
    """Move an order one stage forward. Delivered orders are returned untouched."""
    order = repos.orders.get(order_id)
    target = next_status(order.status)
    if target == order.status:
        return order
    logger.info("Order #%s: %s -> %s", order_id, order.status, target)
    return repos.orders.set_status(order_id, target)


def cart_total(cart: Iterable[CartItem]) -> Decimal:
    return sum((item.subtotal for item in cart), Decimal("0.00"))


def _income_fields(order_id: int, client_name: str, total: Decimal, payment_method: str) -> Dict[str, Any]:
    return {
        "description": f"Venda O.S. #{order_id} - {client_name}",
        "amount": total,
        "type": "INCOME",
        "category": SALES_CATEGORY,
        "payment_method": payment_method,
        "status": "PAID",
        "order_id": order_id,
    }


def finalize_sale(
    repos: Repositories,
    cart: Sequence[CartItem],
    client_id: Optional[int] = None,
    client_name: str = "",
    payment_method: str = "CREDIT_CARD",
    prescription: Optional[Dict[str, Any]] = None,
    delivery_date=None,
    client_fields: Optional[Dict[str, Any]] = None,
) -> Tuple[ServiceOrder, Transaction]:
    """Create the O.S., its income entry and the stock decrements atomically.

    ``client_fields`` registers a new client (no ``client_id``) or updates the
    given one in the same transaction. Either everything is written or
    nothing is: an insufficient stock or a database failure rolls back the
    whole sale, client changes included.
    """
    if not cart:
        raise ValidationError("Adicione pelo menos um produto à venda.")
    total = cart_total(cart)
    client_name = client_name or (client_fields or {}).get("name") or ""
    order_fields: Dict[str, Any] = {
        "client_name": client_name,
        "items": [
            item.product.name if item.qty == 1 else f"{item.qty}x {item.product.name}"
            for item in cart
        ],
        "total_value": total,
        "prescription": prescription,
    }
    if delivery_date is not None:
        order_fields["delivery_date"] = delivery_date

    with transaction(repos.conn) as cur:
        if client_fields is not None:
            if client_id:
                repos.clients.update_with(cur, client_id, **client_fields)
            else:
                client_id = repos.clients.insert_with(cur, **client_fields)
        order_id = repos.orders.insert_with(cur, client_id=client_id, **order_fields)
        for item in cart:
            repos.products.decrement_stock(cur, item.product.id, item.qty)
        name = client_name or repos.orders.defaults()["client_name"]
        repos.transactions.insert_with(
            cur, **_income_fields(order_id, name, total, payment_method)
        )

    logger.info("Sale finalized: O.S. #%s total %s", order_id, total)
    order = repos.orders.get(order_id)
    return order, repos.transactions.get_by_order(order_id)


def export_orders_pdf(orders: Sequence[ServiceOrder], shop_name: str) -> bytes:
    """Render the selected orders as a one-table PDF report."""
    buf = BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=landscape(A4))
    styles = getSampleStyleSheet()
    headers = ["O.S.", "Cliente", "Itens", "Status", "Criada em", "Entrega", "Valor (R$)"]
    data = [headers]
    for order in orders:
        data.append([
            f"#{order.id}",
            order.client_name,
            Paragraph(", ".join(order.items) or "-", styles["BodyText"]),
            order.status_label,
            order.created_at.strftime("%d/%m/%Y") if order.created_at else "-",
            order.delivery_date.strftime("%d/%m/%Y") if order.delivery_date else "-",
            f"{order.total_value:.2f}",
        ])
    table = Table(data, repeatRows=1, colWidths=[50, 140, 250, 100, 70, 70, 70])
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
                ("FONTSIZE", (0, 0), (-1, -1), 8),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("ALIGN", (-1, 1), (-1, -1), "RIGHT"),
            ]
        )
    )
    doc.build([
        Paragraph(f"{shop_name} - Ordens de Serviço", styles["Title"]),
        Spacer(1, 12),
        table,
    ])
    return buf.getvalue()
