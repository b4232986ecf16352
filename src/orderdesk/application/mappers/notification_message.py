from __future__ import annotations

from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

from orderdesk.application.dto.responses import OrderResponse
from orderdesk.application.ports.notifier import ChatMessage

LOCATION_LABELS = {
    "kalidas": "Kalidas (칼리다스)",
    "kyeongnamA": "Kyeongnam A (경남A)",
    "kyeongnamB": "Kyeongnam B (경남B)",
    "other": "Other address (기타 주소)",
}

PAYMENT_LABELS = {
    "cash": "Cash on delivery",
    "transfer": "Bank transfer",
}

STATUS_LABELS = {
    "pending": "🔔 Received",
    "confirmed": "✅ Confirmed",
    "preparing": "👨‍🍳 Preparing",
    "ready": "🍽️ Ready",
    "delivered": "🛵 Delivered",
    "completed": "✅ Completed",
    "cancelled": "❌ Cancelled",
}


def format_price(amount: int) -> str:
    return f"{amount:,} VND"


def location_label(location: str | None) -> str:
    if not location:
        return "Not specified"
    return LOCATION_LABELS.get(location, location)


def payment_label(payment_method: str) -> str:
    return PAYMENT_LABELS.get(payment_method, payment_method)


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, status)


def _mrkdwn(text: str) -> dict[str, Any]:
    return {"type": "mrkdwn", "text": text}


def _delivery_text(order: OrderResponse) -> str:
    if order.orderType != "delivery":
        return "🏪 Table reservation"
    lines = [f"📍 {location_label(order.deliveryLocation)}"]
    for extra in (order.detailAddress, order.customAddress):
        if extra:
            lines.append(f"   {extra}")
    return "\n".join(lines)


def render_order_placed(order: OrderResponse, tz: ZoneInfo) -> ChatMessage:
    order_type_text = "🛵 Delivery" if order.orderType == "delivery" else "🏪 Table"
    items_text = "\n".join(
        f"• {item.menuItemName} x{item.quantity} - {format_price(item.lineTotal)}"
        for item in order.items
    )
    contact = order.customerPhone
    if order.customerName:
        contact = f"{order.customerName} / {contact}"
    created_local = _localize(order.createdAt, tz)

    header = f"🔔 New order {order.orderNumber}"
    blocks: list[dict[str, Any]] = [
        {"type": "header", "text": {"type": "plain_text", "text": header}},
        {
            "type": "section",
            "fields": [
                _mrkdwn(f"*Order type:*\n{order_type_text}"),
                _mrkdwn(f"*Contact:*\n{contact}"),
            ],
        },
        {"type": "section", "text": _mrkdwn(f"*Delivery:*\n{_delivery_text(order)}")},
        {"type": "divider"},
        {"type": "section", "text": _mrkdwn(f"*Items:*\n{items_text}")},
        {
            "type": "section",
            "fields": [
                _mrkdwn(f"*Subtotal:* {format_price(order.subtotal)}"),
                _mrkdwn(f"*Delivery fee:* {format_price(order.deliveryFee)}"),
                _mrkdwn(f"*Tax:* {format_price(order.tax)}"),
                _mrkdwn(f"*Total:* {format_price(order.total)}"),
            ],
        },
        {
            "type": "section",
            "text": _mrkdwn(f"*Payment:* {payment_label(order.paymentMethod)}"),
        },
        {
            "type": "context",
            "elements": [
                _mrkdwn(
                    f"Ordered at {created_local:%Y-%m-%d %H:%M} · "
                    f"ETA {order.estimatedDeliveryTime} min"
                )
            ],
        },
    ]
    return ChatMessage(text=f"{header} ({format_price(order.total)})", blocks=blocks)


def render_status_changed(order: OrderResponse, previous_status: str | None) -> ChatMessage:
    label = status_label(order.status)
    text = f"Order {order.orderNumber} status update: {label}"
    body = f"🔄 *Order status update*\nOrder number: {order.orderNumber}\nStatus: {label}"
    if previous_status:
        body += f"\nPrevious: {status_label(previous_status)}"
    return ChatMessage(text=text, blocks=[{"type": "section", "text": _mrkdwn(body)}])


def _localize(value: datetime, tz: ZoneInfo) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(tz)
