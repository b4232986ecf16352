from __future__ import annotations

from orderdesk.application.dto.responses import OrderItemResponse, OrderResponse
from orderdesk.domain.order.entities import Order


def to_order_response(order: Order) -> OrderResponse:
    customer = order.customer
    return OrderResponse(
        id=int(order.order_id),
        orderNumber=str(order.order_number),
        orderType=order.order_type.value,
        customerName=customer.name,
        customerPhone=customer.phone,
        deliveryLocation=(
            customer.delivery_location.value if customer.delivery_location else None
        ),
        detailAddress=customer.detail_address,
        customAddress=customer.custom_address,
        paymentMethod=order.payment_method.value,
        subtotal=order.pricing.subtotal,
        deliveryFee=order.pricing.delivery_fee,
        tax=order.pricing.tax,
        total=order.pricing.total,
        status=order.status.value,
        estimatedDeliveryTime=order.estimated_delivery_time,
        createdAt=order.created_at,
        updatedAt=order.updated_at,
        items=[
            OrderItemResponse(
                id=int(item.item_id),
                orderId=int(item.order_id),
                menuItemId=int(item.menu_item_id),
                menuItemName=item.menu_item_name,
                quantity=item.quantity,
                price=item.price,
                lineTotal=item.line_total,
            )
            for item in order.items
        ],
    )
