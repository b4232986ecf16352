from __future__ import annotations

from typing import Any

from orderdesk.application.dto.requests import QuoteRequest
from orderdesk.application.dto.responses import PriceQuoteResponse
from orderdesk.application.errors import ValidationError, field_error
from orderdesk.application.ports.repositories import MenuRepository
from orderdesk.domain.common.ids import MenuItemId
from orderdesk.domain.order.delivery import estimated_delivery_minutes
from orderdesk.domain.order.pricing import CartLine, compute_totals


class QuoteOrder:
    """Price a cart with current catalog prices, without persisting anything."""

    def __init__(self, menu_repository: MenuRepository) -> None:
        self._menu_repository = menu_repository

    def execute(self, request_dto: QuoteRequest) -> PriceQuoteResponse:
        menu_items = self._menu_repository.get_many(
            MenuItemId(line.menu_item_id) for line in request_dto.lines
        )
        errors: list[dict[str, Any]] = []
        cart: list[CartLine] = []
        for index, line in enumerate(request_dto.lines):
            menu_item = menu_items.get(MenuItemId(line.menu_item_id))
            if menu_item is None:
                errors.append(
                    field_error(
                        f"lines.{index}.menuItemId",
                        f"menu item {line.menu_item_id} does not exist",
                    )
                )
                continue
            if not menu_item.available:
                errors.append(
                    field_error(
                        f"lines.{index}.menuItemId",
                        f"menu item {line.menu_item_id} is unavailable",
                    )
                )
                continue
            if line.quantity < 1:
                errors.append(field_error(f"lines.{index}.quantity", "quantity must be >= 1"))
                continue
            cart.append(CartLine(unit_price=menu_item.price, quantity=line.quantity))

        if errors:
            raise ValidationError("quote validation failed", details={"errors": errors})

        pricing = compute_totals(cart, request_dto.order_type, request_dto.delivery_location)
        return PriceQuoteResponse(
            subtotal=pricing.subtotal,
            deliveryFee=pricing.delivery_fee,
            tax=pricing.tax,
            total=pricing.total,
            estimatedDeliveryTime=estimated_delivery_minutes(
                request_dto.order_type,
                request_dto.delivery_location,
            ),
        )
