from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from orderdesk.domain.order.delivery import DeliveryLocation, OrderType
from orderdesk.domain.order.entities import OrderStatus, PaymentMethod


def _to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(part.capitalize() for part in parts[1:])


class CamelBaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
    )


class OrderDraftRequest(CamelBaseModel):
    order_type: OrderType
    customer_name: str | None = None
    customer_phone: str
    delivery_location: DeliveryLocation | None = None
    detail_address: str | None = None
    custom_address: str | None = None
    payment_method: PaymentMethod
    subtotal: int | None = None
    delivery_fee: int | None = None
    tax: int | None = None
    total: int | None = None


class OrderItemDraftRequest(CamelBaseModel):
    menu_item_id: int
    quantity: int
    price: int | None = None


class CreateOrderRequest(CamelBaseModel):
    order: OrderDraftRequest
    items: list[OrderItemDraftRequest]


class UpdateOrderStatusRequest(CamelBaseModel):
    status: OrderStatus


class QuoteLineRequest(CamelBaseModel):
    menu_item_id: int
    quantity: int


class QuoteRequest(CamelBaseModel):
    order_type: OrderType
    delivery_location: DeliveryLocation | None = None
    lines: list[QuoteLineRequest] = Field(min_length=1)


class CreateMenuItemRequest(CamelBaseModel):
    name: str = Field(min_length=1, max_length=255)
    price: int = Field(ge=0)
    image: str = ""
    category: str = "main"
    available: bool = True
    is_visible: bool = True


class UpdateMenuItemRequest(CamelBaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    price: int | None = Field(default=None, ge=0)
    image: str | None = None
    category: str | None = None
    available: bool | None = None
    is_visible: bool | None = None


class CreateCategoryRequest(CamelBaseModel):
    name: str = Field(min_length=1, max_length=100)
    display_name: str = Field(min_length=1, max_length=255)
    is_visible: bool = True
    sort_order: int = 0


class UpdateCategoryRequest(CamelBaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    display_name: str | None = Field(default=None, min_length=1, max_length=255)
    is_visible: bool | None = None
    sort_order: int | None = None


class CreatePopupRequest(CamelBaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    image_url: str | None = None
    is_active: bool = True
    start_date: datetime | None = None
    end_date: datetime | None = None


class UpdatePopupRequest(CamelBaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    image_url: str | None = None
    is_active: bool | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
