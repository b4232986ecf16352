from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class MenuItemResponse(BaseModel):
    id: int
    name: str
    price: int
    image: str
    category: str
    available: bool
    isVisible: bool


class CategoryResponse(BaseModel):
    id: int
    name: str
    displayName: str
    isVisible: bool
    sortOrder: int
    createdAt: datetime


class PopupResponse(BaseModel):
    id: int
    title: str
    description: str | None = None
    imageUrl: str | None = None
    isActive: bool
    startDate: datetime | None = None
    endDate: datetime | None = None
    createdAt: datetime
    updatedAt: datetime


class PriceQuoteResponse(BaseModel):
    subtotal: int
    deliveryFee: int
    tax: int
    total: int
    estimatedDeliveryTime: int


class OrderItemResponse(BaseModel):
    id: int
    orderId: int
    menuItemId: int
    menuItemName: str
    quantity: int
    price: int
    lineTotal: int


class OrderResponse(BaseModel):
    id: int
    orderNumber: str
    orderType: str
    customerName: str | None = None
    customerPhone: str
    deliveryLocation: str | None = None
    detailAddress: str | None = None
    customAddress: str | None = None
    paymentMethod: str
    subtotal: int
    deliveryFee: int
    tax: int
    total: int
    status: str
    estimatedDeliveryTime: int
    createdAt: datetime
    updatedAt: datetime
    items: list[OrderItemResponse] = Field(default_factory=list)
