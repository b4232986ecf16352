from __future__ import annotations

from typing import NewType

CategoryId = NewType("CategoryId", int)
MenuItemId = NewType("MenuItemId", int)
OrderId = NewType("OrderId", int)
OrderItemId = NewType("OrderItemId", int)
PopupId = NewType("PopupId", int)
OrderNumber = NewType("OrderNumber", str)
