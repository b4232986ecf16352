from __future__ import annotations

from enum import Enum


class OrderType(str, Enum):
    DELIVERY = "delivery"
    TABLE = "table"


class DeliveryLocation(str, Enum):
    KALIDAS = "kalidas"
    KYEONGNAM_A = "kyeongnamA"
    KYEONGNAM_B = "kyeongnamB"
    OTHER = "other"

    @classmethod
    def parse(cls, value: DeliveryLocation | str | None) -> DeliveryLocation | None:
        """Return the matching location, or None for missing or unrecognised keys."""
        if value is None or isinstance(value, DeliveryLocation):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


OTHER_LOCATION_FEE = 30_000

DELIVERY_FEES: dict[DeliveryLocation, int] = {
    DeliveryLocation.KALIDAS: 0,
    DeliveryLocation.KYEONGNAM_A: 0,
    DeliveryLocation.KYEONGNAM_B: 0,
    DeliveryLocation.OTHER: OTHER_LOCATION_FEE,
}

TABLE_ESTIMATE_MINUTES = 15
DEFAULT_DELIVERY_ESTIMATE_MINUTES = 30

DELIVERY_ESTIMATE_MINUTES: dict[DeliveryLocation, int] = {
    DeliveryLocation.KALIDAS: 25,
    DeliveryLocation.KYEONGNAM_A: 30,
    DeliveryLocation.KYEONGNAM_B: 35,
    DeliveryLocation.OTHER: 45,
}


def delivery_fee_for(
    order_type: OrderType,
    delivery_location: DeliveryLocation | str | None,
) -> int:
    if order_type == OrderType.TABLE:
        return 0
    location = DeliveryLocation.parse(delivery_location)
    if location is None:
        return 0
    return DELIVERY_FEES[location]


def estimated_delivery_minutes(
    order_type: OrderType,
    delivery_location: DeliveryLocation | str | None,
) -> int:
    if order_type == OrderType.TABLE:
        return TABLE_ESTIMATE_MINUTES
    location = DeliveryLocation.parse(delivery_location)
    if location is None:
        return DEFAULT_DELIVERY_ESTIMATE_MINUTES
    return DELIVERY_ESTIMATE_MINUTES[location]
