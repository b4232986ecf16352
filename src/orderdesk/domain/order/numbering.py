from __future__ import annotations

from orderdesk.domain.common.ids import OrderNumber

DEFAULT_ORDER_NUMBER_PREFIX = "MB"


def format_order_number(prefix: str, sequence_value: int) -> OrderNumber:
    if sequence_value < 1:
        raise ValueError("sequence_value must be >= 1")
    if not prefix or not prefix.isalnum():
        raise ValueError("prefix must be a non-empty alphanumeric string")
    return OrderNumber(f"{prefix}-{sequence_value:03d}")

