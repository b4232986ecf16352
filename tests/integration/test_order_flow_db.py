from __future__ import annotations

import sys
from pathlib import Path

from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from orderdesk.api.main import app
from orderdesk.domain.common.ids import OrderId
from orderdesk.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository


def _order_body(menu_item_ids: list[int]) -> dict:
    return {
        "order": {
            "orderType": "delivery",
            "customerPhone": "0901234567",
            "deliveryLocation": "kyeongnamB",
            "detailAddress": "Block B 402",
            "paymentMethod": "transfer",
        },
        "items": [
            {"menuItemId": menu_item_ids[0], "quantity": 2},
            {"menuItemId": menu_item_ids[1], "quantity": 1},
        ],
    }


def test_order_is_persisted_with_snapshot_items(menu_item_ids: list[int]) -> None:
    with TestClient(app) as client:
        menu = {item["id"]: item for item in client.get("/menu").json()}
        response = client.post("/orders", json=_order_body(menu_item_ids))
        assert response.status_code == 201
        order = response.json()

        by_number = client.get(f"/orders/number/{order['orderNumber']}")
        assert by_number.status_code == 200
        assert by_number.json() == order

    expected_subtotal = (
        menu[menu_item_ids[0]]["price"] * 2 + menu[menu_item_ids[1]]["price"]
    )
    assert order["orderNumber"].startswith("MB-")
    assert order["subtotal"] == expected_subtotal
    assert order["total"] == order["subtotal"] + order["deliveryFee"] + order["tax"]
    assert order["estimatedDeliveryTime"] == 35
    assert [item["menuItemId"] for item in order["items"]] == menu_item_ids

    stored = SqlAlchemyOrderRepository().get(OrderId(order["id"]))
    assert stored is not None
    assert stored.version == 1
    assert stored.customer.detail_address == "Block B 402"


def test_order_numbers_increase(menu_item_ids: list[int]) -> None:
    with TestClient(app) as client:
        first = client.post("/orders", json=_order_body(menu_item_ids)).json()
        second = client.post("/orders", json=_order_body(menu_item_ids)).json()

    first_value = int(first["orderNumber"].split("-")[1])
    second_value = int(second["orderNumber"].split("-")[1])
    assert second_value > first_value


def test_status_transitions_persist(menu_item_ids: list[int]) -> None:
    with TestClient(app) as client:
        order_id = client.post("/orders", json=_order_body(menu_item_ids)).json()["id"]

        confirmed = client.patch(f"/orders/{order_id}/status", json={"status": "confirmed"})
        invalid = client.patch(f"/orders/{order_id}/status", json={"status": "completed"})

        assert confirmed.status_code == 200
        assert invalid.status_code == 409
        assert client.get(f"/orders/{order_id}").json()["status"] == "confirmed"

    stored = SqlAlchemyOrderRepository().get(OrderId(order_id))
    assert stored is not None
    assert stored.version == 2
