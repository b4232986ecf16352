from __future__ import annotations

from fastapi.testclient import TestClient


def test_menu_visibility_and_update(client: TestClient) -> None:
    shown = client.post("/menu", json={"name": "곰탕", "price": 140000, "category": "soup"})
    hidden = client.post("/menu", json={"name": "보쌈", "price": 400000, "isVisible": False})

    public = client.get("/menu").json()
    admin = client.get("/menu", params={"includeHidden": "true"}).json()
    assert [item["name"] for item in public] == ["곰탕"]
    assert len(admin) == 2

    updated = client.patch(f"/menu/{hidden.json()['id']}", json={"isVisible": True})
    assert updated.status_code == 200
    assert updated.json()["isVisible"] is True
    assert len(client.get("/menu").json()) == 2
    assert client.get(f"/menu/{shown.json()['id']}").json()["category"] == "soup"


def test_menu_item_errors(client: TestClient) -> None:
    missing = client.get("/menu/99")
    negative = client.post("/menu", json={"name": "곰탕", "price": -1})

    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "MENU_ITEM_NOT_FOUND"
    assert negative.status_code == 400


def test_category_crud(client: TestClient) -> None:
    created = client.post(
        "/categories",
        json={"name": "soup", "displayName": "국물요리", "sortOrder": 2},
    )
    client.post("/categories", json={"name": "rice", "displayName": "밥", "sortOrder": 1})
    duplicate = client.post("/categories", json={"name": "soup", "displayName": "again"})

    assert created.status_code == 201
    assert duplicate.status_code == 409
    assert duplicate.json()["error"]["code"] == "CATEGORY_NAME_TAKEN"
    assert [item["name"] for item in client.get("/categories").json()] == ["rice", "soup"]

    category_id = created.json()["id"]
    hidden = client.patch(f"/categories/{category_id}", json={"isVisible": False})
    assert hidden.json()["isVisible"] is False
    visible = client.get("/categories", params={"visibleOnly": "true"}).json()
    assert [item["name"] for item in visible] == ["rice"]

    deleted = client.delete(f"/categories/{category_id}")
    assert deleted.status_code == 204
    again = client.delete(f"/categories/{category_id}")
    assert again.status_code == 404
    assert again.json()["error"]["code"] == "CATEGORY_NOT_FOUND"


def test_popup_flow(client: TestClient) -> None:
    none_yet = client.get("/popups/active")
    assert none_yet.status_code == 404
    assert none_yet.json()["error"]["code"] == "POPUP_NOT_FOUND"

    created = client.post(
        "/popups",
        json={"title": "추석 휴무", "startDate": "2020-01-01T00:00:00Z"},
    )
    assert created.status_code == 201
    assert client.get("/popups/active").json()["id"] == created.json()["id"]

    inverted = client.patch(
        f"/popups/{created.json()['id']}",
        json={"endDate": "2019-01-01T00:00:00Z"},
    )
    assert inverted.status_code == 400
    assert inverted.json()["error"]["code"] == "VALIDATION_FAILED"

    client.patch(f"/popups/{created.json()['id']}", json={"isActive": False})
    assert client.get("/popups/active").status_code == 404

    assert client.delete(f"/popups/{created.json()['id']}").status_code == 204
    assert client.get("/popups").json() == []
