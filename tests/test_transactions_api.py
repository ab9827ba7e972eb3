"""HTTP tests for /transactions."""
from decimal import Decimal

import pytest


def test_create_transaction(client, seeded, auth_headers, stock):
    resp = client.post(
        "/transactions",
        json={"items": [{"book_id": seeded.dune, "quantity": 3}]},
        headers=auth_headers,
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    order = body["data"]
    assert order["user_id"] == seeded.user
    assert order["total_quantity"] == 3
    assert Decimal(order["total_price"]) == Decimal("30.00")
    assert len(order["items"]) == 1
    assert order["items"][0]["book_id"] == seeded.dune
    assert Decimal(order["items"][0]["unit_price"]) == Decimal("10.00")
    assert stock(seeded.dune) == 2


def test_requires_bearer_token(client, seeded, stock):
    resp = client.post("/transactions", json={"items": [{"book_id": seeded.dune, "quantity": 1}]})
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Authorization header missing"}
    assert stock(seeded.dune) == 5


def test_empty_items_is_bad_request(client, seeded, auth_headers):
    resp = client.post("/transactions", json={"items": []}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_input"


def test_zero_quantity_is_bad_request(client, seeded, auth_headers, stock):
    resp = client.post(
        "/transactions",
        json={"items": [{"book_id": seeded.dune, "quantity": 0}]},
        headers=auth_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_input"
    assert stock(seeded.dune) == 5


def test_malformed_body_is_bad_request(client, seeded, auth_headers):
    resp = client.post(
        "/transactions",
        json={"items": [{"book_id": seeded.dune, "quantity": "lots"}]},
        headers=auth_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_unknown_book_is_not_found(client, seeded, auth_headers):
    resp = client.post(
        "/transactions",
        json={"items": [{"book_id": "nope", "quantity": 1}]},
        headers=auth_headers,
    )
    assert resp.status_code == 404
    body = resp.json()
    assert body["error"] == "item_not_found"
    assert body["item_id"] == "nope"


def test_insufficient_stock_is_conflict(client, seeded, auth_headers, stock):
    resp = client.post(
        "/transactions",
        json={"items": [
            {"book_id": seeded.dune, "quantity": 1},
            {"book_id": seeded.emma, "quantity": 3},
        ]},
        headers=auth_headers,
    )
    assert resp.status_code == 409
    body = resp.json()
    assert body["error"] == "insufficient_stock"
    assert body["item_id"] == seeded.emma
    assert stock(seeded.dune) == 5


def test_second_order_fails_once_stock_is_exhausted(client, seeded, auth_headers, stock):
    payload = {"items": [{"book_id": seeded.dune, "quantity": 3}]}
    first = client.post("/transactions", json=payload, headers=auth_headers)
    second = client.post("/transactions", json=payload, headers=auth_headers)

    assert first.status_code == 201
    assert second.status_code == 409
    assert stock(seeded.dune) == 2


def test_list_and_detail(client, seeded, auth_headers):
    created = client.post(
        "/transactions",
        json={"items": [{"book_id": seeded.emma, "quantity": 1}]},
        headers=auth_headers,
    ).json()["data"]

    listing = client.get("/transactions", headers=auth_headers)
    assert listing.status_code == 200
    assert [o["id"] for o in listing.json()["data"]] == [created["id"]]

    detail = client.get(f"/transactions/{created['id']}", headers=auth_headers)
    assert detail.status_code == 200
    assert detail.json()["data"]["items"][0]["book_id"] == seeded.emma
    assert Decimal(detail.json()["data"]["total_price"]) == Decimal("25.50")


def test_detail_not_found(client, seeded, auth_headers):
    resp = client.get("/transactions/missing", headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json()["message"] == "Transaction not found"


@pytest.mark.parametrize("quantity", ["3", True, 2.0])
def test_non_integer_quantity_is_bad_request(client, seeded, auth_headers, stock, quantity):
    resp = client.post(
        "/transactions",
        json={"items": [{"book_id": seeded.dune, "quantity": quantity}]},
        headers=auth_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_input"
    assert stock(seeded.dune) == 5
