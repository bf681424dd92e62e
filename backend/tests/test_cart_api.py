from fastapi.testclient import TestClient

from aurelane.adapters.mock_order_gateway import MockOrderGateway
from aurelane.api.deps import get_order_gateway, get_slot_storage
from aurelane.main import app
from aurelane.repositories.storage_repo import InMemorySlotStorage
from aurelane.schemas.cart_schema import MAX_LINE_QUANTITY

RUBY = {"id": "g1", "name": "Ruby", "price": 5000, "category": "Ruby", "images": ["/ruby.jpg"]}
SAPPHIRE = {"id": 2, "name": "Sapphire", "price": 2000, "discount": 10, "discountType": "percentage"}

CHECKOUT = {
    "firstName": "Asha",
    "lastName": "Verma",
    "email": "asha@example.com",
    "phone": "9876543210",
    "address": "12 MG Road",
    "city": "Jaipur",
    "state": "Rajasthan",
    "pincode": "302001",
    "paymentMethod": "online",
}


def _client():
    # one client per test so every test gets its own cart session cookie
    return TestClient(app)


def test_new_session_gets_empty_cart_and_cookie():
    client = _client()
    res = client.get("/api/cart")
    assert res.status_code == 200
    body = res.json()
    assert body["items"] == []
    assert body["totals"]["itemCount"] == 0
    assert "cart_session" in client.cookies


def test_add_items_and_totals():
    client = _client()
    res = client.post("/api/cart/items", json={"gem": RUBY})
    assert res.status_code == 200
    res = client.post("/api/cart/items", json={"gem": SAPPHIRE, "quantity": 3})
    assert res.status_code == 200
    body = res.json()
    assert [it["id"] for it in body["items"]] == ["g1", 2]
    assert body["items"][0]["image"] == "/ruby.jpg"
    assert float(body["totals"]["subtotal"]) == 11000
    assert float(body["totals"]["totalDiscount"]) == 600
    assert float(body["totals"]["grandTotal"]) == 10400
    assert body["totals"]["itemCount"] == 4
    assert body["formatted"]["grandTotal"] == "₹10,400"
    assert body["formatted"]["total"] == "₹10,900"

    # state survives across requests in the same session
    again = client.get("/api/cart").json()
    assert again["items"] == body["items"]


def test_add_rejects_bad_quantity():
    client = _client()
    res = client.post("/api/cart/items", json={"gem": RUBY, "quantity": 0})
    assert res.status_code == 400
    assert client.get("/api/cart").json()["items"] == []


def test_add_requires_id_and_price():
    client = _client()
    res = client.post("/api/cart/items", json={"gem": {"name": "No id"}})
    assert res.status_code == 422


def test_update_remove_and_clear():
    client = _client()
    client.post("/api/cart/items", json={"gem": RUBY})
    client.post("/api/cart/items", json={"gem": SAPPHIRE})

    res = client.patch("/api/cart/items/g1", json={"quantity": 5})
    assert res.status_code == 200
    assert res.json()["totals"]["itemCount"] == 6

    # integer gem ids are matched from the path
    res = client.get("/api/cart/items/2")
    assert res.json() == {"id": 2, "inCart": True, "quantity": 1}

    res = client.patch("/api/cart/items/2", json={"quantity": 0})
    assert [it["id"] for it in res.json()["items"]] == ["g1"]

    res = client.patch("/api/cart/items/missing", json={"quantity": 2})
    assert res.status_code == 404

    res = client.delete("/api/cart/items/missing")
    assert res.status_code == 200
    assert res.json()["totals"]["itemCount"] == 5

    res = client.delete("/api/cart")
    assert res.status_code == 200
    assert res.json()["items"] == []


def test_checkout_places_order_and_clears_cart():
    gateway = MockOrderGateway()
    app.dependency_overrides[get_order_gateway] = lambda: gateway
    try:
        client = _client()
        client.post("/api/cart/items", json={"gem": RUBY, "quantity": 2})
        res = client.post("/api/checkout", json=CHECKOUT)
        assert res.status_code == 200
        assert res.json()["orderId"].startswith("ORD")
        assert gateway.created[0]["total"] == "10500"
        assert client.get("/api/cart").json()["items"] == []
    finally:
        app.dependency_overrides.pop(get_order_gateway, None)


def test_checkout_rejected_keeps_cart():
    app.dependency_overrides[get_order_gateway] = lambda: MockOrderGateway(force_reject=True)
    try:
        client = _client()
        client.post("/api/cart/items", json={"gem": RUBY})
        res = client.post("/api/checkout", json=CHECKOUT)
        assert res.status_code == 400
        assert "Failed to place order" in res.json()["detail"]
        assert client.get("/api/cart").json()["totals"]["itemCount"] == 1
    finally:
        app.dependency_overrides.pop(get_order_gateway, None)


def test_checkout_empty_cart_and_invalid_form():
    client = _client()
    res = client.post("/api/checkout", json=CHECKOUT)
    assert res.status_code == 400
    assert res.json()["detail"] == "Cart is empty"

    res = client.post("/api/checkout", json=dict(CHECKOUT, pincode="12"))
    assert res.status_code == 422


class UnwritableSlotStorage(InMemorySlotStorage):
    def set(self, session_id, key, value):
        raise OSError("storage unavailable")


def test_failed_writes_keep_session_cart():
    app.dependency_overrides[get_slot_storage] = lambda: UnwritableSlotStorage()
    app.dependency_overrides[get_order_gateway] = lambda: MockOrderGateway()
    try:
        client = _client()
        res = client.post("/api/cart/items", json={"gem": RUBY})
        assert res.status_code == 200
        res = client.get("/api/cart")
        assert [it["id"] for it in res.json()["items"]] == ["g1"]

        # the cart cleared by checkout must not come back
        res = client.post("/api/checkout", json=CHECKOUT)
        assert res.status_code == 200
        assert client.get("/api/cart").json()["items"] == []
    finally:
        app.dependency_overrides.pop(get_slot_storage, None)
        app.dependency_overrides.pop(get_order_gateway, None)


def test_out_of_range_amounts_are_rejected():
    client = _client()
    res = client.post("/api/cart/items", json={"gem": {"id": "big", "price": "1e25"}, "quantity": 1000})
    assert res.status_code == 422
    res = client.post("/api/cart/items", json={"gem": RUBY, "quantity": MAX_LINE_QUANTITY + 1})
    assert res.status_code == 422

    client.post("/api/cart/items", json={"gem": RUBY, "quantity": MAX_LINE_QUANTITY})
    res = client.post("/api/cart/items", json={"gem": RUBY})
    assert res.status_code == 400
    res = client.get("/api/cart")
    assert res.status_code == 200
    assert res.json()["totals"]["itemCount"] == MAX_LINE_QUANTITY


def test_path_ids_match_canonical_integers_only():
    client = _client()
    client.post("/api/cart/items", json={"gem": {"id": -5, "price": 100}})
    client.post("/api/cart/items", json={"gem": {"id": 1, "price": 100}})

    assert client.get("/api/cart/items/-5").json() == {"id": -5, "inCart": True, "quantity": 1}
    assert client.get("/api/cart/items/01").json()["inCart"] is False

    res = client.patch("/api/cart/items/-5", json={"quantity": 3})
    assert res.status_code == 200
    res = client.patch("/api/cart/items/01", json={"quantity": 3})
    assert res.status_code == 404
