from unittest.mock import MagicMock, patch

from app.api.routers.carts import get_lock_service


def post_product(client, name="Alpha", price=50):
    return client.post("/products", json={"name": name, "price": price})


def make_product(client, name="Alpha", price=50):
    return post_product(client, name, price).json()["product"]["id"]


def add_items(client, items, cart_id=None):
    return client.post("/cart/items", json={"cartId": cart_id, "items": items})


# --- health ---

def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "database": "ok"}


# --- products ---

def test_create_product(client):
    r = post_product(client)
    assert r.status_code == 201
    body = r.json()
    assert body["message"] == "Created new product"
    assert body["product"]["name"] == "Alpha"
    assert body["product"]["price"] == 50
    assert "createdAt" in body["product"]
    assert "updatedAt" in body["product"]


def test_create_product_duplicate_name(client):
    post_product(client)
    r = post_product(client, price=70)
    assert r.status_code == 400
    assert r.json()["detail"] == "Product already exists"


def test_create_product_missing_fields(client):
    assert client.post("/products", json={"name": "Alpha"}).status_code == 400
    assert client.post("/products", json={"price": 10}).status_code == 400
    assert client.post("/products", json={"name": "   ", "price": 10}).status_code == 400
    assert client.post("/products", json={"name": "Alpha", "price": -1}).status_code == 400


def test_list_products(client):
    for name in ["Delta", "Alpha", "Charlie", "Bravo"]:
        post_product(client, name)

    r = client.get("/products", params={"page": 1, "limit": 3})
    assert r.status_code == 200
    body = r.json()
    assert [p["name"] for p in body["products"]] == ["Alpha", "Bravo", "Charlie"]
    assert body["totalItems"] == 4
    assert body["totalPages"] == 2
    assert body["currentPage"] == 1


def test_list_products_query(client):
    post_product(client, "Green Tea")
    post_product(client, "Black Tea")
    post_product(client, "Coffee")

    body = client.get("/products", params={"query": "Tea"}).json()
    assert body["totalItems"] == 2


def test_list_products_bad_page(client):
    assert client.get("/products", params={"page": 0}).status_code == 400


def test_search_products(client):
    post_product(client, "Green Tea")
    post_product(client, "Coffee")

    r = client.get("/products/search", params={"query": "Tea"})
    assert r.status_code == 200
    assert [p["name"] for p in r.json()["products"]] == ["Green Tea"]


def test_update_product(client):
    pid = make_product(client)
    r = client.put(f"/products/{pid}", json={"name": "Alpha Plus", "price": 55})
    assert r.status_code == 200
    assert r.json()["product"]["name"] == "Alpha Plus"


def test_update_product_duplicate_name(client):
    make_product(client, "Alpha")
    pid = make_product(client, "Bravo")
    r = client.put(f"/products/{pid}", json={"name": "Alpha"})
    assert r.status_code == 400


def test_update_missing_product(client):
    assert client.put("/products/99", json={"price": 5}).status_code == 404


def test_delete_product(client):
    pid = make_product(client)
    r = client.delete(f"/products/{pid}")
    assert r.status_code == 200
    assert client.get(f"/products/{pid}").status_code == 404


def test_delete_missing_product(client):
    assert client.delete("/products/99").status_code == 404


# --- cart ---

def test_create_cart(client):
    r = client.post("/cart")
    assert r.status_code == 201
    assert isinstance(r.json()["cartId"], int)


def test_add_items_creates_cart(client):
    pid = make_product(client, "Alpha", 40)

    r = add_items(client, [{"productId": pid, "quantity": 3}])

    assert r.status_code == 201
    body = r.json()
    assert body["totalPrice"] == 120
    assert body["items"] == [{"name": "Alpha", "price": 40}]
    assert isinstance(body["cartId"], int)


def test_add_items_two_products_discount(client):
    a = make_product(client, "Alpha", 50)
    b = make_product(client, "Bravo", 100)

    r = add_items(client, [{"productId": a, "quantity": 2}, {"productId": b, "quantity": 1}])

    assert r.status_code == 201
    assert r.json()["totalPrice"] == 180


def test_add_items_not_an_array(client):
    r = client.post("/cart/items", json={"items": {"productId": 1, "quantity": 1}})
    assert r.status_code == 400


def test_add_items_empty(client):
    assert add_items(client, []).status_code == 400


def test_add_items_missing_product(client):
    r = add_items(client, [{"productId": 999, "quantity": 1}])
    assert r.status_code == 404
    assert r.json()["detail"] == "Some products do not exist in the database"


def test_edit_items(client):
    a = make_product(client, "Alpha", 50)
    b = make_product(client, "Bravo", 100)
    cart_id = add_items(client, [{"productId": a, "quantity": 2}, {"productId": b, "quantity": 1}]).json()["cartId"]

    r = client.put(
        "/cart/items",
        json={"cartId": cart_id, "items": [{"productId": a, "quantity": 5}, {"productId": b, "quantity": 0}]},
    )

    assert r.status_code == 200
    body = r.json()
    assert body["updateItems"] == [{"id": body["updateItems"][0]["id"], "cartId": cart_id, "productId": a, "quantity": 5}]
    assert body["deleteItems"] == [b]
    assert body["totalPrice"] == 250


def test_edit_items_duplicate_product(client):
    a = make_product(client)
    cart_id = add_items(client, [{"productId": a, "quantity": 1}]).json()["cartId"]

    r = client.put(
        "/cart/items",
        json={"cartId": cart_id, "items": [{"productId": a, "quantity": 1}, {"productId": a, "quantity": 2}]},
    )
    assert r.status_code == 400


def test_edit_items_negative_quantity(client):
    a = make_product(client)
    cart_id = add_items(client, [{"productId": a, "quantity": 1}]).json()["cartId"]

    r = client.put("/cart/items", json={"cartId": cart_id, "items": [{"productId": a, "quantity": -1}]})
    assert r.status_code == 400


def test_edit_items_missing_cart(client):
    a = make_product(client)
    r = client.put("/cart/items", json={"cartId": 999, "items": [{"productId": a, "quantity": 1}]})
    assert r.status_code == 404


def test_confirm_cart(client):
    a = make_product(client, "Alpha", 50)
    b = make_product(client, "Bravo", 100)
    cart_id = add_items(client, [{"productId": a, "quantity": 2}, {"productId": b, "quantity": 1}]).json()["cartId"]

    r = client.post(f"/cart/{cart_id}/confirm")

    assert r.status_code == 200
    assert r.json() == {"message": "Cart confirmed successfully", "cartId": cart_id, "totalPrice": 180}

    cart = client.get(f"/cart/{cart_id}").json()
    assert cart["isConfirmed"] is True
    assert cart["cartItem"] == []
    assert {i["productId"]: i["quantity"] for i in cart["confirmedItems"]} == {a: 2, b: 1}


def test_confirm_empty_cart(client):
    cart_id = client.post("/cart").json()["cartId"]
    r = client.post(f"/cart/{cart_id}/confirm")
    assert r.status_code == 400
    assert r.json()["detail"] == "No items to confirm in this cart"


def test_confirm_missing_cart(client):
    assert client.post("/cart/999/confirm").status_code == 404


def test_confirm_twice(client):
    a = make_product(client)
    cart_id = add_items(client, [{"productId": a, "quantity": 1}]).json()["cartId"]
    client.post(f"/cart/{cart_id}/confirm")
    assert client.post(f"/cart/{cart_id}/confirm").status_code == 400


def test_history_lists_carts_with_open_items(client):
    a = make_product(client)
    older = add_items(client, [{"productId": a, "quantity": 1}]).json()["cartId"]
    client.post("/cart")
    newer = add_items(client, [{"productId": a, "quantity": 4}]).json()["cartId"]

    r = client.get("/cart/history")

    assert r.status_code == 200
    details = r.json()["cartItemsDetails"]
    assert [c["id"] for c in details] == [newer, older]
    assert details[0]["cartItem"][0]["quantity"] == 4
    assert details[0]["totalPrice"] == 200


def test_get_missing_cart(client):
    assert client.get("/cart/999").status_code == 404


def test_cart_locked_by_other_request(app, client):
    a = make_product(client)
    cart_id = client.post("/cart").json()["cartId"]

    lock = MagicMock()
    lock.acquire_cart_lock.return_value = False
    app.dependency_overrides[get_lock_service] = lambda: lock

    r = add_items(client, [{"productId": a, "quantity": 1}], cart_id=cart_id)
    assert r.status_code == 409


def test_lock_service_disabled_by_setting():
    with patch("app.api.routers.carts.CART_LOCK_ENABLED", False):
        assert get_lock_service() is None
