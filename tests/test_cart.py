def add(client, auth, product_id, quantity=1):
    return client.post("/api/cart/add", json={"product_id": product_id, "quantity": quantity}, headers=auth)


def test_get_cart_creates_empty_cart(client, headers, make_user):
    user = make_user(used_kg=1.0)
    resp = client.get("/api/cart", headers=headers(user))
    assert resp.status_code == 200
    cart = resp.json()["data"]
    assert cart["items"] == []
    assert cart["total_weight_in_kg"] == 0.0
    assert cart["limit_in_kg"] == 5.0
    assert cart["used_kg"] == 1.0
    assert cart["remaining_kg"] == 4.0


def test_add_product_and_merge_quantity(client, headers, make_user, make_product):
    user = make_user()
    apples = make_product(weight=0.5)
    auth = headers(user)

    first = add(client, auth, apples.id, 2)
    assert first.status_code == 200
    data = first.json()["data"]
    assert data["item"]["quantity"] == 2
    assert data["item"]["weight_in_kg"] == 1.0
    assert data["item"]["producer_name"] == "Green Valley Farm"
    assert data["remaining_kg"] == 4.0

    second = add(client, auth, apples.id, 1)
    cart = second.json()["data"]["cart"]
    assert len(cart["items"]) == 1
    assert cart["items"][0]["quantity"] == 3
    assert cart["total_weight_in_kg"] == 1.5
    assert cart["version"] == 3


def test_add_unknown_product(client, headers, make_user):
    resp = add(client, headers(make_user()), 999)
    assert resp.status_code == 404
    assert resp.json()["message"] == "Product not found"


def test_add_unavailable_product(client, headers, make_user, make_product):
    product = make_product(available=False)
    resp = add(client, headers(make_user()), product.id)
    assert resp.status_code == 400


def test_add_more_than_stock(client, headers, make_user, make_product):
    product = make_product(stock=2)
    resp = add(client, headers(make_user()), product.id, 3)
    assert resp.status_code == 400
    assert "Only 2 units available" in resp.json()["message"]


def test_add_without_active_subscription(client, headers, make_user, make_product):
    product = make_product()
    resp = add(client, headers(make_user(active=False)), product.id)
    assert resp.status_code == 403


def test_category_not_in_plan(client, headers, make_user, make_product):
    eggs = make_product(name="Eggs", category="PROTEINS", weight=0.7)
    resp = add(client, headers(make_user(plan="BASIC")), eggs.id)
    assert resp.status_code == 403
    assert "BASIC" in resp.json()["message"]

    resp = add(client, headers(make_user(plan="PREMIUM")), eggs.id)
    assert resp.status_code == 200


def test_add_over_capacity(client, headers, make_user, make_product):
    user = make_user(used_kg=3.0)
    product = make_product(weight=1.0)
    auth = headers(user)
    assert add(client, auth, product.id, 2).status_code == 200

    resp = add(client, auth, product.id, 1)
    assert resp.status_code == 400
    body = resp.json()
    assert body["ok"] is False
    assert "2.00 kg remaining before this cart" in body["message"]
    assert body["data"]["would_exceed"] is True
    assert body["data"]["total_weight_in_kg"] == 3.0


def test_decrease_allowed_after_plan_downgrade(client, headers, make_user, make_product):
    user = make_user(plan="PREMIUM")
    product = make_product(weight=1.0)
    auth = headers(user)
    item_id = add(client, auth, product.id, 8).json()["data"]["item"]["id"]

    resp = client.post("/api/subscription/change", json={"plan": "BASIC"}, headers=auth)
    assert resp.status_code == 200

    # still over the new 5 kg limit, but shrinking the cart is fine
    resp = client.put("/api/cart/update", json={"item_id": item_id, "quantity": 6}, headers=auth)
    assert resp.status_code == 200
    assert resp.json()["data"]["weight_in_kg"] == 6.0

    resp = client.put("/api/cart/update", json={"item_id": item_id, "quantity": 7}, headers=auth)
    assert resp.status_code == 400
    assert "cannot increase the quantity" in resp.json()["message"]


def test_update_quantity_and_remove_with_zero(client, headers, make_user, make_product):
    user = make_user()
    product = make_product(weight=1.0)
    auth = headers(user)
    item_id = add(client, auth, product.id).json()["data"]["item"]["id"]

    resp = client.put("/api/cart/update", json={"item_id": item_id, "quantity": 4}, headers=auth)
    assert resp.status_code == 200
    assert resp.json()["data"]["weight_in_kg"] == 4.0

    resp = client.put("/api/cart/update", json={"item_id": item_id, "quantity": 6}, headers=auth)
    assert resp.status_code == 400

    resp = client.put("/api/cart/update", json={"item_id": item_id, "quantity": 0}, headers=auth)
    assert resp.status_code == 200
    assert resp.json()["data"] is None
    assert client.get("/api/cart", headers=auth).json()["data"]["items"] == []


def test_cannot_touch_another_users_item(client, headers, make_user, make_product):
    owner, other = make_user(), make_user()
    product = make_product()
    item_id = add(client, headers(owner), product.id).json()["data"]["item"]["id"]

    resp = client.put("/api/cart/update", json={"item_id": item_id, "quantity": 2}, headers=headers(other))
    assert resp.status_code == 403
    assert client.delete(f"/api/cart/remove/{item_id}", headers=headers(other)).status_code == 403
    assert client.delete("/api/cart/remove/12345", headers=headers(other)).status_code == 404


def test_remove_and_clear(client, headers, make_user, make_product):
    user = make_user()
    auth = headers(user)
    apples = make_product()
    carrots = make_product(name="Carrots", category="VEGETABLES", weight=0.5)
    item_id = add(client, auth, apples.id).json()["data"]["item"]["id"]
    add(client, auth, carrots.id)

    assert client.delete(f"/api/cart/remove/{item_id}", headers=auth).status_code == 200
    cart = client.get("/api/cart", headers=auth).json()["data"]
    assert [i["name"] for i in cart["items"]] == ["Carrots"]

    resp = client.delete("/api/cart/clear", headers=auth)
    assert resp.json()["message"] == "Cart cleared"
    assert client.get("/api/cart", headers=auth).json()["data"]["items"] == []
    assert client.delete("/api/cart/clear", headers=auth).json()["message"] == "Cart was already empty"
