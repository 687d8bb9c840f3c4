def test_public_producer_listing(client, producer, make_product):
    make_product(name="Apples")
    make_product(name="Hidden", available=False)

    producers = client.get("/api/producers").json()["data"]
    assert len(producers) == 1
    assert producers[0]["business_name"] == "Green Valley Farm"
    assert [p["name"] for p in producers[0]["products"]] == ["Apples"]

    assert client.get(f"/api/producers/{producer.id}").status_code == 200
    assert client.get("/api/producers/999").status_code == 404


def test_register_producer(client, headers, make_user):
    user = make_user()
    auth = headers(user)
    resp = client.post("/api/producers/register", json={"business_name": "Sunny Acres"}, headers=auth)
    assert resp.status_code == 201
    assert resp.json()["data"]["verified"] is False
    assert client.get("/api/auth/me", headers=auth).json()["data"]["role"] == "producer"

    again = client.post("/api/producers/register", json={"business_name": "Twice"}, headers=auth)
    assert again.status_code == 400


def test_update_producer_owner_only(client, headers, make_user, producer):
    url = f"/api/producers/{producer.id}"
    assert client.put(url, json={"location": "Hills"}, headers=headers(make_user())).status_code == 403

    resp = client.put(url, json={"location": "Hills"}, headers=headers(producer.user))
    assert resp.status_code == 200
    assert resp.json()["data"]["location"] == "Hills"


def test_product_filters(client, make_product, producer):
    make_product(name="Apples", category="FRUITS")
    make_product(name="Coffee", category="COFFEE", weight=0.25)
    make_product(name="Old", category="FRUITS", available=False)

    fruits = client.get("/api/products?category=FRUITS&available=true").json()["data"]
    assert [p["name"] for p in fruits] == ["Apples"]
    assert fruits[0]["producer"]["business_name"] == "Green Valley Farm"

    by_producer = client.get(f"/api/products/by-producer/{producer.id}").json()["data"]
    assert len(by_producer) == 3
    assert client.get("/api/products/999").status_code == 404


def test_producer_creates_and_updates_product(client, headers, producer):
    farmer = headers(producer.user)
    payload = {"name": "Kale", "category": "VEGETABLES", "weight_in_kg": 0.3, "stock": 10}
    resp = client.post("/api/products", json=payload, headers=farmer)
    assert resp.status_code == 201
    product = resp.json()["data"]
    assert product["producer_id"] == producer.id
    assert product["available"] is True

    resp = client.put(f"/api/products/{product['id']}", json={"stock": 0, "available": False}, headers=farmer)
    assert resp.status_code == 200
    assert resp.json()["data"]["available"] is False


def test_product_creation_rules(client, headers, make_user, producer):
    payload = {"name": "Kale", "category": "VEGETABLES", "weight_in_kg": 0.3}
    assert client.post("/api/products", json=payload, headers=headers(make_user())).status_code == 403
    assert client.post("/api/products", json={**payload, "weight_in_kg": 0}, headers=headers(producer.user)).status_code == 400
    assert client.post("/api/products", json={**payload, "category": "CANDY"}, headers=headers(producer.user)).status_code == 400

    admin = headers(make_user(role="admin", plan=None))
    assert client.post("/api/products", json=payload, headers=admin).status_code == 400
    resp = client.post("/api/products", json={**payload, "producer_id": producer.id}, headers=admin)
    assert resp.status_code == 201


def test_other_producer_cannot_update_product(client, headers, make_user, make_product):
    product = make_product()
    stranger = headers(make_user(role="producer", plan=None))
    assert client.put(f"/api/products/{product.id}", json={"stock": 1}, headers=stranger).status_code == 403
