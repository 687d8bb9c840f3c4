from datetime import datetime, timedelta, timezone

from harvest.data.models import OrderModel


def place_order(client, auth, product_id, quantity=1):
    client.post("/api/cart/add", json={"product_id": product_id, "quantity": quantity}, headers=auth)
    resp = client.post("/api/orders/create", json={"delivery_address": "Main St 1"}, headers=auth)
    assert resp.status_code == 201
    return resp.json()["data"]


def set_order(db, order_id, **fields):
    db.expire_all()
    order = db.get(OrderModel, order_id)
    for name, value in fields.items():
        setattr(order, name, value)
    db.commit()


def test_employee_endpoints_require_staff_role(client, headers, make_user):
    auth = headers(make_user())
    assert client.get("/api/employee/orders/active", headers=auth).status_code == 403
    assert client.get("/api/admin/overview", headers=auth).status_code == 403
    assert client.get("/api/admin/overview", headers=headers(make_user(role="employee", plan=None))).status_code == 403


def test_active_orders_oldest_first_with_urgency(client, headers, make_user, make_product, db):
    customer = make_user(name="Carla", phone="555-1234")
    auth = headers(customer)
    product = make_product(weight=0.5)
    old = place_order(client, auth, product.id)
    new = place_order(client, auth, product.id)
    pending = place_order(client, auth, product.id)

    set_order(db, old["id"], status="confirmed", created_at=datetime.now(timezone.utc) - timedelta(minutes=45))
    set_order(db, new["id"], status="preparing")

    staff = headers(make_user(role="employee", plan=None))
    orders = client.get("/api/employee/orders/active", headers=staff).json()["data"]
    assert [o["id"] for o in orders] == [old["id"], new["id"]]
    assert orders[0]["is_urgent"] is True
    assert orders[0]["order_age_minutes"] >= 45
    assert orders[1]["is_urgent"] is False
    assert orders[0]["customer"]["name"] == "Carla"
    assert pending["id"] not in [o["id"] for o in orders]

    only_preparing = client.get("/api/employee/orders/active?status=preparing", headers=staff).json()["data"]
    assert [o["id"] for o in only_preparing] == [new["id"]]


def test_employee_status_update(client, headers, make_user, make_product):
    auth = headers(make_user())
    order = place_order(client, auth, make_product().id)
    staff = headers(make_user(role="employee", plan=None))
    url = f"/api/employee/orders/{order['id']}/status"

    resp = client.post(url, json={"status": "confirmed"}, headers=staff)
    assert resp.status_code == 200
    assert resp.json()["meta"]["previous_status"] == "pending"
    assert resp.json()["meta"]["new_status"] == "confirmed"

    assert client.post(url, json={"status": "lost"}, headers=staff).status_code == 400
    assert client.post("/api/employee/orders/999/status", json={"status": "ready"}, headers=staff).status_code == 404

    details = client.get(f"/api/employee/orders/{order['id']}", headers=staff).json()["data"]
    assert details["status"] == "confirmed"
    assert details["items"][0]["name"] == "Apples"


def test_dashboard_summary(client, headers, make_user, make_product, db):
    auth = headers(make_user())
    product = make_product(weight=1.0)
    first = place_order(client, auth, product.id, 2)
    second = place_order(client, auth, product.id, 1)
    set_order(db, second["id"], status="cancelled")
    set_order(db, first["id"], status="ready")

    staff = headers(make_user(role="admin", plan=None))
    summary = client.get("/api/employee/dashboard/summary", headers=staff).json()["data"]
    assert summary["by_status"]["ready"] == 1
    assert summary["by_status"]["cancelled"] == 1
    assert summary["by_status"]["pending"] == 0
    assert summary["active_orders"] == 1
    assert summary["today_orders"] == 1
    assert summary["today_kg"] == 2.0


def test_admin_lists_users_with_order_counts(client, headers, make_user, make_product):
    admin = make_user(role="admin", plan=None)
    buyer = make_user(name="Buyer Bob")
    make_user(name="Idle Ida")
    place_order(client, headers(buyer), make_product().id)

    resp = client.get("/api/admin/users?role=customer&limit=1", headers=headers(admin))
    body = resp.json()
    assert resp.status_code == 200
    assert body["meta"]["total"] == 2
    assert body["meta"]["has_next"] is True
    assert body["meta"]["has_prev"] is False
    assert len(body["data"]) == 1

    found = client.get("/api/admin/users?search=bob", headers=headers(admin)).json()["data"]
    assert [u["name"] for u in found] == ["Buyer Bob"]
    assert found[0]["total_orders"] == 1


def test_admin_changes_role(client, headers, make_user):
    admin = make_user(role="admin", plan=None)
    user = make_user()
    resp = client.put(f"/api/admin/users/{user.id}/role", json={"role": "employee"}, headers=headers(admin))
    assert resp.status_code == 200
    assert resp.json()["data"]["role"] == "employee"
    assert resp.json()["meta"]["previous_role"] == "customer"

    bad = client.put(f"/api/admin/users/{user.id}/role", json={"role": "owner"}, headers=headers(admin))
    assert bad.status_code == 400
    assert client.put("/api/admin/users/999/role", json={"role": "admin"}, headers=headers(admin)).status_code == 404


def test_admin_orders_and_overview(client, headers, make_user, make_product, db):
    admin = headers(make_user(role="admin", plan=None))
    customer = headers(make_user())
    make_product(name="Scarce", stock=3)
    order = place_order(client, customer, make_product(weight=1.5).id)
    set_order(db, order["id"], status="preparing")

    orders = client.get("/api/admin/orders?status=preparing", headers=admin).json()["data"]
    assert [o["id"] for o in orders] == [order["id"]]
    assert client.get("/api/admin/orders?status=nope", headers=admin).status_code == 400

    overview = client.get("/api/admin/overview", headers=admin).json()["data"]
    assert overview["summary"]["total_customers"] == 1
    assert overview["summary"]["total_producers"] == 1
    assert overview["summary"]["available_products"] == 2
    assert overview["summary"]["active_orders"] == 1
    assert overview["summary"]["low_stock_products"] == 1
    assert overview["metrics"]["month_kg"] == 1.5
    assert overview["recent_orders"][0]["order_number"] == order["order_number"]


def test_admin_verifies_producer(client, headers, make_user, producer):
    admin = headers(make_user(role="admin", plan=None))
    resp = client.put(f"/api/admin/producers/{producer.id}/verify", json={"verified": False}, headers=admin)
    assert resp.status_code == 200
    assert resp.json()["data"]["verified"] is False
    assert client.get("/api/producers").json()["data"] == []
