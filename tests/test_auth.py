def register(client, email="ana@example.com", **extra):
    payload = {"name": "Ana", "email": email, "password": "secret123", **extra}
    return client.post("/api/auth/register", json=payload)


def test_register_creates_customer_with_subscription(client):
    resp = register(client, subscription_plan="STANDARD")
    assert resp.status_code == 201
    body = resp.json()
    assert body["ok"] is True
    assert body["data"]["user"]["role"] == "customer"
    assert body["data"]["token"]

    token = body["data"]["token"]
    sub = client.get("/api/subscription/current", headers={"Authorization": f"Bearer {token}"}).json()["data"]
    assert sub["plan"] == "STANDARD"
    assert sub["limit_in_kg"] == 8.0
    assert sub["used_kg"] == 0.0
    assert sub["is_active"] is True


def test_unknown_plan_falls_back_to_basic(client):
    token = register(client, subscription_plan="GOLD").json()["data"]["token"]
    sub = client.get("/api/subscription/current", headers={"Authorization": f"Bearer {token}"}).json()["data"]
    assert sub["plan"] == "BASIC"
    assert sub["limit_in_kg"] == 5.0


def test_duplicate_email_is_conflict(client):
    register(client)
    resp = register(client, email="ANA@example.com")
    assert resp.status_code == 409
    assert resp.json()["ok"] is False


def test_validation_error_envelope(client):
    resp = client.post("/api/auth/register", json={"name": "Ana", "email": "ana@example.com", "password": "123"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["ok"] is False
    assert body["message"] == "Invalid data"
    assert body["errors"]


def test_login_and_me(client):
    register(client)
    resp = client.post("/api/auth/login", json={"email": "ana@example.com", "password": "secret123"})
    assert resp.status_code == 200
    token = resp.json()["data"]["token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["data"]["email"] == "ana@example.com"
    assert "password_hash" not in me.json()["data"]


def test_login_with_wrong_password(client):
    register(client)
    resp = client.post("/api/auth/login", json={"email": "ana@example.com", "password": "nope"})
    assert resp.status_code == 401
    assert resp.json() == {"ok": False, "message": "Invalid credentials"}


def test_missing_and_invalid_token(client):
    assert client.get("/api/auth/me").status_code == 401
    resp = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401
    assert resp.json()["ok"] is False


def test_token_of_deleted_user(client, headers, make_user, db):
    user = make_user()
    auth = headers(user)
    db.delete(user.subscription)
    db.delete(user)
    db.commit()
    assert client.get("/api/auth/me", headers=auth).status_code == 401


def test_update_profile_merges_preferences(client, headers, make_user):
    user = make_user()
    auth = headers(user)
    client.put("/api/auth/profile", json={"preferences": {"theme": "dark"}}, headers=auth)
    resp = client.put("/api/auth/profile", json={"name": "New", "preferences": {"lang": "es"}}, headers=auth)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["name"] == "New"
    assert data["preferences"] == {"theme": "dark", "lang": "es"}
