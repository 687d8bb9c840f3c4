from datetime import datetime, timedelta, timezone

from harvest.services.subscription_service import SubscriptionService
from harvest.tasks.renew import renew_subscriptions_task


def test_current_and_usage(client, headers, make_user):
    auth = headers(make_user(plan="STANDARD", used_kg=2.5))
    current = client.get("/api/subscription/current", headers=auth).json()["data"]
    assert current["remaining_kg"] == 5.5

    usage = client.get("/api/subscription/usage", headers=auth).json()["data"]
    assert usage == {
        "plan": "STANDARD",
        "limit_in_kg": 8.0,
        "used_kg": 2.5,
        "remaining_kg": 5.5,
        "renewal_date": usage["renewal_date"],
        "is_active": True,
    }


def test_no_subscription_is_not_found(client, headers, make_user):
    auth = headers(make_user(role="employee", plan=None))
    assert client.get("/api/subscription/current", headers=auth).status_code == 404
    assert client.post("/api/subscription/change", json={"plan": "PREMIUM"}, headers=auth).status_code == 404


def test_upgrade_without_usage_has_no_warning(client, headers, make_user):
    resp = client.post("/api/subscription/change", json={"plan": "PREMIUM"}, headers=headers(make_user()))
    assert resp.status_code == 200
    body = resp.json()
    assert body["data"]["limit_in_kg"] == 10.0
    assert body["warning"] is None


def test_downgrade_caps_used_kg(client, headers, make_user):
    auth = headers(make_user(plan="PREMIUM", used_kg=7.0))
    resp = client.post("/api/subscription/change", json={"plan": "BASIC"}, headers=auth)
    body = resp.json()
    assert body["data"]["limit_in_kg"] == 5.0
    assert body["data"]["used_kg"] == 5.0
    assert body["data"]["remaining_kg"] == 0.0
    assert "7 kg" in body["warning"]


def test_invalid_plan(client, headers, make_user):
    resp = client.post("/api/subscription/change", json={"plan": "GOLD"}, headers=headers(make_user()))
    assert resp.status_code == 400


def test_validate_weight(client, headers, make_user):
    auth = headers(make_user(used_kg=4.0))
    ok = client.post("/api/subscription/validate", json={"weight_in_kg": 1.0}, headers=auth).json()["data"]
    assert ok["can_add"] is True
    assert ok["excess_kg"] == 0.0

    over = client.post("/api/subscription/validate", json={"weight_in_kg": 1.5}, headers=auth).json()["data"]
    assert over["can_add"] is False
    assert over["would_exceed"] is True
    assert over["excess_kg"] == 0.5
    assert over["remaining"] == 1.0

    assert client.post("/api/subscription/validate", json={"weight_in_kg": 0}, headers=auth).status_code == 400


def test_renew_due_resets_usage(db, make_user, subscription_of):
    due = make_user(used_kg=4.0)
    not_due = make_user(used_kg=2.0)

    subscription = subscription_of(due.id)
    subscription.renewal_date = datetime(2026, 1, 31, tzinfo=timezone.utc)
    db.commit()

    now = datetime(2026, 3, 5, tzinfo=timezone.utc)
    assert SubscriptionService(db).renew_due(now) == 1

    renewed = subscription_of(due.id)
    assert renewed.used_kg == 0.0
    assert renewed.renewal_date.replace(tzinfo=None) == datetime(2026, 3, 28)
    assert subscription_of(not_due.id).used_kg == 2.0


def test_renew_task_runs_eagerly(monkeypatch, db, make_user, subscription_of, session_factory):
    import harvest.tasks.renew as renew

    user = make_user(used_kg=3.0)
    subscription = subscription_of(user.id)
    subscription.renewal_date = datetime.now(timezone.utc) - timedelta(days=1)
    db.commit()

    monkeypatch.setattr(renew, "SessionLocal", session_factory)
    assert renew_subscriptions_task.delay().get() == 1
    assert subscription_of(user.id).used_kg == 0.0
