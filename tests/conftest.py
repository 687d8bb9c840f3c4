import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "1"
os.environ["SECRET_KEY"] = "test-secret"

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from harvest.api.deps import get_lock_service
from harvest.data.database import Base, get_db
from harvest.data.models import UserModel, SubscriptionModel, ProducerModel, ProductModel
from harvest.domain.plans import PLAN_LIMITS
from harvest.main import app
from harvest.services.auth_service import hash_password, create_access_token
from harvest.utils.dates import add_months

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeLockService:
    """In-memory stand-in for the Redis checkout lock."""

    def __init__(self):
        self.locks = {}

    def acquire_checkout_lock(self, user_id, token, ttl):
        if user_id in self.locks:
            return False
        self.locks[user_id] = token
        return True

    def release_checkout_lock(self, user_id, token):
        if self.locks.get(user_id) == token:
            del self.locks[user_id]
            return True
        return False


@pytest.fixture(autouse=True)
def _tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def lock_service():
    return FakeLockService()


@pytest.fixture
def client(lock_service):
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_lock_service] = lambda: lock_service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role="customer", plan="BASIC", used_kg=0.0, active=True, name=None, phone=None):
        counter["n"] += 1
        n = counter["n"]
        user = UserModel(
            name=name or f"{role.title()} {n}",
            email=f"{role}{n}@example.com",
            phone=phone,
            password_hash=hash_password("secret123"),
            role=role,
        )
        db.add(user)
        db.flush()
        if plan:
            db.add(
                SubscriptionModel(
                    user_id=user.id,
                    plan=plan,
                    limit_in_kg=PLAN_LIMITS[plan],
                    used_kg=used_kg,
                    renewal_date=add_months(datetime.now(timezone.utc), 1),
                    is_active=active,
                )
            )
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def headers():
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}

    return _headers


@pytest.fixture
def producer(db, make_user):
    user = make_user(role="producer", plan=None, name="Farmer Joe")
    profile = ProducerModel(user_id=user.id, business_name="Green Valley Farm", location="Valley", verified=True)
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


@pytest.fixture
def make_product(db, producer):
    def _make(name="Apples", category="FRUITS", weight=1.0, stock=20, available=True, owner=None):
        product = ProductModel(
            producer_id=(owner or producer).id,
            name=name,
            category=category,
            weight_in_kg=weight,
            stock=stock,
            available=available,
            tags=[],
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture
def subscription_of(db):
    def _get(user_id):
        db.expire_all()
        return db.query(SubscriptionModel).filter_by(user_id=user_id).one()

    return _get


@pytest.fixture
def session_factory():
    return TestingSessionLocal
