# harvest/data/seed.py
from datetime import datetime, timezone

from harvest.data.database import Base, SessionLocal, engine
from harvest.data.models import (
    UserModel,
    SubscriptionModel,
    ProducerModel,
    ProductModel,
)
from harvest.domain.enums import Category, Plan, Role
from harvest.domain.plans import PLAN_LIMITS
from harvest.services.auth_service import hash_password
from harvest.utils.dates import add_months
from harvest.utils.logging import get_logger

logger = get_logger(__name__)

DEMO_PASSWORD = "harvest123"

USERS = [
    ("Admin Harvest", "admin@harvest.example.com", Role.ADMIN, None),
    ("Elena Employee", "employee@harvest.example.com", Role.EMPLOYEE, None),
    ("Carlos Customer", "customer@harvest.example.com", Role.CUSTOMER, Plan.STANDARD),
    ("Bianca Basic", "basic@harvest.example.com", Role.CUSTOMER, Plan.BASIC),
    ("Pedro Producer", "producer@harvest.example.com", Role.PRODUCER, None),
]

PRODUCTS = [
    ("Organic Apples", Category.FRUITS, 1.0, 40, "Apples from the valley orchards"),
    ("Carrots", Category.VEGETABLES, 0.5, 60, "Freshly harvested carrots"),
    ("Black Beans", Category.LEGUMES, 0.5, 30, "Dried black beans"),
    ("Basil", Category.HERBS, 0.1, 25, "Fresh basil bunch"),
    ("Highland Coffee", Category.COFFEE, 0.25, 15, "Single origin, medium roast"),
    ("Free Range Eggs", Category.PROTEINS, 0.7, 4, "A dozen free range eggs"),
]


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(UserModel).first():
            logger.info("Database already has users, skipping seed")
            return

        now = datetime.now(timezone.utc)
        users = {}
        for name, email, role, plan in USERS:
            user = UserModel(
                name=name,
                email=email,
                password_hash=hash_password(DEMO_PASSWORD),
                role=role.value,
                preferences={"theme": {}, "notifications": {}},
            )
            db.add(user)
            db.flush()
            users[role] = user
            if plan:
                db.add(
                    SubscriptionModel(
                        user_id=user.id,
                        plan=plan.value,
                        limit_in_kg=PLAN_LIMITS[plan.value],
                        used_kg=0.0,
                        renewal_date=add_months(now, 1),
                        is_active=True,
                    )
                )

        producer = ProducerModel(
            user_id=users[Role.PRODUCER].id,
            business_name="Green Valley Farm",
            description="Family farm growing seasonal produce",
            location="Green Valley",
            contact_info={"phone": "+1 555 0100"},
            verified=True,
        )
        db.add(producer)
        db.flush()

        for name, category, weight, stock, description in PRODUCTS:
            db.add(
                ProductModel(
                    producer_id=producer.id,
                    name=name,
                    description=description,
                    category=category.value,
                    weight_in_kg=weight,
                    available=True,
                    stock=stock,
                    origin=producer.location,
                    tags=[category.value.lower()],
                )
            )

        db.commit()
        logger.info(f"Seeded {len(USERS)} users, 1 producer and {len(PRODUCTS)} products")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
