# harvest/repos/subscription_repo.py
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from harvest.data.models.subscription import SubscriptionModel


class SubscriptionRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_by_user(self, user_id: int) -> SubscriptionModel | None:
        return self.db.execute(
            select(SubscriptionModel).where(SubscriptionModel.user_id == user_id)
        ).scalar_one_or_none()

    def add(self, subscription: SubscriptionModel) -> SubscriptionModel:
        self.db.add(subscription)
        self.db.flush()
        return subscription

    def consume_kg(self, subscription_id: int, weight: float) -> int:
        """
        Atomically add `weight` to used_kg, guarded by the limit in the same
        statement. Returns the number of rows touched (0 = limit reached).
        """
        result = self.db.execute(
            update(SubscriptionModel)
            .where(
                SubscriptionModel.id == subscription_id,
                SubscriptionModel.is_active.is_(True),
                SubscriptionModel.used_kg + weight <= SubscriptionModel.limit_in_kg,
            )
            .values(used_kg=SubscriptionModel.used_kg + weight)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def get_due_for_renewal(self, now: datetime) -> list[SubscriptionModel]:
        return self.db.execute(
            select(SubscriptionModel).where(
                SubscriptionModel.is_active.is_(True),
                SubscriptionModel.renewal_date <= now,
            )
        ).scalars().all()

    def refresh(self, subscription: SubscriptionModel):
        self.db.refresh(subscription)

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
