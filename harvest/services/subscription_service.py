# harvest/services/subscription_service.py
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from harvest.data.models.subscription import SubscriptionModel
from harvest.domain.errors import NotFoundError
from harvest.domain.plans import limit_for_plan, remaining_kg
from harvest.repos.subscription_repo import SubscriptionRepo
from harvest.utils.dates import add_months
from harvest.utils.logging import get_logger

logger = get_logger(__name__)


class SubscriptionService:
    """Monthly kg allowance of a customer: read, change plan, pre-check weights."""

    def __init__(self, db: Session):
        self.repo = SubscriptionRepo(db)

    def get_current(self, user_id: int) -> SubscriptionModel:
        subscription = self.repo.get_by_user(user_id)
        if not subscription:
            raise NotFoundError("No subscription found")
        return subscription

    def change_plan(self, user_id: int, plan: str) -> dict:
        new_limit = limit_for_plan(plan)
        subscription = self.get_current(user_id)

        warning = None
        if subscription.used_kg > 0:
            warning = (
                f"You have already used {subscription.used_kg:g} kg of your current plan. "
                f"Your new limit will be {new_limit:g} kg."
            )

        previous = subscription.plan
        subscription.plan = plan
        subscription.limit_in_kg = new_limit
        # keep used_kg <= limit_in_kg when downgrading
        subscription.used_kg = min(subscription.used_kg, new_limit)
        self.repo.commit()
        self.repo.refresh(subscription)

        logger.info(f"User {user_id} changed plan {previous} -> {plan}")
        return {"subscription": subscription, "warning": warning}

    def validate_weight(self, user_id: int, weight_in_kg: float) -> dict:
        subscription = self.repo.get_by_user(user_id)
        if not subscription or not subscription.is_active:
            raise NotFoundError("No active subscription found")

        left = subscription.limit_in_kg - subscription.used_kg
        can_add = left >= weight_in_kg
        return {
            "can_add": can_add,
            "weight_to_add": weight_in_kg,
            "current_used": subscription.used_kg,
            "limit": subscription.limit_in_kg,
            "remaining": remaining_kg(subscription),
            "would_exceed": not can_add,
            "excess_kg": 0.0 if can_add else weight_in_kg - left,
        }

    def renew_due(self, now: datetime | None = None) -> int:
        """
        Reset usage of every active subscription whose renewal date has passed
        and move the renewal date forward by whole months.
        """
        now = now or datetime.now(timezone.utc)
        due = self.repo.get_due_for_renewal(now)

        for subscription in due:
            renewal = subscription.renewal_date
            if renewal.tzinfo is None:
                renewal = renewal.replace(tzinfo=timezone.utc)
            while renewal <= now:
                renewal = add_months(renewal, 1)
            subscription.used_kg = 0.0
            subscription.renewal_date = renewal
            logger.info(f"Subscription {subscription.id} renewed until {renewal.isoformat()}")

        self.repo.commit()
        return len(due)
