# harvest/services/user_service.py
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from harvest.data.models.user import UserModel
from harvest.data.models.subscription import SubscriptionModel
from harvest.domain.enums import Plan, Role
from harvest.domain.errors import NotFoundError, ConflictError
from harvest.domain.plans import PLAN_LIMITS
from harvest.domain.schemas import RegisterIn, LoginIn, ProfileUpdateIn
from harvest.repos.user_repo import UserRepo
from harvest.repos.subscription_repo import SubscriptionRepo
from harvest.services.auth_service import hash_password, verify_password, create_access_token
from harvest.utils.dates import add_months
from harvest.utils.logging import get_logger

logger = get_logger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)
        self.subscriptions = SubscriptionRepo(db)

    def register(self, payload: RegisterIn) -> dict:
        """
        Create a customer together with an active subscription.
        An unknown plan falls back to BASIC.
        """
        if self.repo.get_by_email(payload.email):
            raise ConflictError("User with this email already exists")

        plan = payload.subscription_plan if payload.subscription_plan in PLAN_LIMITS else Plan.BASIC.value

        try:
            user = self.repo.add(
                UserModel(
                    name=payload.name,
                    email=payload.email.lower(),
                    phone=payload.phone,
                    password_hash=hash_password(payload.password),
                    role=Role.CUSTOMER.value,
                    preferences={"theme": {}, "notifications": {}},
                )
            )
            self.subscriptions.add(
                SubscriptionModel(
                    user_id=user.id,
                    plan=plan,
                    limit_in_kg=PLAN_LIMITS[plan],
                    used_kg=0.0,
                    renewal_date=add_months(datetime.now(timezone.utc), 1),
                    is_active=True,
                )
            )
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"New user registered: {user.id} ({user.email}) on plan {plan}")
        return {"user": user, "token": create_access_token(user.id, user.role)}

    def login(self, payload: LoginIn) -> dict:
        user = self.repo.get_by_email(payload.email)
        if not user or not verify_password(payload.password, user.password_hash):
            raise PermissionError("Invalid credentials")

        logger.info(f"User logged in: {user.id}")
        return {"user": user, "token": create_access_token(user.id, user.role)}

    def get_user(self, user_id: int) -> UserModel:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, user: UserModel, payload: ProfileUpdateIn) -> UserModel:
        changes = payload.model_dump(exclude_unset=True)
        if "preferences" in changes and changes["preferences"] is not None:
            # merge so a theme update does not wipe notification settings
            changes["preferences"] = {**(user.preferences or {}), **changes["preferences"]}
        for field, value in changes.items():
            if value is not None:
                setattr(user, field, value)
        self.repo.commit()
        return user

    def change_role(self, user_id: int, role: str) -> tuple[UserModel, str]:
        user = self.get_user(user_id)
        previous = user.role
        user.role = role
        self.repo.commit()
        logger.info(f"User {user.id} role changed: {previous} -> {role}")
        return user, previous
