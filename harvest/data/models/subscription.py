from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from harvest.data.database import Base


def _now():
    return datetime.now(timezone.utc)


class SubscriptionModel(Base):
    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)

    plan = Column(String(20), nullable=False)  # BASIC, STANDARD, PREMIUM
    limit_in_kg = Column(Float, nullable=False)
    used_kg = Column(Float, nullable=False, default=0.0)
    renewal_date = Column(DateTime(timezone=True), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)

    user = relationship("UserModel", back_populates="subscription")

    @property
    def remaining_kg(self) -> float:
        return max(0.0, self.limit_in_kg - self.used_kg)
