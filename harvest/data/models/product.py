from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, Float, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship

from harvest.data.database import Base


def _now():
    return datetime.now(timezone.utc)


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    producer_id = Column(Integer, ForeignKey("producers.id"), nullable=False, index=True)

    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(20), nullable=False, index=True)
    weight_in_kg = Column(Float, nullable=False)
    available = Column(Boolean, nullable=False, default=True)
    stock = Column(Integer, nullable=False, default=0)
    image = Column(String(500), nullable=True)
    origin = Column(String(200), nullable=True)
    season = Column(String(100), nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    nutritional_info = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)

    producer = relationship("ProducerModel", back_populates="products")
