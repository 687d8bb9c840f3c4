from sqlalchemy import Column, Integer, String, Float, ForeignKey
from sqlalchemy.orm import relationship

from harvest.data.database import Base


class OrderItemModel(Base):
    """Snapshot of a cart item taken when the order is placed."""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)

    quantity = Column(Integer, nullable=False)
    weight_in_kg = Column(Float, nullable=False)
    name = Column(String(200), nullable=False)
    image = Column(String(500), nullable=True)
    producer_id = Column(Integer, nullable=False, index=True)
    producer_name = Column(String(200), nullable=False)

    order = relationship("OrderModel", back_populates="items")
