# harvest/repos/order_repo.py
from datetime import datetime

from sqlalchemy import select, func
from sqlalchemy.orm import Session, selectinload

from harvest.data.models.order import OrderModel
from harvest.data.models.order_item import OrderItemModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .where(OrderModel.id == order_id)
            .options(selectinload(OrderModel.items), selectinload(OrderModel.user))
        ).scalar_one_or_none()

    def list_for_user(self, user_id: int) -> list[OrderModel]:
        return self.db.execute(
            select(OrderModel)
            .where(OrderModel.user_id == user_id)
            .options(selectinload(OrderModel.items))
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        ).scalars().all()

    def list_for_producer(self, producer_id: int) -> list[OrderModel]:
        has_items = select(OrderItemModel.order_id).where(OrderItemModel.producer_id == producer_id)
        return self.db.execute(
            select(OrderModel)
            .where(OrderModel.id.in_(has_items))
            .options(selectinload(OrderModel.items), selectinload(OrderModel.user))
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        ).scalars().all()

    def list_by_status(self, statuses, limit: int | None = None, oldest_first: bool = False) -> list[OrderModel]:
        query = (
            select(OrderModel)
            .where(OrderModel.status.in_(list(statuses)))
            .options(selectinload(OrderModel.items), selectinload(OrderModel.user))
        )
        if oldest_first:
            query = query.order_by(OrderModel.created_at.asc(), OrderModel.id.asc())
        else:
            query = query.order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        if limit:
            query = query.limit(limit)
        return self.db.execute(query).scalars().all()

    def list_all(self, status: str | None = None) -> list[OrderModel]:
        query = select(OrderModel).options(selectinload(OrderModel.items), selectinload(OrderModel.user))
        if status:
            query = query.where(OrderModel.status == status)
        return self.db.execute(
            query.order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        ).scalars().all()

    def recent(self, limit: int) -> list[OrderModel]:
        return self.db.execute(
            select(OrderModel)
            .options(selectinload(OrderModel.user))
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            .limit(limit)
        ).scalars().all()

    def count_by_status(self) -> dict[str, int]:
        rows = self.db.execute(
            select(OrderModel.status, func.count(OrderModel.id)).group_by(OrderModel.status)
        ).all()
        return {status: count for status, count in rows}

    def count_in(self, statuses) -> int:
        return self.db.execute(
            select(func.count(OrderModel.id)).where(OrderModel.status.in_(list(statuses)))
        ).scalar_one()

    def stats_since(self, since: datetime) -> tuple[int, float]:
        """Order count and kg ordered since `since`, cancelled orders excluded."""
        count, kg = self.db.execute(
            select(func.count(OrderModel.id), func.coalesce(func.sum(OrderModel.total_weight_in_kg), 0.0))
            .where(OrderModel.created_at >= since, OrderModel.status != "cancelled")
        ).one()
        return count, float(kg)

    def update_order_status(self, order: OrderModel, status: str) -> OrderModel:
        order.status = status
        self.db.commit()
        self.db.refresh(order)
        return order

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()

    def refresh(self, order: OrderModel):
        self.db.refresh(order)
