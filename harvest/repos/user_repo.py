# harvest/repos/user_repo.py
from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session

from harvest.data.models.user import UserModel
from harvest.data.models.order import OrderModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def get_by_email(self, email: str) -> UserModel | None:
        return self.db.execute(
            select(UserModel).where(func.lower(UserModel.email) == email.lower())
        ).scalar_one_or_none()

    def add(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.flush()
        return user

    def search(self, search: str | None, role: str | None, offset: int, limit: int):
        query = select(UserModel)
        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(
                or_(func.lower(UserModel.name).like(pattern), func.lower(UserModel.email).like(pattern))
            )
        if role:
            query = query.where(UserModel.role == role)

        total = self.db.execute(select(func.count()).select_from(query.subquery())).scalar_one()
        users = self.db.execute(
            query.order_by(UserModel.created_at.desc(), UserModel.id.desc()).offset(offset).limit(limit)
        ).scalars().all()
        return users, total

    def order_counts(self, user_ids: list[int]) -> dict[int, int]:
        if not user_ids:
            return {}
        rows = self.db.execute(
            select(OrderModel.user_id, func.count(OrderModel.id))
            .where(OrderModel.user_id.in_(user_ids))
            .group_by(OrderModel.user_id)
        ).all()
        return {user_id: count for user_id, count in rows}

    def count_by_role(self, role: str) -> int:
        return self.db.execute(
            select(func.count(UserModel.id)).where(UserModel.role == role)
        ).scalar_one()

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
