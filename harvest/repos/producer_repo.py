# harvest/repos/producer_repo.py
from sqlalchemy import select, func
from sqlalchemy.orm import Session, selectinload

from harvest.data.models.producer import ProducerModel


class ProducerRepo:
    def __init__(self, db: Session):
        self.db = db

    def get(self, producer_id: int) -> ProducerModel | None:
        return self.db.get(ProducerModel, producer_id)

    def get_by_user(self, user_id: int) -> ProducerModel | None:
        return self.db.execute(
            select(ProducerModel).where(ProducerModel.user_id == user_id)
        ).scalar_one_or_none()

    def list_verified(self) -> list[ProducerModel]:
        return self.db.execute(
            select(ProducerModel)
            .where(ProducerModel.verified.is_(True))
            .options(selectinload(ProducerModel.products))
            .order_by(ProducerModel.created_at.desc(), ProducerModel.id.desc())
        ).scalars().all()

    def count(self) -> int:
        return self.db.execute(select(func.count(ProducerModel.id))).scalar_one()

    def add(self, producer: ProducerModel) -> ProducerModel:
        self.db.add(producer)
        self.db.flush()
        return producer

    def commit(self):
        self.db.commit()

    def refresh(self, producer: ProducerModel):
        self.db.refresh(producer)
