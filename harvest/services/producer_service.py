# harvest/services/producer_service.py
from sqlalchemy.orm import Session

from harvest.data.models.producer import ProducerModel
from harvest.data.models.user import UserModel
from harvest.domain.enums import Role
from harvest.domain.errors import NotFoundError
from harvest.domain.schemas import ProducerIn, ProducerUpdateIn
from harvest.repos.producer_repo import ProducerRepo
from harvest.utils.logging import get_logger

logger = get_logger(__name__)

PREVIEW_PRODUCTS = 5


class ProducerService:
    def __init__(self, db: Session):
        self.repo = ProducerRepo(db)

    def list_verified(self) -> list[dict]:
        producers = self.repo.list_verified()
        return [
            {
                **_producer_fields(p),
                "products": [prod for prod in p.products if prod.available][:PREVIEW_PRODUCTS],
            }
            for p in producers
        ]

    def get(self, producer_id: int) -> dict:
        producer = self.repo.get(producer_id)
        if not producer:
            raise NotFoundError("Producer not found")
        return {
            **_producer_fields(producer),
            "products": [prod for prod in producer.products if prod.available],
        }

    def get_for_user(self, user_id: int) -> ProducerModel | None:
        return self.repo.get_by_user(user_id)

    def register(self, user: UserModel, payload: ProducerIn) -> ProducerModel:
        if self.repo.get_by_user(user.id):
            raise ValueError("You are already a registered producer")

        producer = self.repo.add(
            ProducerModel(
                user_id=user.id,
                business_name=payload.business_name,
                description=payload.description,
                location=payload.location,
                contact_info=payload.contact_info,
                verified=False,
            )
        )
        # admins keep their role, everyone else becomes a producer
        if user.role != Role.ADMIN.value:
            user.role = Role.PRODUCER.value
        self.repo.commit()
        self.repo.refresh(producer)

        logger.info(f"Producer {producer.id} registered for user {user.id}, pending verification")
        return producer

    def update(self, user: UserModel, producer_id: int, payload: ProducerUpdateIn) -> ProducerModel:
        producer = self.repo.get(producer_id)
        if not producer:
            raise NotFoundError("Producer not found")

        if producer.user_id != user.id and user.role != Role.ADMIN.value:
            raise PermissionError("You are not allowed to update this producer")

        for field, value in payload.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(producer, field, value)
        self.repo.commit()
        self.repo.refresh(producer)
        return producer

    def set_verified(self, producer_id: int, verified: bool) -> ProducerModel:
        producer = self.repo.get(producer_id)
        if not producer:
            raise NotFoundError("Producer not found")
        producer.verified = verified
        self.repo.commit()
        self.repo.refresh(producer)
        logger.info(f"Producer {producer_id} verified={verified}")
        return producer


def _producer_fields(p: ProducerModel) -> dict:
    return {
        "id": p.id,
        "user_id": p.user_id,
        "business_name": p.business_name,
        "description": p.description,
        "location": p.location,
        "contact_info": p.contact_info,
        "verified": p.verified,
        "created_at": p.created_at,
    }
