# harvest/services/product_service.py
from sqlalchemy.orm import Session

from harvest.data.models.product import ProductModel
from harvest.data.models.user import UserModel
from harvest.domain.enums import Role
from harvest.domain.errors import NotFoundError
from harvest.domain.schemas import ProductIn, ProductUpdateIn
from harvest.repos.producer_repo import ProducerRepo
from harvest.repos.product_repo import ProductRepo
from harvest.utils.logging import get_logger

logger = get_logger(__name__)


class ProductService:
    def __init__(self, db: Session):
        self.repo = ProductRepo(db)
        self.producers = ProducerRepo(db)

    def list(self, category=None, producer_id=None, available=None) -> list[ProductModel]:
        return self.repo.list(category=category, producer_id=producer_id, available=available)

    def get(self, product_id: int) -> ProductModel:
        product = self.repo.get(product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product

    def create(self, user: UserModel, payload: ProductIn) -> ProductModel:
        """
        Producers always publish under their own profile; admins must name
        the producer explicitly.
        """
        if user.role == Role.PRODUCER.value:
            producer = self.producers.get_by_user(user.id)
            if not producer:
                raise NotFoundError("Your producer profile was not found")
        elif user.role == Role.ADMIN.value:
            if not payload.producer_id:
                raise ValueError("producer_id is required for administrators")
            producer = self.producers.get(payload.producer_id)
            if not producer:
                raise NotFoundError("Producer not found")
        else:
            raise PermissionError("Only producers can create products")

        product = self.repo.add(
            ProductModel(
                producer_id=producer.id,
                name=payload.name,
                description=payload.description,
                category=payload.category.value,
                weight_in_kg=payload.weight_in_kg,
                available=True,
                stock=payload.stock,
                image=payload.image,
                origin=payload.origin,
                season=payload.season,
                tags=payload.tags,
                nutritional_info=payload.nutritional_info,
            )
        )
        self.repo.commit()
        self.repo.refresh(product)

        logger.info(f"Product {product.id} created by producer {producer.id}")
        return product

    def update(self, user: UserModel, product_id: int, payload: ProductUpdateIn) -> ProductModel:
        product = self.get(product_id)

        if user.role != Role.ADMIN.value and product.producer.user_id != user.id:
            raise PermissionError("You are not allowed to update this product")

        changes = payload.model_dump(exclude_unset=True)
        if changes.get("category") is not None:
            changes["category"] = changes["category"].value
        for field, value in changes.items():
            if value is not None:
                setattr(product, field, value)
        self.repo.commit()
        self.repo.refresh(product)
        return product
