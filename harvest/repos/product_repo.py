# harvest/repos/product_repo.py
from sqlalchemy import select, func
from sqlalchemy.orm import Session, selectinload

from harvest.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def list(
        self,
        category: str | None = None,
        producer_id: int | None = None,
        available: bool | None = None,
    ) -> list[ProductModel]:
        query = select(ProductModel).options(selectinload(ProductModel.producer))
        if category:
            query = query.where(ProductModel.category == category)
        if producer_id is not None:
            query = query.where(ProductModel.producer_id == producer_id)
        if available is not None:
            query = query.where(ProductModel.available.is_(available))
        return self.db.execute(
            query.order_by(ProductModel.created_at.desc(), ProductModel.id.desc())
        ).scalars().all()

    def count_available(self) -> int:
        return self.db.execute(
            select(func.count(ProductModel.id)).where(ProductModel.available.is_(True))
        ).scalar_one()

    def count_low_stock(self, threshold: int) -> int:
        return self.db.execute(
            select(func.count(ProductModel.id)).where(
                ProductModel.available.is_(True),
                ProductModel.stock <= threshold,
            )
        ).scalar_one()

    def add(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.flush()
        return product

    def commit(self):
        self.db.commit()

    def refresh(self, product: ProductModel):
        self.db.refresh(product)
