# harvest/api/routers/products.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from harvest.api.deps import get_current_user, require_producer
from harvest.api.errors import DOMAIN_ERRORS, to_http
from harvest.data.database import get_db
from harvest.data.models.user import UserModel
from harvest.domain.enums import Category
from harvest.domain.schemas import Envelope, ProductIn, ProductOut, ProductUpdateIn
from harvest.services.product_service import ProductService

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("", response_model=Envelope[List[ProductOut]])
def list_products(
    category: Optional[Category] = Query(None),
    producer_id: Optional[int] = Query(None),
    available: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
):
    products = ProductService(db).list(
        category=category.value if category else None,
        producer_id=producer_id,
        available=available,
    )
    return {"ok": True, "data": products}


@router.get("/by-producer/{producer_id}", response_model=Envelope[List[ProductOut]])
def products_by_producer(producer_id: int, db: Session = Depends(get_db)):
    return {"ok": True, "data": ProductService(db).list(producer_id=producer_id)}


@router.get("/{product_id}", response_model=Envelope[ProductOut])
def get_product(product_id: int, db: Session = Depends(get_db)):
    try:
        product = ProductService(db).get(product_id)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
    return {"ok": True, "data": product}


@router.post("", response_model=Envelope[ProductOut], status_code=201)
def create_product(
    payload: ProductIn,
    user: UserModel = Depends(require_producer),
    db: Session = Depends(get_db),
):
    try:
        product = ProductService(db).create(user, payload)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
    return {"ok": True, "message": "Product created", "data": product}


@router.put("/{product_id}", response_model=Envelope[ProductOut])
def update_product(
    product_id: int,
    payload: ProductUpdateIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        product = ProductService(db).update(user, product_id, payload)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
    return {"ok": True, "message": "Product updated", "data": product}
