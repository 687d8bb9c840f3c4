# harvest/api/routers/carts.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from harvest.api.deps import get_current_user
from harvest.api.errors import DOMAIN_ERRORS, to_http
from harvest.data.database import get_db
from harvest.data.models.user import UserModel
from harvest.domain.schemas import (
    Envelope,
    CartOut,
    CartAddOut,
    CartItemIn,
    CartItemOut,
    CartItemUpdateIn,
)
from harvest.services.cart_service import CartService

router = APIRouter(prefix="/api/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(db)


@router.get("", response_model=Envelope[CartOut])
def get_cart(user: UserModel = Depends(get_current_user), db: Session = Depends(get_db)):
    svc = get_service(db)
    return {"ok": True, "data": svc.get_cart(user.id)}


@router.post("/add", response_model=Envelope[CartAddOut])
def add_item(
    payload: CartItemIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Adds a product to the cart. Checks stock, plan category and that the
    whole cart still fits in the remaining monthly allowance.
    """
    svc = get_service(db)
    try:
        result = svc.add_product(user.id, payload.product_id, payload.quantity)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
    return {"ok": True, "message": "Product added to cart", "data": result}


@router.put("/update", response_model=Envelope[CartItemOut | None])
def update_item(
    payload: CartItemUpdateIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        item = svc.update_quantity(user.id, payload.item_id, payload.quantity)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
    if item is None:
        return {"ok": True, "message": "Product removed from cart"}
    return {"ok": True, "message": "Quantity updated", "data": item}


@router.delete("/remove/{item_id}", response_model=Envelope[None])
def remove_item(
    item_id: int,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        svc.remove_item(user.id, item_id)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
    return {"ok": True, "message": "Product removed from cart"}


@router.delete("/clear", response_model=Envelope[None])
def clear_cart(user: UserModel = Depends(get_current_user), db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        cleared = svc.clear(user.id)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
    return {"ok": True, "message": "Cart cleared" if cleared else "Cart was already empty"}
