# harvest/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from harvest.api.deps import get_current_user, get_lock_service
from harvest.api.errors import DOMAIN_ERRORS, to_http
from harvest.data.database import get_db
from harvest.data.models.user import UserModel
from harvest.domain.schemas import (
    Envelope,
    OrderCreateIn,
    OrderOut,
    ProducerOrderOut,
    StatusUpdateIn,
)
from harvest.services.lock_service import LockService
from harvest.services.order_service import OrderService

router = APIRouter(prefix="/api/orders", tags=["orders"])


def get_service(db: Session, lock_service: LockService):
    return OrderService(db=db, lock_service=lock_service)


@router.post("/create", response_model=Envelope[OrderOut], status_code=201)
def create_order(
    payload: OrderCreateIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    """
    Turns the current cart into an order.
    The monthly kg usage is updated and the cart emptied in the same
    transaction; the notification is sent asynchronously.
    """
    svc = get_service(db, lock_service)
    try:
        order = svc.create_order_from_cart(user.id, payload)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
    return {"ok": True, "message": "Order created successfully", "data": order}


@router.get("", response_model=Envelope[List[OrderOut]])
def list_orders(
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    svc = get_service(db, lock_service)
    return {"ok": True, "data": svc.list_orders(user.id)}


# declared before /{order_id} so "producer" is not parsed as an id
@router.get("/producer/my-orders", response_model=Envelope[List[ProducerOrderOut]])
def producer_orders(
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    svc = get_service(db, lock_service)
    try:
        orders = svc.producer_orders(user.id)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
    return {"ok": True, "data": orders}


@router.put("/producer/{order_id}/status", response_model=Envelope[OrderOut])
def update_status_as_producer(
    order_id: int,
    payload: StatusUpdateIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    svc = get_service(db, lock_service)
    try:
        order = svc.update_status_as_producer(user.id, order_id, payload.status)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
    return {"ok": True, "message": f"Order status updated to {order.status}", "data": order}


@router.get("/{order_id}", response_model=Envelope[OrderOut])
def get_order(
    order_id: int,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    svc = get_service(db, lock_service)
    try:
        order = svc.get_order(order_id, user.id)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
    return {"ok": True, "data": order}
