# harvest/api/routers/employee.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from harvest.api.deps import require_employee, get_lock_service
from harvest.api.errors import DOMAIN_ERRORS, to_http
from harvest.data.database import get_db
from harvest.data.models.user import UserModel
from harvest.domain.schemas import Envelope, EmployeeOrderOut, OrderOut, StatusUpdateIn
from harvest.services.lock_service import LockService
from harvest.services.order_service import OrderService

router = APIRouter(prefix="/api/employee", tags=["employee"])


@router.get("/orders/active", response_model=Envelope[List[EmployeeOrderOut]])
def active_orders(
    status: Optional[str] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    user: UserModel = Depends(require_employee),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    """
    Orders waiting to be handled, oldest first, so the most urgent ones are on top.
    """
    svc = OrderService(db, lock_service)
    try:
        orders = svc.active_orders(status, limit)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
    return {"ok": True, "data": orders}


@router.get("/orders/{order_id}", response_model=Envelope[EmployeeOrderOut])
def order_details(
    order_id: int,
    user: UserModel = Depends(require_employee),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    svc = OrderService(db, lock_service)
    try:
        order = svc.order_details(order_id)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
    return {"ok": True, "data": order}


@router.post("/orders/{order_id}/status", response_model=Envelope[OrderOut])
def update_status(
    order_id: int,
    payload: StatusUpdateIn,
    user: UserModel = Depends(require_employee),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    svc = OrderService(db, lock_service)
    try:
        order, previous = svc.update_status_as_employee(order_id, payload.status)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
    return {
        "ok": True,
        "message": f"Order status updated to {order.status}",
        "data": order,
        "meta": {"previous_status": previous, "new_status": order.status, "updated_by": user.id},
    }


@router.get("/dashboard/summary", response_model=Envelope[dict])
def dashboard_summary(
    user: UserModel = Depends(require_employee),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    svc = OrderService(db, lock_service)
    return {"ok": True, "data": svc.dashboard_summary()}
