# harvest/api/routers/admin.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from harvest.api.deps import require_admin, get_lock_service
from harvest.api.errors import DOMAIN_ERRORS, to_http
from harvest.data.database import get_db
from harvest.data.models.user import UserModel
from harvest.domain.enums import Role
from harvest.domain.schemas import (
    Envelope,
    AdminUserOut,
    OrderOut,
    ProducerBrief,
    RoleUpdateIn,
    UserOut,
    VerifyProducerIn,
)
from harvest.services.admin_service import AdminService
from harvest.services.lock_service import LockService
from harvest.services.order_service import OrderService
from harvest.services.producer_service import ProducerService
from harvest.services.user_service import UserService

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/users", response_model=Envelope[List[AdminUserOut]])
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    search: Optional[str] = Query(None),
    role: Optional[Role] = Query(None),
    admin: UserModel = Depends(require_admin),
    db: Session = Depends(get_db),
):
    users, meta = AdminService(db).list_users(page, limit, search, role.value if role else None)
    return {"ok": True, "data": users, "meta": meta}


@router.put("/users/{user_id}/role", response_model=Envelope[UserOut])
def change_role(
    user_id: int,
    payload: RoleUpdateIn,
    admin: UserModel = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        user, previous = UserService(db).change_role(user_id, payload.role.value)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
    return {
        "ok": True,
        "message": f"Role updated to {user.role}",
        "data": user,
        "meta": {"previous_role": previous, "new_role": user.role},
    }


@router.get("/orders", response_model=Envelope[List[OrderOut]])
def all_orders(
    status: Optional[str] = Query(None),
    admin: UserModel = Depends(require_admin),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    try:
        orders = OrderService(db, lock_service).all_orders(status)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
    return {"ok": True, "data": orders}


@router.put("/producers/{producer_id}/verify", response_model=Envelope[ProducerBrief])
def verify_producer(
    producer_id: int,
    payload: VerifyProducerIn,
    admin: UserModel = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        producer = ProducerService(db).set_verified(producer_id, payload.verified)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
    message = "Producer verified" if producer.verified else "Producer verification revoked"
    return {"ok": True, "message": message, "data": producer}


@router.get("/overview", response_model=Envelope[dict])
def overview(admin: UserModel = Depends(require_admin), db: Session = Depends(get_db)):
    return {"ok": True, "data": AdminService(db).overview()}
