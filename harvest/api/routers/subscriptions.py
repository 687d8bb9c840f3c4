# harvest/api/routers/subscriptions.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from harvest.api.deps import get_current_user
from harvest.api.errors import DOMAIN_ERRORS, to_http
from harvest.data.database import get_db
from harvest.data.models.user import UserModel
from harvest.domain.schemas import (
    Envelope,
    SubscriptionOut,
    UsageOut,
    ChangePlanIn,
    ValidateWeightIn,
    WeightCheckOut,
)
from harvest.services.subscription_service import SubscriptionService

router = APIRouter(prefix="/api/subscription", tags=["subscription"])


@router.get("/current", response_model=Envelope[SubscriptionOut])
def current(user: UserModel = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        subscription = SubscriptionService(db).get_current(user.id)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
    return {"ok": True, "data": subscription}


@router.get("/usage", response_model=Envelope[UsageOut])
def usage(user: UserModel = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        subscription = SubscriptionService(db).get_current(user.id)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
    return {"ok": True, "data": subscription}


@router.post("/change", response_model=Envelope[SubscriptionOut])
def change_plan(
    payload: ChangePlanIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Switches plan. The new limit applies at once; kg already used this month
    are kept (capped at the new limit) and reported as a warning.
    """
    try:
        result = SubscriptionService(db).change_plan(user.id, payload.plan)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
    return {
        "ok": True,
        "message": f"Plan changed to {payload.plan}",
        "data": result["subscription"],
        "warning": result["warning"],
    }


@router.post("/validate", response_model=Envelope[WeightCheckOut])
def validate_weight(
    payload: ValidateWeightIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        check = SubscriptionService(db).validate_weight(user.id, payload.weight_in_kg)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
    return {"ok": True, "data": check}
