# harvest/api/routers/auth.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from harvest.api.deps import get_current_user
from harvest.api.errors import DOMAIN_ERRORS, to_http
from harvest.data.database import get_db
from harvest.data.models.user import UserModel
from harvest.domain.schemas import Envelope, RegisterIn, LoginIn, ProfileUpdateIn, AuthOut, UserOut
from harvest.services.user_service import UserService

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=Envelope[AuthOut], status_code=201)
def register(payload: RegisterIn, db: Session = Depends(get_db)):
    """
    Registers a customer and opens a subscription on the chosen plan.
    """
    try:
        result = UserService(db).register(payload)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
    return {"ok": True, "message": "User registered successfully", "data": result}


@router.post("/login", response_model=Envelope[AuthOut])
def login(payload: LoginIn, db: Session = Depends(get_db)):
    try:
        result = UserService(db).login(payload)
    except PermissionError as e:
        # bad credentials are an authentication failure
        raise HTTPException(status_code=401, detail=str(e))
    return {"ok": True, "message": "Login successful", "data": result}


@router.get("/me", response_model=Envelope[UserOut])
def me(user: UserModel = Depends(get_current_user)):
    return {"ok": True, "data": user}


@router.put("/profile", response_model=Envelope[UserOut])
def update_profile(
    payload: ProfileUpdateIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        updated = UserService(db).update_profile(user, payload)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
    return {"ok": True, "message": "Profile updated", "data": updated}
