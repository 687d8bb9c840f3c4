# harvest/api/routers/producers.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from harvest.api.deps import get_current_user
from harvest.api.errors import DOMAIN_ERRORS, to_http
from harvest.data.database import get_db
from harvest.data.models.user import UserModel
from harvest.domain.schemas import Envelope, ProducerIn, ProducerOut, ProducerUpdateIn
from harvest.services.producer_service import ProducerService

router = APIRouter(prefix="/api/producers", tags=["producers"])


@router.get("", response_model=Envelope[List[ProducerOut]])
def list_producers(db: Session = Depends(get_db)):
    return {"ok": True, "data": ProducerService(db).list_verified()}


@router.post("/register", response_model=Envelope[ProducerOut], status_code=201)
def register_producer(
    payload: ProducerIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        producer = ProducerService(db).register(user, payload)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
    return {"ok": True, "message": "Producer registered, pending verification", "data": producer}


@router.get("/{producer_id}", response_model=Envelope[ProducerOut])
def get_producer(producer_id: int, db: Session = Depends(get_db)):
    try:
        producer = ProducerService(db).get(producer_id)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
    return {"ok": True, "data": producer}


@router.put("/{producer_id}", response_model=Envelope[ProducerOut])
def update_producer(
    producer_id: int,
    payload: ProducerUpdateIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        producer = ProducerService(db).update(user, producer_id, payload)
    except DOMAIN_ERRORS as e:
        raise to_http(e)
    return {"ok": True, "message": "Producer updated", "data": producer}
