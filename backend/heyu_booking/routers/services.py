# backend/heyu_booking/routers/services.py
# POST = upsert (update when id exists), DELETE = soft-delete (is_active)

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.tables import Services as DBServices
from ..schemas.services import (
    ServiceListResponse,
    ServiceRead,
    ServiceResponse,
    ServiceUpsert,
)
from ..services.slots import parse_duration

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/services", tags=["services"])


def _duration_hours(obj: DBServices) -> int:
    return parse_duration(obj.duration or obj.duration_en)


@router.get("", response_model=ServiceListResponse)
def list_services(category: Optional[str] = None, db: Session = Depends(get_db)):
    query = db.query(DBServices).filter(DBServices.is_active == 1)
    if category:
        query = query.filter(DBServices.category == category)

    services = [ServiceRead.model_validate(obj) for obj in query.order_by(DBServices.id).all()]
    return ServiceListResponse(count=len(services), services=services)


@router.get("/{id}", response_model=ServiceResponse)
def get_service(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBServices, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Service not found")
    return ServiceResponse(service=ServiceRead.model_validate(obj))


@router.post("", response_model=ServiceResponse)
def upsert_service(
    data: ServiceUpsert,
    response: Response,
    db: Session = Depends(get_db),
):
    fields = data.model_dump(exclude_unset=True, exclude={"id"})
    for flag in ("is_add_on", "is_active"):
        if flag in fields and fields[flag] is not None:
            fields[flag] = int(fields[flag])

    obj = db.get(DBServices, data.id) if data.id is not None else None

    if obj is not None:
        for field, value in fields.items():
            setattr(obj, field, value)
        if "duration_hours" not in fields and ("duration" in fields or "duration_en" in fields):
            obj.duration_hours = _duration_hours(obj)
        message = "Service updated successfully"
    else:
        if data.id is not None:
            new_id = data.id
        else:
            new_id = (db.query(func.max(DBServices.id)).scalar() or 0) + 1
        obj = DBServices(id=new_id, **{k: v for k, v in fields.items() if v is not None})
        if not fields.get("duration_hours"):
            obj.duration_hours = _duration_hours(obj)
        db.add(obj)
        response.status_code = status.HTTP_201_CREATED
        message = "Service created successfully"

    db.commit()
    db.refresh(obj)
    logger.info(f"{message}: {obj.id} {obj.name_en or obj.name_cn}")
    return ServiceResponse(message=message, service=ServiceRead.model_validate(obj))


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_service(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBServices, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Service not found")

    obj.is_active = 0
    db.commit()
