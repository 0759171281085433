# backend/heyu_booking/schemas/services.py

from enum import Enum
from typing import Optional
from pydantic import BaseModel

from .common import CAMEL_CONFIG


class ServiceCategory(str, Enum):
    BASIC_NAILS = "BasicNails"
    EXTENSION = "Extension"
    REMOVAL = "Removal"


class ServiceUpsert(BaseModel):
    """POST body: update when id matches an existing service, else create."""
    id: Optional[int] = None
    name_cn: Optional[str] = None
    name_en: Optional[str] = None
    category: Optional[str] = None
    duration: Optional[str] = None
    duration_en: Optional[str] = None
    duration_hours: Optional[int] = None
    price: Optional[str] = None
    description: Optional[str] = None
    description_cn: Optional[str] = None
    is_add_on: Optional[bool] = None
    is_active: Optional[bool] = None

    model_config = CAMEL_CONFIG


class ServiceRead(BaseModel):
    id: int
    name_cn: str
    name_en: str
    category: Optional[str] = None
    duration: Optional[str] = None
    duration_en: Optional[str] = None
    duration_hours: int
    price: Optional[str] = None
    description: Optional[str] = None
    description_cn: Optional[str] = None
    is_add_on: bool
    is_active: bool

    model_config = CAMEL_CONFIG


class ServiceListResponse(BaseModel):
    success: bool = True
    count: int
    services: list[ServiceRead]


class ServiceResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    service: ServiceRead
