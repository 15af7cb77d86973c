from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class ServiceBase(BaseModel):
    name: str = Field(..., max_length=255)
    description: Optional[str] = None
    duration_minutes: int = Field(..., gt=0, le=24 * 60)
    price: Decimal = Field(..., ge=0)
    is_active: bool = True


class ServiceCreate(ServiceBase):
    pass


class Service(ServiceBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
