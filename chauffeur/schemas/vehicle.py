from pydantic import Field
from typing import Optional
from datetime import datetime

from chauffeur.schemas.common import CamelModel


class VehicleCreate(CamelModel):
    category_name: str = Field(..., min_length=1)
    category_details: Optional[str] = None
    vehicle_type: Optional[str] = None
    number_of_passengers: int = Field(4, ge=1, le=50)
    number_of_big_luggage: int = Field(0, ge=0, le=20)
    number_of_small_luggage: int = Field(0, ge=0, le=20)
    list_priority: int = Field(0, ge=0)
    is_active: bool = True


class VehicleUpdate(CamelModel):
    category_name: Optional[str] = None
    category_details: Optional[str] = None
    vehicle_type: Optional[str] = None
    number_of_passengers: Optional[int] = Field(None, ge=1, le=50)
    number_of_big_luggage: Optional[int] = Field(None, ge=0, le=20)
    number_of_small_luggage: Optional[int] = Field(None, ge=0, le=20)
    list_priority: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class VehicleOut(CamelModel):
    id: int
    category_name: str
    category_details: Optional[str] = None
    vehicle_type: Optional[str] = None
    number_of_passengers: int
    number_of_big_luggage: int
    number_of_small_luggage: int
    list_priority: int
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
