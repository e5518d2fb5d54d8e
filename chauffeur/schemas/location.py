from pydantic import Field, field_validator
from typing import Optional
from datetime import datetime

from chauffeur.core.config import settings
from chauffeur.core.enums import LocationType
from chauffeur.schemas.common import CamelModel


def _upper(v):
    return v.strip().upper() if v else v


class LocationCreate(CamelModel):
    name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    place_id: Optional[str] = None
    iata_code: Optional[str] = Field(None, max_length=3)
    icao_code: Optional[str] = Field(None, max_length=4)
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)
    zone: str = settings.DEFAULT_COVERAGE_ZONE
    location_type: LocationType = LocationType.AIRPORT
    radius_km: float = Field(5.0, ge=1, le=50)
    is_active: bool = True

    codes_upper = field_validator("iata_code", "icao_code", mode="before")(_upper)


class LocationUpdate(CamelModel):
    name: Optional[str] = None
    address: Optional[str] = None
    place_id: Optional[str] = None
    iata_code: Optional[str] = Field(None, max_length=3)
    icao_code: Optional[str] = Field(None, max_length=4)
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)
    zone: Optional[str] = None
    location_type: Optional[LocationType] = None
    radius_km: Optional[float] = Field(None, ge=1, le=50)
    is_active: Optional[bool] = None

    codes_upper = field_validator("iata_code", "icao_code", mode="before")(_upper)


class LocationOut(CamelModel):
    id: int
    name: str
    address: str
    place_id: Optional[str] = None
    iata_code: Optional[str] = None
    icao_code: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    zone: str
    location_type: LocationType
    radius_km: float
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
