from decimal import Decimal
from typing import Optional
from pydantic import Field, model_validator

from chauffeur.core.config import settings
from chauffeur.core.enums import BookingType
from chauffeur.schemas.common import CamelModel
from chauffeur.schemas.pricing import JourneyExtras
from chauffeur.schemas.breakdown import EstimateOption
from chauffeur.services.pricing import km_to_miles


class Coordinates(CamelModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class QuoteRequest(CamelModel):
    vehicle_id: int
    booking_type: BookingType = BookingType.P2P
    distance_miles: Optional[float] = Field(None, ge=0)
    distance_km: Optional[float] = Field(None, ge=0)
    hours: float = Field(0, ge=0)
    extras: JourneyExtras = Field(default_factory=JourneyExtras)
    coverage_zone: str = settings.DEFAULT_COVERAGE_ZONE
    pickup: Optional[Coordinates] = None
    dropoff: Optional[Coordinates] = None

    @model_validator(mode="after")
    def check_journey(self):
        if self.distance_miles is None and self.distance_km is None:
            raise ValueError("Either distanceMiles or distanceKm is required")
        if self.booking_type == BookingType.AIRPORT:
            raise ValueError("bookingType must be p2p or hourly; airport rates follow pickup/dropoff")
        return self

    @property
    def miles(self) -> Decimal:
        if self.distance_miles is not None:
            return Decimal(str(self.distance_miles))
        return km_to_miles(self.distance_km)


class AdditionalCharges(CamelModel):
    extra_stop_price: float = 0.0
    child_seat_price: float = 0.0
    congestion_charge: float = 0.0
    airport_pickup_charge: Optional[float] = None
    airport_dropoff_charge: Optional[float] = None


class QuoteResponse(CamelModel):
    vehicle_id: int
    booking_type: BookingType
    is_airport_pricing: bool = False
    location_name: Optional[str] = None
    coverage_zone: Optional[str] = None
    distance_miles: float
    hours: Optional[float] = None

    base_price: float
    congestion_charge: float = 0.0
    airport_charges: float = 0.0
    extras_total: float = 0.0
    tax: float
    total_price: float
    breakdown: str
    vat_inclusive: bool
    vat_rate: float
    rounded_off: bool = False

    minimum_hours: Optional[float] = None
    hourly_rate: Optional[float] = None
    miles_included: Optional[float] = None

    additional_charges: AdditionalCharges


class EstimateResponse(CamelModel):
    vehicle_id: int
    coverage_zone: str
    distance_miles: float
    hours: float
    p2p: EstimateOption
    hourly: EstimateOption
