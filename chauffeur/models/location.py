from sqlalchemy import Column, String, Float, Boolean, Enum
from chauffeur.models.base import BaseModel
from chauffeur.core.enums import LocationType
from chauffeur.core.config import settings

DEFAULT_RADIUS_KM = 5.0


class SpecialLocation(BaseModel):
    """Airport or venue with its own rate table, detected by radius around its centre."""
    __tablename__ = "special_locations"

    name = Column(String(160), nullable=False)
    address = Column(String(255), nullable=False)
    place_id = Column(String(255), unique=True, nullable=True)
    iata_code = Column(String(3), nullable=True, index=True)
    icao_code = Column(String(4), nullable=True)

    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)

    zone = Column(String(120), nullable=False, default=settings.DEFAULT_COVERAGE_ZONE)
    location_type = Column(Enum(LocationType), nullable=False, default=LocationType.AIRPORT)
    radius_km = Column(Float, nullable=False, default=DEFAULT_RADIUS_KM)
    is_active = Column(Boolean, nullable=False, default=True)
