from sqlalchemy import Column, String, Boolean, Enum, ForeignKey, JSON, UniqueConstraint, Index
from sqlalchemy.orm import relationship, backref
from chauffeur.models.base import BaseModel
from chauffeur.core.enums import BookingType, PricingStatus
from chauffeur.core.config import settings


class Pricing(BaseModel):
    """Standard rate table for one vehicle, pricing type and coverage zone."""
    __tablename__ = "pricing"
    __table_args__ = (
        UniqueConstraint("vehicle_id", "pricing_type", "coverage_zone", name="uq_pricing_vehicle_type_zone"),
        Index("ix_pricing_vehicle_status", "vehicle_id", "status"),
    )

    vehicle_id = Column(ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False)
    vehicle = relationship("Vehicle", backref=backref("pricing", passive_deletes=True))

    pricing_type = Column(Enum(BookingType), nullable=False)
    coverage_zone = Column(String(120), nullable=False, default=settings.DEFAULT_COVERAGE_ZONE)
    status = Column(Enum(PricingStatus), nullable=False, default=PricingStatus.ACTIVE)

    display_vat_inclusive = Column(Boolean, nullable=False, default=True)
    display_parking_inclusive = Column(Boolean, nullable=False, default=False)
    price_round_off = Column(Boolean, nullable=False, default=False)

    # {is_active, distance_tiers: [...], after_distance_threshold, after_distance_price_per_mile}
    point_to_point = Column(JSON, nullable=True)
    # {is_active, hourly_rate, minimum_hours, additional_hour_charge, miles_included, excess_mileage_charge}
    hourly = Column(JSON, nullable=True)
    extras = Column(JSON, nullable=True)
