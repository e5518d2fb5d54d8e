from sqlalchemy import Column, Float, Boolean, Enum, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship, backref
from chauffeur.models.base import BaseModel
from chauffeur.core.enums import PricingStatus


class AirportPricing(BaseModel):
    """Rate table for one special location and vehicle."""
    __tablename__ = "airport_pricing"
    __table_args__ = (
        UniqueConstraint("location_id", "vehicle_id", name="uq_airport_pricing_location_vehicle"),
    )

    location_id = Column(ForeignKey("special_locations.id", ondelete="CASCADE"), nullable=False)
    vehicle_id = Column(ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False)

    location = relationship("SpecialLocation", backref=backref("pricing", passive_deletes=True))
    vehicle = relationship("Vehicle", backref=backref("airport_pricing", passive_deletes=True))

    distance_tiers = Column(JSON, nullable=False, default=list)
    after_distance_threshold = Column(Float, nullable=False, default=50.0)
    after_distance_price_per_mile = Column(Float, nullable=False, default=2.5)
    extras = Column(JSON, nullable=True)

    display_parking_inclusive = Column(Boolean, nullable=False, default=True)
    display_vat_inclusive = Column(Boolean, nullable=False, default=True)
    price_round_off = Column(Boolean, nullable=False, default=False)

    status = Column(Enum(PricingStatus), nullable=False, default=PricingStatus.ACTIVE)
