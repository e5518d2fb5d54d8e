from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import AliasChoices, Field, field_validator

from chauffeur.core.config import settings
from chauffeur.core.enums import BookingType, PricingStatus, TierKind
from chauffeur.schemas.common import CamelModel, Money


class DistanceTier(CamelModel):
    from_distance: Money = Decimal("0")
    to_distance: Money = Decimal("0")
    price: Money = Decimal("0")
    kind: TierKind = Field(TierKind.FIXED, validation_alias=AliasChoices("kind", "type"))

    @field_validator("kind", mode="before")
    @classmethod
    def unknown_kind_is_fixed(cls, v):
        try:
            return TierKind(v)
        except ValueError:
            return TierKind.FIXED


class PointToPointConfig(CamelModel):
    is_active: bool = True
    distance_tiers: List[DistanceTier] = Field(default_factory=list)
    after_distance_threshold: Money = Decimal("40")
    after_distance_price_per_mile: Money = Decimal("2.5")

    @field_validator("distance_tiers", mode="before")
    @classmethod
    def missing_tiers(cls, v):
        return v or []


class HourlyConfig(CamelModel):
    is_active: bool = True
    hourly_rate: Money = Decimal("0")
    minimum_hours: Money = Decimal("4")
    additional_hour_charge: Money = Decimal("0")
    miles_included: Money = Decimal("0")
    excess_mileage_charge: Money = Decimal("0")


class ExtrasConfig(CamelModel):
    extra_stop_price: Money = Decimal("0")
    child_seat_price: Money = Decimal("0")
    congestion_charge: Money = Decimal("0")
    airport_pickup_charge: Money = Decimal("0")
    airport_dropoff_charge: Money = Decimal("0")


def _empty_extras(v):
    return v if v is not None else {}


class PricingConfig(CamelModel):
    """Engine view of a standard rate table (p2p or hourly)."""
    pricing_type: BookingType = BookingType.P2P
    coverage_zone: str = settings.DEFAULT_COVERAGE_ZONE
    display_vat_inclusive: bool = True
    price_round_off: bool = False
    point_to_point: Optional[PointToPointConfig] = None
    hourly: Optional[HourlyConfig] = None
    extras: ExtrasConfig = Field(default_factory=ExtrasConfig)

    default_extras = field_validator("extras", mode="before")(_empty_extras)


class AirportPricingConfig(CamelModel):
    """Engine view of a special-location rate table."""
    distance_tiers: List[DistanceTier] = Field(default_factory=list)
    after_distance_threshold: Money = Decimal("50")
    after_distance_price_per_mile: Money = Decimal("2.5")
    extras: ExtrasConfig = Field(default_factory=ExtrasConfig)
    display_vat_inclusive: bool = True
    price_round_off: bool = False

    default_extras = field_validator("extras", mode="before")(_empty_extras)

    @field_validator("distance_tiers", mode="before")
    @classmethod
    def missing_tiers(cls, v):
        return v or []


class JourneyExtras(CamelModel):
    extra_stops: int = Field(0, ge=0)
    child_seats: int = Field(0, ge=0)
    include_congestion: bool = False


class JourneyRequest(CamelModel):
    booking_type: BookingType = BookingType.P2P
    distance_miles: Money = Decimal("0")
    hours: Money = Decimal("0")
    extras: JourneyExtras = Field(default_factory=JourneyExtras)
    is_pickup: bool = False
    is_dropoff: bool = False


def check_tiers(tiers: List[DistanceTier]) -> List[DistanceTier]:
    """Reject tiers that are empty-ranged, negatively priced or overlapping."""
    ordered = sorted(tiers, key=lambda t: t.from_distance)
    previous = None
    for tier in ordered:
        if tier.from_distance < 0 or tier.to_distance <= tier.from_distance:
            raise ValueError(
                f"Tier {tier.from_distance}-{tier.to_distance} must end after it starts"
            )
        if tier.price < 0:
            raise ValueError("Tier price cannot be negative")
        if previous is not None and tier.from_distance < previous.to_distance:
            raise ValueError(
                f"Tier {tier.from_distance}-{tier.to_distance} overlaps "
                f"{previous.from_distance}-{previous.to_distance}"
            )
        previous = tier
    return ordered


def _standard_type_only(v):
    if v == BookingType.AIRPORT:
        raise ValueError("Airport rates are managed through /airport-pricing")
    return v


def _valid_point_to_point(v):
    if v is not None:
        v.distance_tiers = check_tiers(v.distance_tiers)
    return v


class PricingCreate(CamelModel):
    vehicle_id: int
    pricing_type: BookingType
    coverage_zone: str = settings.DEFAULT_COVERAGE_ZONE
    status: PricingStatus = PricingStatus.ACTIVE
    display_vat_inclusive: bool = True
    display_parking_inclusive: bool = False
    price_round_off: bool = False
    point_to_point: Optional[PointToPointConfig] = None
    hourly: Optional[HourlyConfig] = None
    extras: ExtrasConfig = Field(default_factory=ExtrasConfig)

    standard_type = field_validator("pricing_type")(_standard_type_only)
    valid_tiers = field_validator("point_to_point")(_valid_point_to_point)


class PricingUpdate(CamelModel):
    pricing_type: Optional[BookingType] = None
    coverage_zone: Optional[str] = Field(None, min_length=1)
    status: Optional[PricingStatus] = None
    display_vat_inclusive: Optional[bool] = None
    display_parking_inclusive: Optional[bool] = None
    price_round_off: Optional[bool] = None
    point_to_point: Optional[PointToPointConfig] = None
    hourly: Optional[HourlyConfig] = None
    extras: Optional[ExtrasConfig] = None

    standard_type = field_validator("pricing_type")(_standard_type_only)
    valid_tiers = field_validator("point_to_point")(_valid_point_to_point)


class PricingOut(CamelModel):
    id: int
    vehicle_id: int
    pricing_type: BookingType
    coverage_zone: str
    status: PricingStatus
    display_vat_inclusive: bool
    display_parking_inclusive: bool
    price_round_off: bool
    point_to_point: Optional[PointToPointConfig] = None
    hourly: Optional[HourlyConfig] = None
    extras: ExtrasConfig
    created_at: datetime
    updated_at: Optional[datetime] = None

    default_extras = field_validator("extras", mode="before")(_empty_extras)


def _airport_extras() -> ExtrasConfig:
    return ExtrasConfig(extra_stop_price=Decimal("15"))


class AirportPricingCreate(CamelModel):
    location_id: int
    vehicle_id: int
    distance_tiers: List[DistanceTier] = Field(default_factory=list)
    after_distance_threshold: Money = Decimal("50")
    after_distance_price_per_mile: Money = Decimal("2.5")
    extras: ExtrasConfig = Field(default_factory=_airport_extras)
    display_parking_inclusive: bool = True
    display_vat_inclusive: bool = True
    price_round_off: bool = False
    status: PricingStatus = PricingStatus.ACTIVE

    @field_validator("distance_tiers")
    @classmethod
    def valid_tiers(cls, v):
        return check_tiers(v)


class AirportPricingUpdate(CamelModel):
    distance_tiers: Optional[List[DistanceTier]] = None
    after_distance_threshold: Optional[Money] = None
    after_distance_price_per_mile: Optional[Money] = None
    extras: Optional[ExtrasConfig] = None
    display_parking_inclusive: Optional[bool] = None
    display_vat_inclusive: Optional[bool] = None
    price_round_off: Optional[bool] = None
    status: Optional[PricingStatus] = None

    @field_validator("distance_tiers")
    @classmethod
    def valid_tiers(cls, v):
        return check_tiers(v) if v is not None else v


class AirportPricingOut(CamelModel):
    id: int
    location_id: int
    vehicle_id: int
    distance_tiers: List[DistanceTier]
    after_distance_threshold: Money
    after_distance_price_per_mile: Money
    extras: ExtrasConfig
    display_parking_inclusive: bool
    display_vat_inclusive: bool
    price_round_off: bool
    status: PricingStatus
    created_at: datetime
    updated_at: Optional[datetime] = None

    default_extras = field_validator("extras", mode="before")(_empty_extras)
