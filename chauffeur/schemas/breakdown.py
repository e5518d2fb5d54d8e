from decimal import Decimal
from typing import Dict, Optional, Union
from pydantic import computed_field

from chauffeur.core.enums import BookingType
from chauffeur.schemas.common import CamelModel, Money, ZERO


class DistancePrice(CamelModel):
    configured: bool = True
    base_charge: Money = ZERO
    distance_charge: Money = ZERO
    total: Money = ZERO
    narrative: str = ""


class HourlyPrice(CamelModel):
    configured: bool = True
    base_charge: Money = ZERO
    extra_hour_charge: Money = ZERO
    excess_mileage_charge: Money = ZERO
    total: Money = ZERO
    minimum_hours: Money = ZERO
    hourly_rate: Money = ZERO
    miles_included: Money = ZERO
    narrative: str = ""


class ExtrasPrice(CamelModel):
    extra_stop_charge: Money = ZERO
    child_seat_charge: Money = ZERO
    congestion_charge: Money = ZERO
    total: Money = ZERO
    narrative: str = ""

    @computed_field
    @property
    def per_item(self) -> Dict[str, Money]:
        return {
            "extra_stops": self.extra_stop_charge,
            "child_seats": self.child_seat_charge,
            "congestion": self.congestion_charge,
        }


class FinalizedPrice(CamelModel):
    subtotal: Money = ZERO
    vat_rate: Money = ZERO
    vat_inclusive: bool = False
    vat_amount: Money = ZERO
    grand_total: Money = ZERO
    rounded_off: bool = False


class PriceBreakdown(CamelModel):
    """Complete quote for one journey; every field is derived from config and request."""
    booking_type: BookingType = BookingType.P2P
    configured: bool = True
    coverage_zone: Optional[str] = None
    distance_miles: Money = ZERO
    hours: Optional[Money] = None

    base_charge: Money = ZERO
    distance_charge: Money = ZERO
    extra_hour_charge: Money = ZERO
    excess_mileage_charge: Money = ZERO
    airport_charges: Money = ZERO
    congestion_charge: Money = ZERO
    extras_total: Money = ZERO

    subtotal: Money = ZERO
    vat_rate: Money = ZERO
    vat_amount: Money = ZERO
    vat_inclusive: bool = False
    grand_total: Money = ZERO
    rounded_off: bool = False
    narrative: str = ""

    journey: Optional[Union[DistancePrice, HourlyPrice]] = None
    extras: Optional[ExtrasPrice] = None

    @property
    def journey_total(self) -> Decimal:
        return (
            self.base_charge
            + self.distance_charge
            + self.extra_hour_charge
            + self.excess_mileage_charge
        )


class EstimateOption(CamelModel):
    available: bool = False
    total: Optional[Money] = None
    display: Optional[str] = None
    minimum_hours: Optional[Money] = None
    hourly_rate: Optional[Money] = None


class QuickEstimate(CamelModel):
    p2p: EstimateOption = EstimateOption()
    hourly: EstimateOption = EstimateOption()
