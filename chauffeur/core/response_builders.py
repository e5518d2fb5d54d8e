from typing import Optional
from chauffeur.core.enums import BookingType
from chauffeur.models.vehicle import Vehicle
from chauffeur.models.pricing import Pricing
from chauffeur.models.airport_pricing import AirportPricing
from chauffeur.models.location import SpecialLocation
from chauffeur.schemas.breakdown import HourlyPrice, PriceBreakdown
from chauffeur.schemas.location import LocationOut
from chauffeur.schemas.pricing import AirportPricingOut, ExtrasConfig, PricingOut
from chauffeur.schemas.quote import AdditionalCharges, QuoteResponse
from chauffeur.schemas.vehicle import VehicleOut
from chauffeur.services.pricing import round_money


def _money(value) -> float:
    return float(round_money(value))


def _optional(value) -> Optional[float]:
    return float(value) if value is not None else None


def build_vehicle_response(vehicle: Vehicle) -> VehicleOut:
    return VehicleOut.model_validate(vehicle)


def build_pricing_response(pricing: Pricing) -> PricingOut:
    return PricingOut.model_validate(pricing)


def build_airport_pricing_response(pricing: AirportPricing) -> AirportPricingOut:
    return AirportPricingOut.model_validate(pricing)


def build_location_response(location: SpecialLocation) -> LocationOut:
    return LocationOut.model_validate(location)


def build_quote_response(
    vehicle_id: int,
    breakdown: PriceBreakdown,
    extras: ExtrasConfig,
    location: Optional[SpecialLocation] = None,
) -> QuoteResponse:
    is_airport = breakdown.booking_type == BookingType.AIRPORT
    hourly = breakdown.journey if isinstance(breakdown.journey, HourlyPrice) else None

    return QuoteResponse(
        vehicle_id=vehicle_id,
        booking_type=breakdown.booking_type,
        is_airport_pricing=is_airport,
        location_name=location.name if location is not None else None,
        coverage_zone=breakdown.coverage_zone,
        distance_miles=_money(breakdown.distance_miles),
        hours=_optional(breakdown.hours),
        base_price=_money(breakdown.journey_total),
        congestion_charge=_money(breakdown.congestion_charge),
        airport_charges=_money(breakdown.airport_charges),
        extras_total=_money(breakdown.extras_total),
        tax=_money(breakdown.vat_amount),
        total_price=_money(breakdown.grand_total),
        breakdown=breakdown.narrative,
        vat_inclusive=breakdown.vat_inclusive,
        vat_rate=float(breakdown.vat_rate),
        rounded_off=breakdown.rounded_off,
        minimum_hours=_optional(hourly.minimum_hours) if hourly else None,
        hourly_rate=_optional(hourly.hourly_rate) if hourly else None,
        miles_included=_optional(hourly.miles_included) if hourly else None,
        additional_charges=AdditionalCharges(
            extra_stop_price=float(extras.extra_stop_price),
            child_seat_price=float(extras.child_seat_price),
            congestion_charge=_money(breakdown.congestion_charge) if is_airport else float(extras.congestion_charge),
            airport_pickup_charge=float(extras.airport_pickup_charge) if is_airport else None,
            airport_dropoff_charge=float(extras.airport_dropoff_charge) if is_airport else None,
        ),
    )


def build_vehicle_response_list(vehicles: list) -> list:
    return [build_vehicle_response(vehicle) for vehicle in vehicles]


def build_pricing_response_list(rows: list) -> list:
    return [build_pricing_response(row) for row in rows]


def build_airport_pricing_response_list(rows: list) -> list:
    return [build_airport_pricing_response(row) for row in rows]


def build_location_response_list(locations: list) -> list:
    return [build_location_response(location) for location in locations]
