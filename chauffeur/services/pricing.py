"""Fare pricing engine.

Pure, synchronous functions over read-only pricing configuration. Nothing here
performs I/O or keeps state, so concurrent quotes need no coordination.

Arithmetic is done in full-precision ``Decimal``; amounts are rounded only in
``finalize`` and when formatted for the narrative. Missing configuration is
reported as a zero-priced result with a narrative, never as an exception.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Sequence, Union

from chauffeur.core.enums import BookingType, TierKind
from chauffeur.schemas.common import ZERO, to_decimal
from chauffeur.schemas.pricing import (
    AirportPricingConfig,
    DistanceTier,
    ExtrasConfig,
    HourlyConfig,
    JourneyExtras,
    JourneyRequest,
    PricingConfig,
)
from chauffeur.schemas.breakdown import (
    DistancePrice,
    EstimateOption,
    ExtrasPrice,
    FinalizedPrice,
    HourlyPrice,
    PriceBreakdown,
    QuickEstimate,
)

# UK VAT, applied only when a rate table is VAT-inclusive.
VAT_RATE = Decimal("0.20")
MILES_PER_KM = Decimal("0.621371")

PENNY = Decimal("0.01")
POUND = Decimal("1")

P2P_NOT_CONFIGURED = "P2P pricing not configured"
HOURLY_NOT_CONFIGURED = "Hourly pricing not configured"
AIRPORT_NOT_CONFIGURED = "Airport pricing not configured"
NO_EXTRAS = "No additional charges"


def km_to_miles(km) -> Decimal:
    return to_decimal(km) * MILES_PER_KM


def miles_to_km(miles) -> Decimal:
    return to_decimal(miles) / MILES_PER_KM


def round_money(amount, whole: bool = False) -> Decimal:
    """Half-up rounding to pence, or to whole pounds when ``whole`` is set."""
    return to_decimal(amount).quantize(POUND if whole else PENNY, rounding=ROUND_HALF_UP)


def format_money(amount) -> str:
    return f"£{round_money(amount):.2f}"


def _number(value) -> str:
    # 8 -> "8", 8.50 -> "8.5"
    text = format(to_decimal(value).normalize(), "f")
    return text


def _miles(value) -> str:
    return f"{to_decimal(value):.1f}"


def _non_negative(value) -> Decimal:
    amount = to_decimal(value)
    return amount if amount > 0 else ZERO


def _coerce(model, value):
    if value is None:
        return model()
    if isinstance(value, model):
        return value
    return model.model_validate(value)


def _sorted_tiers(tiers: Optional[Iterable[Union[DistanceTier, dict]]]) -> list:
    coerced = [
        tier if isinstance(tier, DistanceTier) else DistanceTier.model_validate(tier)
        for tier in (tiers or [])
    ]
    return sorted(coerced, key=lambda tier: tier.from_distance)


def resolve_distance_price(
    tiers: Sequence[Union[DistanceTier, dict]],
    after_threshold,
    after_rate,
    distance_miles,
) -> DistancePrice:
    """Price a journey against tiered distance bands.

    The lowest band is the base charge: a ``fixed`` band is a minimum fare for
    any trip up to its ``to_distance``. Miles beyond it are consumed band by
    band; whatever is left after the last band is charged at ``after_rate``.
    """
    sorted_tiers = _sorted_tiers(tiers)
    if not sorted_tiers:
        return DistancePrice(configured=False, narrative=P2P_NOT_CONFIGURED)

    distance = _non_negative(distance_miles)
    first = sorted_tiers[0]
    parts = []

    if first.kind == TierKind.FIXED:
        base_charge = first.price
        parts.append(f"Base: {format_money(base_charge)} (first {_number(first.to_distance)} miles)")
    else:
        miles_in_tier = min(distance, first.to_distance)
        base_charge = miles_in_tier * first.price
        parts.append(f"First {_number(miles_in_tier)} miles: {format_money(base_charge)}")

    if distance <= first.to_distance:
        return DistancePrice(
            base_charge=base_charge,
            total=base_charge,
            narrative=" + ".join(parts),
        )

    remaining = distance - first.to_distance
    distance_charge = ZERO

    for tier in sorted_tiers[1:]:
        if remaining <= 0:
            break
        tier_range = max(tier.to_distance - tier.from_distance, ZERO)
        miles_in_tier = min(remaining, tier_range)
        band = f"{_number(tier.from_distance)}-{_number(tier.to_distance)} miles"

        if tier.kind == TierKind.PER_MILE:
            charge = miles_in_tier * tier.price
            parts.append(
                f"{band}: {_miles(miles_in_tier)} × {format_money(tier.price)} = {format_money(charge)}"
            )
        else:
            charge = tier.price
            parts.append(f"{band}: {format_money(charge)}")

        distance_charge += charge
        remaining -= miles_in_tier

    rate = _non_negative(after_rate)
    if remaining > 0 and rate > 0:
        charge = remaining * rate
        distance_charge += charge
        parts.append(
            f"After {_number(after_threshold)} miles: {_miles(remaining)} × {format_money(rate)} = {format_money(charge)}"
        )

    return DistancePrice(
        base_charge=base_charge,
        distance_charge=distance_charge,
        total=base_charge + distance_charge,
        narrative=" + ".join(parts),
    )


def resolve_hourly_price(
    config: Optional[Union[HourlyConfig, dict]],
    hours_booked,
    distance_miles=0,
) -> HourlyPrice:
    """Price an "as directed" booking.

    The minimum hours are always charged; longer bookings pay the additional
    hour rate and mileage beyond the allowance pays the excess mileage rate.
    """
    if config is None:
        return HourlyPrice(configured=False, narrative=HOURLY_NOT_CONFIGURED)
    config = _coerce(HourlyConfig, config)
    if not config.is_active:
        return HourlyPrice(configured=False, narrative=HOURLY_NOT_CONFIGURED)

    hours = _non_negative(hours_booked)
    distance = _non_negative(distance_miles)
    rate = config.hourly_rate
    minimum_hours = config.minimum_hours

    base_charge = minimum_hours * rate
    parts = [
        f"Base: {_number(minimum_hours)} hrs × {format_money(rate)}/hr = {format_money(base_charge)}"
    ]

    extra_hour_charge = ZERO
    if hours > minimum_hours:
        extra_hours = hours - minimum_hours
        extra_hour_charge = extra_hours * config.additional_hour_charge
        parts.append(
            f"Extra: {_number(extra_hours)} hrs × {format_money(config.additional_hour_charge)}/hr"
            f" = {format_money(extra_hour_charge)}"
        )

    excess_mileage_charge = ZERO
    if distance > config.miles_included and config.excess_mileage_charge > 0:
        excess_miles = distance - config.miles_included
        excess_mileage_charge = excess_miles * config.excess_mileage_charge
        parts.append(
            f"Excess miles: {_miles(excess_miles)} × {format_money(config.excess_mileage_charge)}/mile"
            f" = {format_money(excess_mileage_charge)}"
        )

    return HourlyPrice(
        base_charge=base_charge,
        extra_hour_charge=extra_hour_charge,
        excess_mileage_charge=excess_mileage_charge,
        total=base_charge + extra_hour_charge + excess_mileage_charge,
        minimum_hours=minimum_hours,
        hourly_rate=rate,
        miles_included=config.miles_included,
        narrative=" + ".join(parts),
    )


def resolve_extras(
    extras_config: Optional[Union[ExtrasConfig, dict]],
    requested: Optional[Union[JourneyExtras, dict]] = None,
) -> ExtrasPrice:
    config = _coerce(ExtrasConfig, extras_config)
    requested = _coerce(JourneyExtras, requested)

    stops = _non_negative(requested.extra_stops)
    seats = _non_negative(requested.child_seats)

    extra_stop_charge = stops * config.extra_stop_price
    child_seat_charge = seats * config.child_seat_price
    congestion_charge = config.congestion_charge if requested.include_congestion else ZERO

    parts = []
    if extra_stop_charge > 0:
        parts.append(f"{_number(stops)} extra stop(s): {format_money(extra_stop_charge)}")
    if child_seat_charge > 0:
        parts.append(f"{_number(seats)} child seat(s): {format_money(child_seat_charge)}")
    if congestion_charge > 0:
        parts.append(f"Congestion charge: {format_money(congestion_charge)}")

    return ExtrasPrice(
        extra_stop_charge=extra_stop_charge,
        child_seat_charge=child_seat_charge,
        congestion_charge=congestion_charge,
        total=extra_stop_charge + child_seat_charge + congestion_charge,
        narrative=" + ".join(parts) if parts else NO_EXTRAS,
    )


def finalize(subtotal, vat_inclusive: bool, round_off: bool) -> FinalizedPrice:
    """Add VAT when the rate table is VAT-inclusive and round the payable amount."""
    # VAT is charged on the pence amount so subtotal + VAT always equals the total
    subtotal = round_money(subtotal)
    vat_amount = round_money(subtotal * VAT_RATE) if vat_inclusive else ZERO
    grand_total = round_money(subtotal + vat_amount, whole=round_off)

    return FinalizedPrice(
        subtotal=subtotal,
        vat_rate=VAT_RATE * 100,
        vat_inclusive=bool(vat_inclusive),
        vat_amount=vat_amount,
        grand_total=grand_total,
        rounded_off=bool(round_off),
    )


def calculate_total_price(
    pricing_config: Union[PricingConfig, dict],
    journey: Union[JourneyRequest, dict],
) -> PriceBreakdown:
    """Quote a p2p or hourly journey against a standard rate table."""
    config = _coerce(PricingConfig, pricing_config)
    journey = _coerce(JourneyRequest, journey)
    distance = _non_negative(journey.distance_miles)

    if journey.booking_type == BookingType.HOURLY:
        booking_type = BookingType.HOURLY
        hours = _non_negative(journey.hours)
        journey_price = resolve_hourly_price(config.hourly, hours, distance)
    else:
        booking_type = BookingType.P2P
        hours = None
        p2p = config.point_to_point
        if p2p is None or not p2p.is_active:
            journey_price = DistancePrice(configured=False, narrative=P2P_NOT_CONFIGURED)
        else:
            journey_price = resolve_distance_price(
                p2p.distance_tiers,
                p2p.after_distance_threshold,
                p2p.after_distance_price_per_mile,
                distance,
            )

    extras_price = resolve_extras(config.extras, journey.extras)
    subtotal = journey_price.total + extras_price.total
    final = finalize(subtotal, config.display_vat_inclusive, config.price_round_off)

    narrative = journey_price.narrative
    if extras_price.total > 0:
        narrative = f"{narrative} + {extras_price.narrative}"

    return PriceBreakdown(
        booking_type=booking_type,
        configured=journey_price.configured,
        coverage_zone=config.coverage_zone,
        distance_miles=distance,
        hours=hours,
        base_charge=journey_price.base_charge,
        distance_charge=getattr(journey_price, "distance_charge", ZERO),
        extra_hour_charge=getattr(journey_price, "extra_hour_charge", ZERO),
        excess_mileage_charge=getattr(journey_price, "excess_mileage_charge", ZERO),
        congestion_charge=extras_price.congestion_charge,
        extras_total=extras_price.total,
        subtotal=final.subtotal,
        vat_rate=final.vat_rate,
        vat_amount=final.vat_amount,
        vat_inclusive=final.vat_inclusive,
        grand_total=final.grand_total,
        rounded_off=final.rounded_off,
        narrative=narrative,
        journey=journey_price,
        extras=extras_price,
    )


def resolve_airport_price(
    airport_config: Union[AirportPricingConfig, dict],
    distance_miles,
    is_pickup: bool = False,
    is_dropoff: bool = False,
    extras: Optional[Union[JourneyExtras, dict]] = None,
) -> PriceBreakdown:
    """Quote a journey to or from a special location.

    Uses the location's own distance bands, then adds the pickup and/or
    dropoff surcharge and the location's congestion charge. Requested extra
    stops and child seats are priced only when ``extras`` is given.
    """
    config = _coerce(AirportPricingConfig, airport_config)
    distance = _non_negative(distance_miles)

    if not config.distance_tiers:
        return PriceBreakdown(
            booking_type=BookingType.AIRPORT,
            configured=False,
            distance_miles=distance,
            vat_inclusive=config.display_vat_inclusive,
            rounded_off=config.price_round_off,
            narrative=AIRPORT_NOT_CONFIGURED,
        )

    journey_price = resolve_distance_price(
        config.distance_tiers,
        config.after_distance_threshold,
        config.after_distance_price_per_mile,
        distance,
    )
    parts = [journey_price.narrative]
    charges = config.extras

    airport_charges = ZERO
    if is_pickup and charges.airport_pickup_charge > 0:
        airport_charges += charges.airport_pickup_charge
        parts.append(f"Airport pickup charge: {format_money(charges.airport_pickup_charge)}")
    if is_dropoff and charges.airport_dropoff_charge > 0:
        airport_charges += charges.airport_dropoff_charge
        parts.append(f"Airport dropoff charge: {format_money(charges.airport_dropoff_charge)}")

    congestion_charge = _non_negative(charges.congestion_charge)
    if congestion_charge > 0:
        parts.append(f"Congestion charge: {format_money(congestion_charge)}")

    extras_price = None
    extras_total = ZERO
    if extras is not None:
        # congestion is already charged unconditionally above
        requested = _coerce(JourneyExtras, extras).model_copy(update={"include_congestion": False})
        extras_price = resolve_extras(charges, requested)
        extras_total = extras_price.total
        if extras_total > 0:
            parts.append(extras_price.narrative)

    subtotal = journey_price.total + airport_charges + congestion_charge + extras_total
    final = finalize(subtotal, config.display_vat_inclusive, config.price_round_off)

    return PriceBreakdown(
        booking_type=BookingType.AIRPORT,
        distance_miles=distance,
        base_charge=journey_price.base_charge,
        distance_charge=journey_price.distance_charge,
        airport_charges=airport_charges,
        congestion_charge=congestion_charge,
        extras_total=extras_total,
        subtotal=final.subtotal,
        vat_rate=final.vat_rate,
        vat_amount=final.vat_amount,
        vat_inclusive=final.vat_inclusive,
        grand_total=final.grand_total,
        rounded_off=final.rounded_off,
        narrative=" + ".join(parts),
        journey=journey_price,
        extras=extras_price,
    )


def quick_estimate(
    configs: Iterable[Union[PricingConfig, dict]],
    distance_miles,
    hours=4,
) -> QuickEstimate:
    """Headline p2p and hourly prices for a vehicle listing, before extras and VAT."""
    p2p_option = EstimateOption()
    hourly_option = EstimateOption()

    for raw in configs:
        config = _coerce(PricingConfig, raw)
        p2p = config.point_to_point
        if not p2p_option.available and p2p is not None and p2p.is_active:
            price = resolve_distance_price(
                p2p.distance_tiers,
                p2p.after_distance_threshold,
                p2p.after_distance_price_per_mile,
                distance_miles,
            )
            if price.configured:
                p2p_option = EstimateOption(
                    available=True,
                    total=round_money(price.total),
                    display=format_money(price.total),
                )

        if not hourly_option.available and config.hourly is not None and config.hourly.is_active:
            price = resolve_hourly_price(config.hourly, hours, distance_miles)
            hourly_option = EstimateOption(
                available=True,
                total=round_money(price.total),
                minimum_hours=price.minimum_hours,
                hourly_rate=price.hourly_rate,
                display=f"From {format_money(price.total)} ({_number(price.minimum_hours)}hr min)",
            )

    return QuickEstimate(p2p=p2p_option, hourly=hourly_option)
