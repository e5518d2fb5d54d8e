"""Fare quote endpoint with Redis caching"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from chauffeur.db.session import get_db
from chauffeur.models.vehicle import Vehicle
from chauffeur.models.pricing import Pricing
from chauffeur.models.airport_pricing import AirportPricing
from chauffeur.models.location import SpecialLocation
from chauffeur.schemas.pricing import AirportPricingConfig, JourneyRequest, PricingConfig
from chauffeur.schemas.quote import QuoteRequest, QuoteResponse
from chauffeur.services.pricing import calculate_total_price, resolve_airport_price
from chauffeur.services.locations import detect_journey_locations
from chauffeur.core.auth_utils import check_not_found
from chauffeur.core.enums import PricingStatus
from chauffeur.core.metrics import quotes_calculated, pricing_not_found
from chauffeur.core.rate_limit import check_rate_limit
from chauffeur.core.redis import QUOTE_CACHE, cache_version, get_cached, set_cached
from chauffeur.core.response_builders import build_quote_response
from chauffeur.core.config import settings
from chauffeur.utils.hashing import cache_key

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/quotes", tags=["quotes"])

NO_PRICING = "No pricing found for this vehicle"


async def _airport_quote(db: AsyncSession, req: QuoteRequest, vehicle: Vehicle) -> Optional[QuoteResponse]:
    if req.pickup is None and req.dropoff is None:
        return None

    res = await db.execute(select(SpecialLocation).where(SpecialLocation.is_active.is_(True)))
    found = detect_journey_locations(res.scalars().all(), req.pickup, req.dropoff)
    location = found.pricing_location
    if location is None:
        return None

    res = await db.execute(
        select(AirportPricing).where(
            AirportPricing.location_id == location.id,
            AirportPricing.vehicle_id == vehicle.id,
            AirportPricing.status == PricingStatus.ACTIVE,
        )
    )
    row = res.scalars().first()
    if row is None:
        logger.info(f"No airport pricing for vehicle {vehicle.id} at {location.name}, using standard pricing")
        return None

    config = AirportPricingConfig.model_validate(row)
    breakdown = resolve_airport_price(
        config,
        req.miles,
        is_pickup=found.pickup is not None,
        is_dropoff=found.dropoff is not None,
        extras=req.extras,
    )
    if not breakdown.configured:
        logger.warning(f"Airport pricing {row.id} has no distance tiers, using standard pricing")
        return None

    logger.info(f"Using airport pricing for vehicle {vehicle.id} at {location.name}")
    quotes_calculated.labels(booking_type=str(breakdown.booking_type), pricing_source="airport").inc()
    return build_quote_response(vehicle.id, breakdown, config.extras, location)


async def _standard_quote(db: AsyncSession, req: QuoteRequest, vehicle: Vehicle) -> QuoteResponse:
    res = await db.execute(
        select(Pricing).where(
            Pricing.vehicle_id == vehicle.id,
            Pricing.pricing_type == req.booking_type,
            Pricing.coverage_zone == req.coverage_zone,
            Pricing.status == PricingStatus.ACTIVE,
        )
    )
    row = res.scalars().first()
    if row is None:
        pricing_not_found.labels(booking_type=str(req.booking_type)).inc()
        raise HTTPException(status_code=404, detail=NO_PRICING)

    config = PricingConfig.model_validate(row)
    journey = JourneyRequest(
        booking_type=req.booking_type,
        distance_miles=req.miles,
        hours=req.hours,
        extras=req.extras,
    )
    breakdown = calculate_total_price(config, journey)
    if not breakdown.configured:
        pricing_not_found.labels(booking_type=str(req.booking_type)).inc()
        raise HTTPException(status_code=404, detail=NO_PRICING)

    quotes_calculated.labels(booking_type=str(breakdown.booking_type), pricing_source="standard").inc()
    return build_quote_response(vehicle.id, breakdown, config.extras)


@router.post("/calc", response_model=QuoteResponse)
async def calc_quote(req: QuoteRequest, request: Request, db: AsyncSession = Depends(get_db)):
    await check_rate_limit(request.client.host if request.client else "anonymous")

    version = await cache_version(QUOTE_CACHE)
    key = cache_key(f"{QUOTE_CACHE}:{version}", req.model_dump(mode="json"))
    cached = await get_cached(QUOTE_CACHE, key)
    if cached is not None:
        return QuoteResponse.model_validate(cached)

    res = await db.execute(select(Vehicle).where(Vehicle.id == req.vehicle_id, Vehicle.is_active.is_(True)))
    vehicle = res.scalars().first()
    check_not_found(vehicle, "Vehicle", req.vehicle_id)

    result = await _airport_quote(db, req, vehicle)
    if result is None:
        result = await _standard_quote(db, req, vehicle)

    await set_cached(key, result.model_dump(mode="json"), settings.PRICE_CACHE_TTL)
    return result
