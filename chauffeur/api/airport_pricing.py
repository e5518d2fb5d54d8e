from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import Optional, List

from chauffeur.db.session import get_db
from chauffeur.models.airport_pricing import AirportPricing
from chauffeur.models.location import SpecialLocation
from chauffeur.models.vehicle import Vehicle
from chauffeur.schemas.pricing import AirportPricingCreate, AirportPricingUpdate, AirportPricingOut
from chauffeur.core.security import require_admin
from chauffeur.core.audit_log import log_audit
from chauffeur.core.redis import QUOTE_CACHE, invalidate_cache
from chauffeur.core.auth_utils import check_not_found, check_duplicate
from chauffeur.core.enums import AuditAction, PricingStatus
from chauffeur.core.response_builders import (
    build_airport_pricing_response,
    build_airport_pricing_response_list,
)

router = APIRouter(prefix="/airport-pricing", tags=["airport-pricing"])


@router.post("/", response_model=AirportPricingOut, status_code=201)
async def create_airport_pricing(
    payload: AirportPricingCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    res = await db.execute(select(SpecialLocation).where(SpecialLocation.id == payload.location_id))
    location = res.scalars().first()
    check_not_found(location, "Location", payload.location_id)

    res = await db.execute(select(Vehicle).where(Vehicle.id == payload.vehicle_id))
    check_not_found(res.scalars().first(), "Vehicle", payload.vehicle_id)

    res = await db.execute(
        select(AirportPricing).where(
            AirportPricing.location_id == payload.location_id,
            AirportPricing.vehicle_id == payload.vehicle_id,
        )
    )
    check_duplicate(
        res.scalars().first(),
        f"Airport pricing already exists for vehicle {payload.vehicle_id} at {location.name}"
    )

    data = payload.model_dump(mode="json")
    pricing = AirportPricing(**{**data, "status": payload.status})
    db.add(pricing)
    await db.flush()
    await log_audit(db, current_user.id, AuditAction.CREATE_AIRPORT_PRICING, payload, pricing.id)
    await db.commit()
    await invalidate_cache(QUOTE_CACHE)
    await db.refresh(pricing)

    return build_airport_pricing_response(pricing)


@router.get("/", response_model=List[AirportPricingOut])
async def list_airport_pricing(
    status: Optional[PricingStatus] = Query(None),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    q = select(AirportPricing)
    if status:
        q = q.where(AirportPricing.status == status)

    q = q.order_by(AirportPricing.id).limit(limit).offset(offset)
    res = await db.execute(q)

    return build_airport_pricing_response_list(res.scalars().all())


@router.get("/location/{location_id}", response_model=List[AirportPricingOut])
async def list_airport_pricing_for_location(
    location_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    res = await db.execute(select(SpecialLocation).where(SpecialLocation.id == location_id))
    check_not_found(res.scalars().first(), "Location", location_id)

    res = await db.execute(
        select(AirportPricing)
        .where(AirportPricing.location_id == location_id)
        .order_by(AirportPricing.vehicle_id)
    )
    return build_airport_pricing_response_list(res.scalars().all())


@router.get("/vehicle/{vehicle_id}", response_model=List[AirportPricingOut])
async def list_airport_pricing_for_vehicle(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    res = await db.execute(select(Vehicle).where(Vehicle.id == vehicle_id))
    check_not_found(res.scalars().first(), "Vehicle", vehicle_id)

    res = await db.execute(
        select(AirportPricing)
        .where(AirportPricing.vehicle_id == vehicle_id)
        .order_by(AirportPricing.location_id)
    )
    return build_airport_pricing_response_list(res.scalars().all())


@router.get("/{pricing_id}", response_model=AirportPricingOut)
async def get_airport_pricing(
    pricing_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    res = await db.execute(select(AirportPricing).where(AirportPricing.id == pricing_id))
    pricing = res.scalars().first()
    check_not_found(pricing, "Airport pricing", pricing_id)

    return build_airport_pricing_response(pricing)


@router.put("/{pricing_id}", response_model=AirportPricingOut)
async def update_airport_pricing(
    pricing_id: int,
    payload: AirportPricingUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    res = await db.execute(select(AirportPricing).where(AirportPricing.id == pricing_id))
    pricing = res.scalars().first()
    check_not_found(pricing, "Airport pricing", pricing_id)

    changes = payload.model_dump(mode="json", exclude_unset=True)
    if "status" in changes:
        changes["status"] = payload.status

    for field, value in changes.items():
        setattr(pricing, field, value)

    await log_audit(db, current_user.id, AuditAction.UPDATE_AIRPORT_PRICING, payload, pricing.id)
    await db.commit()
    await invalidate_cache(QUOTE_CACHE)
    await db.refresh(pricing)

    return build_airport_pricing_response(pricing)


@router.delete("/{pricing_id}")
async def delete_airport_pricing(
    pricing_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    res = await db.execute(select(AirportPricing).where(AirportPricing.id == pricing_id))
    pricing = res.scalars().first()
    check_not_found(pricing, "Airport pricing", pricing_id)

    await db.delete(pricing)
    await log_audit(db, current_user.id, AuditAction.DELETE_AIRPORT_PRICING, {"id": pricing_id}, pricing_id)
    await db.commit()
    await invalidate_cache(QUOTE_CACHE)

    return {"deleted": True}
