from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import Optional, List

from chauffeur.db.session import get_db
from chauffeur.models.vehicle import Vehicle
from chauffeur.models.pricing import Pricing
from chauffeur.schemas.vehicle import VehicleCreate, VehicleUpdate, VehicleOut
from chauffeur.schemas.pricing import PricingConfig
from chauffeur.schemas.quote import EstimateResponse
from chauffeur.services.pricing import quick_estimate
from chauffeur.core.security import require_admin
from chauffeur.core.audit_log import log_audit
from chauffeur.core.redis import QUOTE_CACHE, invalidate_cache
from chauffeur.core.auth_utils import check_not_found
from chauffeur.core.enums import AuditAction, PricingStatus
from chauffeur.core.config import settings
from chauffeur.core.response_builders import build_vehicle_response, build_vehicle_response_list

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


@router.post("/", response_model=VehicleOut, status_code=201)
async def create_vehicle(
    payload: VehicleCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    vehicle = Vehicle(**payload.model_dump())
    db.add(vehicle)
    await db.flush()
    await log_audit(db, current_user.id, AuditAction.CREATE_VEHICLE, payload, vehicle.id)
    await db.commit()
    await invalidate_cache(QUOTE_CACHE)
    await db.refresh(vehicle)

    return build_vehicle_response(vehicle)


@router.get("/", response_model=List[VehicleOut])
async def list_vehicles(
    passengers: Optional[int] = Query(None, ge=1),
    luggage: Optional[int] = Query(None, ge=0),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    q = select(Vehicle).where(Vehicle.is_active.is_(True))

    if passengers:
        q = q.where(Vehicle.number_of_passengers >= passengers)
    if luggage:
        q = q.where(
            (Vehicle.number_of_big_luggage >= luggage) | (Vehicle.number_of_small_luggage >= luggage)
        )

    q = q.order_by(Vehicle.list_priority, Vehicle.id).limit(limit).offset(offset)
    res = await db.execute(q)

    return build_vehicle_response_list(res.scalars().all())


@router.get("/{vehicle_id}", response_model=VehicleOut)
async def get_vehicle(vehicle_id: int, db: AsyncSession = Depends(get_db)):
    res = await db.execute(select(Vehicle).where(Vehicle.id == vehicle_id))
    vehicle = res.scalars().first()
    check_not_found(vehicle, "Vehicle", vehicle_id)

    return build_vehicle_response(vehicle)


@router.get("/{vehicle_id}/estimate", response_model=EstimateResponse)
async def estimate_vehicle_price(
    vehicle_id: int,
    distance_miles: float = Query(..., ge=0),
    hours: int = Query(settings.DEFAULT_ESTIMATE_HOURS, ge=0),
    coverage_zone: str = Query(settings.DEFAULT_COVERAGE_ZONE),
    db: AsyncSession = Depends(get_db),
):
    """Headline p2p and hourly prices for listing a vehicle before a full quote."""
    res = await db.execute(select(Vehicle).where(Vehicle.id == vehicle_id))
    vehicle = res.scalars().first()
    check_not_found(vehicle, "Vehicle", vehicle_id)

    res = await db.execute(
        select(Pricing).where(
            Pricing.vehicle_id == vehicle_id,
            Pricing.coverage_zone == coverage_zone,
            Pricing.status == PricingStatus.ACTIVE,
        )
    )
    configs = [PricingConfig.model_validate(row) for row in res.scalars().all()]
    estimate = quick_estimate(configs, distance_miles, hours)

    return EstimateResponse(
        vehicle_id=vehicle_id,
        coverage_zone=coverage_zone,
        distance_miles=distance_miles,
        hours=hours,
        p2p=estimate.p2p,
        hourly=estimate.hourly,
    )


@router.put("/{vehicle_id}", response_model=VehicleOut)
async def update_vehicle(
    vehicle_id: int,
    payload: VehicleUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    res = await db.execute(select(Vehicle).where(Vehicle.id == vehicle_id))
    vehicle = res.scalars().first()
    check_not_found(vehicle, "Vehicle", vehicle_id)

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(vehicle, field, value)

    await log_audit(db, current_user.id, AuditAction.UPDATE_VEHICLE, payload, vehicle.id)
    await db.commit()
    await invalidate_cache(QUOTE_CACHE)
    await db.refresh(vehicle)

    return build_vehicle_response(vehicle)


@router.delete("/{vehicle_id}")
async def delete_vehicle(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    res = await db.execute(select(Vehicle).where(Vehicle.id == vehicle_id))
    vehicle = res.scalars().first()
    check_not_found(vehicle, "Vehicle", vehicle_id)

    await db.delete(vehicle)
    await log_audit(db, current_user.id, AuditAction.DELETE_VEHICLE, {"id": vehicle_id}, vehicle_id)
    await db.commit()
    await invalidate_cache(QUOTE_CACHE)

    return {"deleted": True}
