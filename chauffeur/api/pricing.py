from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import Optional, List

from chauffeur.db.session import get_db
from chauffeur.models.pricing import Pricing
from chauffeur.models.vehicle import Vehicle
from chauffeur.schemas.pricing import PricingCreate, PricingUpdate, PricingOut
from chauffeur.core.security import require_admin
from chauffeur.core.audit_log import log_audit
from chauffeur.core.redis import QUOTE_CACHE, invalidate_cache
from chauffeur.core.auth_utils import check_not_found, check_duplicate
from chauffeur.core.enums import AuditAction, BookingType, PricingStatus
from chauffeur.core.response_builders import build_pricing_response, build_pricing_response_list

router = APIRouter(prefix="/pricing", tags=["pricing"])


async def _find_existing(db: AsyncSession, vehicle_id: int, pricing_type: BookingType, coverage_zone: str):
    res = await db.execute(
        select(Pricing).where(
            Pricing.vehicle_id == vehicle_id,
            Pricing.pricing_type == pricing_type,
            Pricing.coverage_zone == coverage_zone,
        )
    )
    return res.scalars().first()


@router.post("/", response_model=PricingOut, status_code=201)
async def create_pricing(
    payload: PricingCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    res = await db.execute(select(Vehicle).where(Vehicle.id == payload.vehicle_id))
    check_not_found(res.scalars().first(), "Vehicle", payload.vehicle_id)

    existing = await _find_existing(db, payload.vehicle_id, payload.pricing_type, payload.coverage_zone)
    check_duplicate(
        existing,
        f"Pricing already exists for vehicle {payload.vehicle_id}, {payload.pricing_type} in {payload.coverage_zone}"
    )

    data = payload.model_dump(mode="json")
    pricing = Pricing(
        **{**data, "pricing_type": payload.pricing_type, "status": payload.status}
    )
    db.add(pricing)
    await db.flush()
    await log_audit(db, current_user.id, AuditAction.CREATE_PRICING, payload, pricing.id)
    await db.commit()
    await invalidate_cache(QUOTE_CACHE)
    await db.refresh(pricing)

    return build_pricing_response(pricing)


@router.get("/", response_model=List[PricingOut])
async def list_pricing(
    vehicle_id: Optional[int] = Query(None),
    pricing_type: Optional[BookingType] = Query(None),
    coverage_zone: Optional[str] = Query(None),
    status: Optional[PricingStatus] = Query(None),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    q = select(Pricing)

    if vehicle_id:
        q = q.where(Pricing.vehicle_id == vehicle_id)
    if pricing_type:
        q = q.where(Pricing.pricing_type == pricing_type)
    if coverage_zone:
        q = q.where(Pricing.coverage_zone == coverage_zone)
    if status:
        q = q.where(Pricing.status == status)

    q = q.order_by(Pricing.id).limit(limit).offset(offset)
    res = await db.execute(q)

    return build_pricing_response_list(res.scalars().all())


@router.get("/{pricing_id}", response_model=PricingOut)
async def get_pricing(
    pricing_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    res = await db.execute(select(Pricing).where(Pricing.id == pricing_id))
    pricing = res.scalars().first()
    check_not_found(pricing, "Pricing", pricing_id)

    return build_pricing_response(pricing)


@router.put("/{pricing_id}", response_model=PricingOut)
async def update_pricing(
    pricing_id: int,
    payload: PricingUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    res = await db.execute(select(Pricing).where(Pricing.id == pricing_id))
    pricing = res.scalars().first()
    check_not_found(pricing, "Pricing", pricing_id)

    changes = payload.model_dump(mode="json", exclude_unset=True)
    pricing_type = payload.pricing_type if payload.pricing_type is not None else pricing.pricing_type
    coverage_zone = payload.coverage_zone if payload.coverage_zone is not None else pricing.coverage_zone

    if pricing_type != pricing.pricing_type or coverage_zone != pricing.coverage_zone:
        existing = await _find_existing(db, pricing.vehicle_id, pricing_type, coverage_zone)
        check_duplicate(
            existing,
            f"Pricing already exists for vehicle {pricing.vehicle_id}, {pricing_type} in {coverage_zone}"
        )

    if "pricing_type" in changes:
        changes["pricing_type"] = payload.pricing_type
    if "status" in changes:
        changes["status"] = payload.status

    for field, value in changes.items():
        setattr(pricing, field, value)

    await log_audit(db, current_user.id, AuditAction.UPDATE_PRICING, payload, pricing.id)
    await db.commit()
    await invalidate_cache(QUOTE_CACHE)
    await db.refresh(pricing)

    return build_pricing_response(pricing)


@router.delete("/{pricing_id}")
async def delete_pricing(
    pricing_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    res = await db.execute(select(Pricing).where(Pricing.id == pricing_id))
    pricing = res.scalars().first()
    check_not_found(pricing, "Pricing", pricing_id)

    await db.delete(pricing)
    await log_audit(db, current_user.id, AuditAction.DELETE_PRICING, {"id": pricing_id}, pricing_id)
    await db.commit()
    await invalidate_cache(QUOTE_CACHE)

    return {"deleted": True}
