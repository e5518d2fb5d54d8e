from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import Optional, List

from chauffeur.db.session import get_db
from chauffeur.models.location import SpecialLocation
from chauffeur.schemas.location import LocationCreate, LocationUpdate, LocationOut
from chauffeur.core.security import require_admin
from chauffeur.core.audit_log import log_audit
from chauffeur.core.redis import QUOTE_CACHE, invalidate_cache
from chauffeur.core.auth_utils import check_not_found, check_duplicate
from chauffeur.core.enums import AuditAction, LocationType
from chauffeur.core.response_builders import build_location_response, build_location_response_list

router = APIRouter(prefix="/locations", tags=["locations"])


@router.post("/", response_model=LocationOut, status_code=201)
async def create_location(
    payload: LocationCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    if payload.place_id:
        res = await db.execute(select(SpecialLocation).where(SpecialLocation.place_id == payload.place_id))
        check_duplicate(res.scalars().first(), f"Location with place id {payload.place_id} already exists")

    location = SpecialLocation(**payload.model_dump())
    db.add(location)
    await db.flush()
    await log_audit(db, current_user.id, AuditAction.CREATE_LOCATION, payload, location.id)
    await db.commit()
    await invalidate_cache(QUOTE_CACHE)
    await db.refresh(location)

    return build_location_response(location)


@router.get("/", response_model=List[LocationOut])
async def list_locations(
    location_type: Optional[LocationType] = Query(None),
    active_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    q = select(SpecialLocation)

    if location_type:
        q = q.where(SpecialLocation.location_type == location_type)
    if active_only:
        q = q.where(SpecialLocation.is_active.is_(True))

    q = q.order_by(SpecialLocation.name).limit(limit).offset(offset)
    res = await db.execute(q)

    return build_location_response_list(res.scalars().all())


@router.get("/{location_id}", response_model=LocationOut)
async def get_location(
    location_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    res = await db.execute(select(SpecialLocation).where(SpecialLocation.id == location_id))
    location = res.scalars().first()
    check_not_found(location, "Location", location_id)

    return build_location_response(location)


@router.put("/{location_id}", response_model=LocationOut)
async def update_location(
    location_id: int,
    payload: LocationUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    res = await db.execute(select(SpecialLocation).where(SpecialLocation.id == location_id))
    location = res.scalars().first()
    check_not_found(location, "Location", location_id)

    if payload.place_id and payload.place_id != location.place_id:
        res = await db.execute(select(SpecialLocation).where(SpecialLocation.place_id == payload.place_id))
        check_duplicate(res.scalars().first(), f"Location with place id {payload.place_id} already exists")

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(location, field, value)

    await log_audit(db, current_user.id, AuditAction.UPDATE_LOCATION, payload, location.id)
    await db.commit()
    await invalidate_cache(QUOTE_CACHE)
    await db.refresh(location)

    return build_location_response(location)


@router.delete("/{location_id}")
async def delete_location(
    location_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    res = await db.execute(select(SpecialLocation).where(SpecialLocation.id == location_id))
    location = res.scalars().first()
    check_not_found(location, "Location", location_id)

    await db.delete(location)
    await log_audit(db, current_user.id, AuditAction.DELETE_LOCATION, {"id": location_id}, location_id)
    await db.commit()
    await invalidate_cache(QUOTE_CACHE)

    return {"deleted": True}
