"""Availability router - capacity rules, date overrides and slot queries"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import AvailabilityOverride, User
from ...shared.validators import validate_time_slot
from ..providers.service import ProviderService
from .repository import CapacityRuleRepository, OverrideRepository
from .schemas import (
    AvailabilityCheckResponse,
    CapacityRuleResponse,
    OverrideRequest,
    OverrideResponse,
    ReplaceRulesRequest,
    SlotResponse,
)
from .service import AvailabilityEvaluator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/availability", tags=["Availability"])


def get_provider_service(db: Session = Depends(get_db)) -> ProviderService:
    """Dependency injection for ProviderService"""
    return ProviderService(db)


# ============================================================================
# PUBLIC QUERIES
# ============================================================================


@router.get("/check", response_model=AvailabilityCheckResponse)
async def check_availability(
    date: date,
    timeSlot: str,
    providerId: Optional[int] = Query(None),
    businessId: Optional[int] = Query(None),
    providers: ProviderService = Depends(get_provider_service),
):
    """Evaluate one slot without creating anything"""
    try:
        time_slot = validate_time_slot(timeSlot)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    provider = providers.require(providerId, businessId)
    result = AvailabilityEvaluator(providers.db).is_available(
        provider.id, date, time_slot, auto_create=False
    )
    return AvailabilityCheckResponse(
        available=result.available,
        reason=result.reason,
        blocked=result.blocked,
        booked=result.booked,
        maxJobs=result.max_jobs,
    )


@router.get("/slots")
async def get_slots(
    startDate: date,
    endDate: Optional[date] = None,
    providerId: Optional[int] = Query(None),
    businessId: Optional[int] = Query(None),
    providers: ProviderService = Depends(get_provider_service),
):
    """Morning/afternoon availability for each day of a range"""
    provider = providers.resolve(providerId, businessId)
    if provider is None:
        if not providerId and not businessId:
            raise HTTPException(status_code=400, detail="Provider ID or Business ID required")
        return {"slots": []}

    slots = AvailabilityEvaluator(providers.db).list_slots(provider.id, startDate, endDate or startDate)
    return {
        "slots": [
            SlotResponse(
                date=slot.date,
                timeSlot=slot.time_slot,
                available=slot.available,
                maxJobs=slot.max_jobs,
                currentBookings=slot.current_bookings,
                blocked=slot.blocked,
            )
            for slot in slots
        ]
    }


@router.get("/overrides")
async def get_overrides(
    date: date,
    providerId: Optional[int] = Query(None),
    businessId: Optional[int] = Query(None),
    providers: ProviderService = Depends(get_provider_service),
):
    """Overrides for one date; ``override`` is the most restrictive one"""
    provider = providers.resolve(providerId, businessId)
    if provider is None:
        if not providerId and not businessId:
            raise HTTPException(status_code=400, detail="Provider ID or Business ID required")
        return {"override": None, "allOverrides": []}

    overrides = OverrideRepository.list_for_date(providers.db, provider.id, date)
    full_day = next(
        (o for o in overrides if o.kind == "block" and o.time_slot in (None, "full_day")), None
    )
    primary = full_day or (overrides[0] if overrides else None)
    return {
        "override": OverrideResponse.model_validate(primary) if primary else None,
        "allOverrides": [OverrideResponse.model_validate(o) for o in overrides],
    }


# ============================================================================
# PROVIDER MANAGEMENT
# ============================================================================


@router.get("/rules")
async def get_rules(
    providerId: Optional[int] = Query(None),
    businessId: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    providers: ProviderService = Depends(get_provider_service),
):
    """Weekday capacity rules of a provider the caller owns"""
    provider = providers.require_owned(providerId, businessId, current_user)
    rules = CapacityRuleRepository.list_rules(providers.db, provider.id)
    return {"rules": [CapacityRuleResponse.model_validate(rule) for rule in rules]}


@router.put("/rules")
async def replace_rules(
    data: ReplaceRulesRequest,
    current_user: User = Depends(get_current_user),
    providers: ProviderService = Depends(get_provider_service),
):
    """Replace every weekday rule of a provider"""
    provider = providers.require_owned(data.providerId, data.businessId, current_user)
    logger.info(f"📥 Replacing {len(data.rules)} availability rules for provider {provider.id}")
    rules = CapacityRuleRepository.replace_rules(
        providers.db, provider.id, [rule.model_dump() for rule in data.rules]
    )
    return {
        "success": True,
        "rules": [CapacityRuleResponse.model_validate(rule) for rule in rules],
    }


@router.post("/overrides")
async def save_override(
    data: OverrideRequest,
    current_user: User = Depends(get_current_user),
    providers: ProviderService = Depends(get_provider_service),
):
    """
    Create or update a date override.

    A full-day block replaces every block on that date; a slot block replaces
    an existing full-day block and any block on the same slot.
    """
    provider = providers.require_owned(data.providerId, data.businessId, current_user)
    db = providers.db

    if data.kind == "block":
        target_slot = data.timeSlot or "full_day"
        if target_slot == "full_day":
            OverrideRepository.delete(db, provider.id, data.date, kind="block", commit=False)
        else:
            OverrideRepository.delete(
                db, provider.id, data.date, kind="block", time_slot="full_day", commit=False
            )
            OverrideRepository.delete(
                db, provider.id, data.date, kind="block", time_slot=target_slot, commit=False
            )
        override = AvailabilityOverride(
            provider_id=provider.id,
            date=data.date,
            kind="block",
            time_slot=target_slot,
            note=data.note,
        )
        logger.info(f"🚫 Blocking {target_slot} on {data.date} for provider {provider.id}")
    else:
        override = OverrideRepository.find(db, provider.id, data.date, "extra", None)
        if override is None:
            override = AvailabilityOverride(provider_id=provider.id, date=data.date, kind="extra")
        override.max_concurrent_jobs = data.maxConcurrentJobs
        override.note = data.note
        logger.info(
            f"➕ Extra capacity {data.maxConcurrentJobs} on {data.date} for provider {provider.id}"
        )

    override = OverrideRepository.save(db, override)
    return {"success": True, "override": OverrideResponse.model_validate(override)}


@router.delete("/overrides")
async def delete_override(
    date: date,
    timeSlot: Optional[str] = Query(None),
    providerId: Optional[int] = Query(None),
    businessId: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    providers: ProviderService = Depends(get_provider_service),
):
    """Remove one slot's override, or every block on the date when no slot is given"""
    provider = providers.require_owned(providerId, businessId, current_user)
    if timeSlot:
        deleted = OverrideRepository.delete(providers.db, provider.id, date, time_slot=timeSlot)
    else:
        deleted = OverrideRepository.delete(providers.db, provider.id, date, kind="block")
    return {"success": True, "deleted": deleted}
