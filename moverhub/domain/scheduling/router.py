"""Scheduled jobs router - a provider's booked slots"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ..providers.service import ProviderService
from .repository import ScheduledJobRepository
from .schemas import ScheduledJobResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scheduled-jobs", tags=["Scheduled Jobs"])


def get_provider_service(db: Session = Depends(get_db)) -> ProviderService:
    """Dependency injection for ProviderService"""
    return ProviderService(db)


@router.get("")
async def get_scheduled_jobs(
    providerId: Optional[int] = Query(None),
    businessId: Optional[int] = Query(None),
    startDate: Optional[date] = Query(None),
    endDate: Optional[date] = Query(None),
    current_user: User = Depends(get_current_user),
    providers: ProviderService = Depends(get_provider_service),
):
    """Jobs of a provider the caller owns, optionally within [startDate, endDate]"""
    if startDate and endDate and endDate < startDate:
        raise HTTPException(status_code=400, detail="endDate must not be before startDate")

    provider = providers.require_owned(providerId, businessId, current_user)
    jobs = ScheduledJobRepository.list_jobs(providers.db, provider.id, startDate, endDate)
    logger.debug(f"Found {len(jobs)} scheduled jobs for provider {provider.id}")
    return {"jobs": [ScheduledJobResponse.model_validate(job) for job in jobs]}
