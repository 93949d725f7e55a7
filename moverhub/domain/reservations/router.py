"""Reservation router - booking a provider slot"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ...auth import get_optional_user
from ...config import RESERVATION_RATE_LIMIT, RESERVATION_RATE_WINDOW
from ...database import get_db
from ...models import User
from ...rate_limiter import create_rate_limiter
from ..scheduling.schemas import ScheduledJobResponse
from .errors import ReservationError, ReservationFailed
from .schemas import ReservationRequest
from .service import ReservationOrchestrator

logger = logging.getLogger(__name__)

RESERVATIONS_PREFIX = "/reservations"

router = APIRouter(prefix=RESERVATIONS_PREFIX, tags=["Reservations"])

rate_limit_reservations = create_rate_limiter(
    limit=RESERVATION_RATE_LIMIT,
    window_seconds=RESERVATION_RATE_WINDOW,
    key_prefix="reservations",
)


def get_reservation_service(db: Session = Depends(get_db)) -> ReservationOrchestrator:
    """Dependency injection for ReservationOrchestrator"""
    return ReservationOrchestrator(db)


@router.post("")
async def create_reservation(
    data: ReservationRequest,
    _: None = Depends(rate_limit_reservations),
    current_user: Optional[User] = Depends(get_optional_user),
    service: ReservationOrchestrator = Depends(get_reservation_service),
):
    """
    Reserve a morning or afternoon slot with a provider.

    Guests may book; they get no customer booking record. Failures carry a
    boolean discriminant (invalid, blocked, fullyBooked, conflict, internal).
    """
    try:
        result = service.create_reservation(data, current_user)
    except ReservationError as e:
        if e.status_code >= 500:
            logger.error(f"❌ Reservation failed: {e.message} ({e.details})")
        else:
            logger.info(f"ℹ️ Reservation rejected ({e.discriminant}): {e.message}")
        return JSONResponse(status_code=e.status_code, content=e.to_body())
    except Exception as e:
        logger.error(f"❌ Unexpected error creating reservation: {e}", exc_info=True)
        error = ReservationFailed("Failed to create reservation", details=str(e))
        return JSONResponse(status_code=error.status_code, content=error.to_body())

    return {
        "success": True,
        "reservation_id": result.job.id,
        "quote_id": result.quote_id,
        "booking_id": result.booking_id,
        "scheduled_job": ScheduledJobResponse.model_validate(result.job),
        "references": result.references(),
    }
