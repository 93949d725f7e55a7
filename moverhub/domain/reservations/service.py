"""
Reservation orchestrator.

Ties the capacity rule, availability check, quote ledger, job store,
booking mirror and provider notification together. Only the scheduled job
insert can fail the reservation once capacity is confirmed; the quote,
booking and notification writes degrade to a missing id instead.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from sqlalchemy.orm import Session

from ...config import DEFAULT_CREW_SIZE
from ...models import MoversProvider, Quote, ScheduledJob, User
from ...shared.validators import normalize_us_phone, validate_email, validate_time_slot
from ..availability.service import AvailabilityEvaluator
from ..bookings.service import BookingMirror
from ..notifications.service import NotificationService
from ..providers.service import ProviderService
from ..quotes.service import QuoteInput, QuoteLedger
from ..scheduling.repository import ScheduledJobRepository
from .errors import (
    CapacityBlocked,
    CapacityExhausted,
    InputError,
    ReservationFailed,
    SlotConflict,
)
from .schemas import ReservationRequest
from .state_machine import ReservationStateMachine, ReservationTrigger

logger = logging.getLogger(__name__)


@dataclass
class ReservationResult:
    job: ScheduledJob
    provider_id: int
    quote_id: Optional[int] = None
    booking_id: Optional[int] = None
    notification_id: Optional[int] = None
    rule_created: bool = False
    history: list[str] = field(default_factory=list)

    def references(self) -> dict[str, Any]:
        return {
            "scheduled_job_id": self.job.id,
            "quote_id": self.quote_id,
            "booking_id": self.booking_id,
            "notification_id": self.notification_id,
            "provider_id": self.provider_id,
            "rule_auto_created": self.rule_created,
        }


@dataclass
class _ValidatedRequest:
    provider: MoversProvider
    move_date: date
    time_slot: str
    email: Optional[str]
    phone: Optional[str]


class ReservationOrchestrator:
    """Service layer for reservation creation"""

    def __init__(self, db: Session):
        self.db = db
        self.providers = ProviderService(db)
        self.evaluator = AvailabilityEvaluator(db)
        self.quotes = QuoteLedger(db)
        self.jobs = ScheduledJobRepository()
        self.bookings = BookingMirror(db)
        self.notifications = NotificationService(db)

    def _validate(self, request: ReservationRequest) -> _ValidatedRequest:
        """Resolve the provider and parse required fields; nothing is written here"""
        missing = []
        provider = self.providers.resolve(request.providerId, request.businessId)
        if provider is None:
            missing.append("providerId")
        if not request.moveDate:
            missing.append("moveDate")
        if not request.timeSlot:
            missing.append("timeSlot")
        if missing:
            raise InputError("Missing required fields", missingFields=missing)

        try:
            move_date = date.fromisoformat(request.moveDate.strip()[:10])
        except ValueError as e:
            raise InputError("moveDate must be an ISO date (YYYY-MM-DD)", details=str(e)) from e

        try:
            time_slot = validate_time_slot(request.timeSlot)
            email = validate_email(request.email)
        except ValueError as e:
            raise InputError(str(e)) from e

        return _ValidatedRequest(
            provider=provider,
            move_date=move_date,
            time_slot=time_slot,
            email=email,
            phone=normalize_us_phone(request.phone),
        )

    def _persist_quote(
        self, request: ReservationRequest, valid: _ValidatedRequest, customer_id: Optional[int]
    ) -> Optional[Quote]:
        """Quote ledger upsert; any failure degrades to no quote"""
        breakdown = dict(request.quoteBreakdown or {})
        breakdown.update(request.service_details())
        try:
            return self.quotes.upsert_quote(
                QuoteInput(
                    provider_id=valid.provider.id,
                    move_date=valid.move_date,
                    existing_quote_id=request.quoteId,
                    customer_id=customer_id,
                    full_name=request.fullName,
                    email=valid.email,
                    phone=valid.phone,
                    pickup_address=request.pickupAddresses[0] if request.pickupAddresses else None,
                    dropoff_address=request.deliveryAddresses[0] if request.deliveryAddresses else None,
                    crew_size=request.teamSize or DEFAULT_CREW_SIZE,
                    price_total_cents=request.totalPriceCents,
                    breakdown=breakdown,
                )
            )
        except Exception as e:
            # Drop any half-applied quote changes so they are not flushed with the job
            self.db.rollback()
            logger.error(
                f"❌ Quote persistence failed for provider {valid.provider.id} on "
                f"{valid.move_date}, continuing without a quote: {e}"
            )
            return None

    def create_reservation(
        self, request: ReservationRequest, user: Optional[User] = None
    ) -> ReservationResult:
        """
        Run the reservation workflow.

        Raises:
            InputError: Required fields missing or malformed
            CapacityBlocked: The date or slot is blocked by the provider
            CapacityExhausted: Every unit of the slot is taken
            SlotConflict: Another reservation took the last unit first
            ReservationFailed: The job insert failed for another reason
        """
        sm = ReservationStateMachine(
            reservation_ref=f"{request.providerId or request.businessId}:{request.moveDate}:{request.timeSlot}"
        )

        try:
            valid = self._validate(request)
        except InputError as e:
            sm.abort(f"invalid: {e.message}")
            raise

        provider = valid.provider
        customer_id = user.id if user else None
        logger.info(
            f"📥 Reservation request for provider {provider.id} on {valid.move_date} "
            f"({valid.time_slot}) by {'user ' + str(customer_id) if customer_id else 'guest'}"
        )

        rule, rule_created = self.evaluator.resolve_rule(provider.id, valid.move_date)
        sm.transition(ReservationTrigger.RULE_RESOLVED)

        availability = self.evaluator.is_available(
            provider.id, valid.move_date, valid.time_slot, rule=rule, hint=request.available
        )
        if not availability.available:
            if availability.blocked:
                sm.abort("blocked")
                raise CapacityBlocked(
                    "This date is not available for bookings. Please choose another date."
                )
            sm.abort("fully_booked")
            raise CapacityExhausted(
                "This time slot is fully booked. Please select another time or date.",
                details=availability.reason,
            )
        sm.transition(ReservationTrigger.CAPACITY_CONFIRMED)

        quote = self._persist_quote(request, valid, customer_id)
        sm.transition(
            ReservationTrigger.QUOTE_SAVED if quote is not None else ReservationTrigger.QUOTE_DEGRADED
        )

        crew_size = request.teamSize or (quote.crew_size if quote else None) or DEFAULT_CREW_SIZE
        try:
            job = self.jobs.create_job(
                self.db,
                provider.id,
                quote.id if quote is not None else None,
                valid.move_date,
                valid.time_slot,
                crew_size,
                availability.capacity,
            )
        except SlotConflict:
            sm.abort("conflict")
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create scheduled job for provider {provider.id}: {e}")
            sm.abort("internal")
            raise ReservationFailed("Failed to create reservation", details=str(e)) from e
        sm.transition(ReservationTrigger.JOB_INSERTED)
        logger.info(
            f"✅ Scheduled job {job.id} for provider {provider.id} on {job.scheduled_date} "
            f"({job.time_slot}, unit {job.slot_sequence})"
        )

        mirror_request = {
            "full_name": request.fullName,
            "email": valid.email,
            "phone": valid.phone,
            "pickup_addresses": request.pickupAddresses or [],
            "delivery_addresses": request.deliveryAddresses or [],
            "quote_breakdown": request.quoteBreakdown,
            "total_price_cents": request.totalPriceCents,
            **request.service_details(),
        }
        booking_id = self.bookings.mirror_booking(
            job,
            quote,
            mirror_request,
            customer_id,
            provider.business_id or request.businessId,
        )

        total_cents = request.totalPriceCents
        if total_cents is None and quote is not None:
            total_cents = quote.price_total_cents
        notification_id = self.notifications.notify_provider_of_reservation(
            provider, job, request.fullName or (quote.full_name if quote else None), total_cents
        )
        sm.transition(ReservationTrigger.FOLLOW_UPS_DONE)

        return ReservationResult(
            job=job,
            provider_id=provider.id,
            quote_id=quote.id if quote is not None else None,
            booking_id=booking_id,
            notification_id=notification_id,
            rule_created=rule_created or availability.rule_created,
            history=sm.get_state_trace(),
        )
