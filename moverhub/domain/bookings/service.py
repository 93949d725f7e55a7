"""
Booking mirror - customer-facing copy of a confirmed reservation.

The booking row denormalizes the reservation for the customer's dashboard.
Each service detail is resolved on its own: a value sent with the
reservation wins over the quote breakdown, which wins over the default.
"""

import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from ...models import Booking, Quote, ScheduledJob
from ...utils.addresses import parse_address
from ..quotes.breakdown import heavy_item_count, is_richer, normalize_heavy_items_cost, to_number
from .repository import BookingRepository

logger = logging.getLogger(__name__)

SERVICE_DETAIL_DEFAULTS: dict[str, Any] = {
    "heavy_items": [],
    "stairs_flights": 0,
    "packing_help": None,
    "packing_rooms": 0,
    "packing_materials": [],
    "destination_fee": 0,
    "double_drive_time": False,
    "trip_distance_miles": None,
    "trip_distance_duration": None,
    "trip_distances": [],
}


def _provided(value: Any) -> bool:
    # Empty lists from the booking form mean "not filled in", not "none"
    if isinstance(value, (list, dict)):
        return is_richer(value)
    return value is not None


def resolve_field(field: str, request: dict, breakdown: dict, default: Any = None) -> Any:
    """request > quote breakdown > default, for a single field"""
    if _provided(request.get(field)):
        return request[field]
    if _provided(breakdown.get(field)):
        return breakdown[field]
    return default


def first_address(addresses: Any) -> Optional[str]:
    if isinstance(addresses, str):
        return addresses or None
    if isinstance(addresses, list):
        for address in addresses:
            if isinstance(address, str) and address.strip():
                return address.strip()
            if isinstance(address, dict) and address.get("address"):
                return str(address["address"]).strip()
    return None


def build_service_details(
    job: ScheduledJob, quote: Optional[Quote], request: dict
) -> dict[str, Any]:
    # Without a persisted quote the breakdown the client sent is the next best source
    if quote is not None:
        breakdown = dict(quote.breakdown or {})
    else:
        breakdown = dict(request.get("quote_breakdown") or {})

    details: dict[str, Any] = dict(breakdown)
    for field, default in SERVICE_DETAIL_DEFAULTS.items():
        details[field] = resolve_field(field, request, breakdown, default)
    details["heavy_items_cost"] = normalize_heavy_items_cost(
        {
            "heavy_items": details["heavy_items"],
            "heavy_items_cost": resolve_field("heavy_items_cost", request, breakdown),
        }
    )
    heavy_items = details["heavy_items"] if isinstance(details["heavy_items"], list) else []
    details["heavy_items_count"] = sum(
        heavy_item_count(item) for item in heavy_items if isinstance(item, dict)
    )

    pickup = request.get("pickup_addresses") or ([quote.pickup_address] if quote and quote.pickup_address else [])
    delivery = request.get("delivery_addresses") or ([quote.dropoff_address] if quote and quote.dropoff_address else [])
    details.update(
        {
            "pickup_addresses": pickup,
            "delivery_addresses": delivery,
            "from_address": first_address(pickup),
            "to_address": first_address(delivery),
            "move_date": job.scheduled_date.isoformat(),
            "time_slot": job.time_slot,
            "crew_size": job.crew_size,
            "scheduled_job_id": job.id,
            "provider_id": job.provider_id,
            "quote_id": quote.id if quote is not None else None,
            "full_name": request.get("full_name") or (quote.full_name if quote else None),
            "email": request.get("email") or (quote.email if quote else None),
            "phone": request.get("phone") or (quote.phone if quote else None),
        }
    )
    return details


class BookingMirror:
    """Creates the customer's booking row after a job is scheduled"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BookingRepository()

    def mirror_booking(
        self,
        job: ScheduledJob,
        quote: Optional[Quote],
        request: dict,
        customer_id: Optional[int],
        business_id: Optional[int],
    ) -> Optional[int]:
        """Create the booking. Returns its id, or None for guests and on any failure."""
        if not customer_id or not business_id:
            logger.info(
                f"ℹ️ Skipping booking mirror for job {job.id} "
                f"(customer_id={customer_id}, business_id={business_id})"
            )
            return None

        try:
            details = build_service_details(job, quote, request)
            address = parse_address(details["from_address"])

            total_cents = request.get("total_price_cents")
            if total_cents is None and quote is not None:
                total_cents = quote.price_total_cents
            total_cents = max(0, int(total_cents or 0))
            base_cents = to_number(resolve_field("base_price_cents", request, details))
            base_cents = int(base_cents) if base_cents is not None else total_cents

            booking = self.repo.create(
                self.db,
                Booking(
                    customer_id=customer_id,
                    business_id=business_id,
                    service_type="moving",
                    booking_status="confirmed",
                    requested_date=job.scheduled_date,
                    requested_time=job.scheduled_start_time,
                    total_price_cents=total_cents,
                    base_price_cents=base_cents,
                    service_address=address["street"] or details["from_address"],
                    service_city=address["city"] or None,
                    service_state=address["state"] or None,
                    service_postal_code=address["postal_code"] or None,
                    customer_email=details["email"],
                    customer_phone=details["phone"],
                    service_details=details,
                ),
            )
            logger.info(f"✅ Mirrored job {job.id} to booking {booking.id}")
            return booking.id
        except Exception as e:
            logger.error(f"❌ Failed to mirror job {job.id} to a booking: {e}")
            return None
