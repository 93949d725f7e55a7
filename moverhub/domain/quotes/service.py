"""Quote ledger - create or confirm the quote behind a reservation"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Quote
from .breakdown import merge_breakdown
from .repository import QuoteRepository

logger = logging.getLogger(__name__)


@dataclass
class QuoteInput:
    provider_id: int
    move_date: date
    existing_quote_id: Optional[int] = None
    customer_id: Optional[int] = None
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    pickup_address: Optional[str] = None
    dropoff_address: Optional[str] = None
    crew_size: Optional[int] = None
    price_total_cents: Optional[int] = None
    breakdown: dict = field(default_factory=dict)


class QuoteLedger:
    """Service layer for quote persistence"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = QuoteRepository()

    def find_target(self, data: QuoteInput) -> Optional[Quote]:
        """The quote a reservation should confirm: explicit id first, then the latest draft"""
        if data.existing_quote_id:
            quote = self.repo.get_by_id(self.db, data.existing_quote_id)
            if quote:
                return quote
            logger.warning(f"⚠️ Quote {data.existing_quote_id} not found, looking for a draft instead")
        return self.repo.find_latest_draft(self.db, data.provider_id, data.move_date)

    def upsert_quote(self, data: QuoteInput) -> Quote:
        """Update the matching quote (or insert one) and mark it confirmed"""
        quote = self.find_target(data)
        if quote is None:
            quote = Quote(provider_id=data.provider_id, move_date=data.move_date, price_total_cents=0)
            action = "Created"
        else:
            action = "Updated"

        if quote.customer_id is None and data.customer_id is not None:
            quote.customer_id = data.customer_id
        if quote.provider_id is None:
            quote.provider_id = data.provider_id
        if quote.move_date is None:
            quote.move_date = data.move_date

        for attr in ("full_name", "email", "phone", "pickup_address", "dropoff_address", "crew_size"):
            value = getattr(data, attr)
            if value not in (None, ""):
                setattr(quote, attr, value)

        if data.price_total_cents is not None:
            quote.price_total_cents = max(0, int(data.price_total_cents))

        quote.breakdown = merge_breakdown(quote.breakdown, data.breakdown)
        quote.status = "confirmed"

        quote = self.repo.save(self.db, quote)
        logger.info(f"✅ {action} quote {quote.id} for provider {quote.provider_id} on {quote.move_date}")
        return quote

    def create_draft(self, data: QuoteInput) -> Quote:
        """Store an unconfirmed quote; a later reservation for the same date confirms it"""
        quote = Quote(
            provider_id=data.provider_id,
            customer_id=data.customer_id,
            full_name=data.full_name,
            email=data.email,
            phone=data.phone,
            pickup_address=data.pickup_address,
            dropoff_address=data.dropoff_address,
            move_date=data.move_date,
            crew_size=data.crew_size,
            price_total_cents=max(0, int(data.price_total_cents or 0)),
            status="draft",
            breakdown=merge_breakdown(None, data.breakdown),
        )
        quote = self.repo.save(self.db, quote)
        logger.info(f"📝 Draft quote {quote.id} for provider {quote.provider_id} on {quote.move_date}")
        return quote
