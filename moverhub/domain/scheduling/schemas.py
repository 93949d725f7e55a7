"""Scheduling domain schemas"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel


class QuoteSummary(BaseModel):
    id: int
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    pickup_address: Optional[str] = None
    dropoff_address: Optional[str] = None
    price_total_cents: int = 0
    status: str

    class Config:
        from_attributes = True


class ScheduledJobResponse(BaseModel):
    id: int
    provider_id: int
    quote_id: Optional[int] = None
    scheduled_date: date
    time_slot: str
    scheduled_start_time: Optional[str] = None
    scheduled_end_time: Optional[str] = None
    crew_size: Optional[int] = None
    status: str
    created_at: Optional[datetime] = None
    quote: Optional[QuoteSummary] = None

    class Config:
        from_attributes = True
