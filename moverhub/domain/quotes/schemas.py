"""Quote domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_email


class QuoteCreateRequest(BaseModel):
    """Body of POST /quotes: a draft the customer may later reserve"""

    providerId: Optional[int] = None
    businessId: Optional[int] = None
    moveDate: date
    fullName: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    pickupAddress: Optional[str] = Field(default=None, max_length=500)
    dropoffAddress: Optional[str] = Field(default=None, max_length=500)
    crewSize: Optional[int] = Field(default=None, ge=1, le=20)
    priceTotalCents: int = Field(default=0, ge=0)
    breakdown: dict[str, Any] = Field(default_factory=dict)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: Optional[str]) -> Optional[str]:
        return validate_email(v)


class QuoteResponse(BaseModel):
    id: int
    provider_id: Optional[int] = None
    customer_id: Optional[int] = None
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    pickup_address: Optional[str] = None
    dropoff_address: Optional[str] = None
    move_date: Optional[date] = None
    crew_size: Optional[int] = None
    price_total_cents: int = 0
    status: str
    breakdown: Optional[dict[str, Any]] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
