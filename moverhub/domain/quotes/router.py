"""Quote router - draft quotes requested by signed-in customers"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...config import DEFAULT_CREW_SIZE
from ...database import get_db
from ...models import User
from ...shared.validators import normalize_us_phone
from ..providers.service import ProviderService
from .schemas import QuoteCreateRequest, QuoteResponse
from .service import QuoteInput, QuoteLedger

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quotes", tags=["Quotes"])


def get_quote_ledger(db: Session = Depends(get_db)) -> QuoteLedger:
    """Dependency injection for QuoteLedger"""
    return QuoteLedger(db)


@router.post("", response_model=QuoteResponse)
async def create_quote(
    data: QuoteCreateRequest,
    current_user: User = Depends(get_current_user),
    ledger: QuoteLedger = Depends(get_quote_ledger),
):
    """Save a draft quote for the caller"""
    provider = ProviderService(ledger.db).require(data.providerId, data.businessId)
    try:
        quote = ledger.create_draft(
            QuoteInput(
                provider_id=provider.id,
                move_date=data.moveDate,
                customer_id=current_user.id,
                full_name=data.fullName,
                email=data.email,
                phone=normalize_us_phone(data.phone),
                pickup_address=data.pickupAddress,
                dropoff_address=data.dropoffAddress,
                crew_size=data.crewSize or DEFAULT_CREW_SIZE,
                price_total_cents=data.priceTotalCents,
                breakdown=data.breakdown,
            )
        )
    except Exception as e:
        logger.error(f"❌ Failed to save quote for user {current_user.id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to save quote") from e
    return QuoteResponse.model_validate(quote)
