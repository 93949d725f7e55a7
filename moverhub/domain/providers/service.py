"""Provider service - resolving and authorizing access to a provider"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import MoversProvider, User
from .repository import ProviderRepository

logger = logging.getLogger(__name__)


class ProviderService:
    """Service layer for provider resolution"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ProviderRepository()

    def resolve(
        self, provider_id: Optional[int], business_id: Optional[int]
    ) -> Optional[MoversProvider]:
        """
        Find the provider by explicit id, falling back to the business it operates under.
        Returns None when neither identifies a provider.
        """
        if provider_id:
            provider = self.repo.get_by_id(self.db, provider_id)
            if provider:
                return provider
            logger.debug(f"Provider {provider_id} not found, trying business_id={business_id}")
        if business_id:
            return self.repo.get_by_business_id(self.db, business_id)
        return None

    def require(self, provider_id: Optional[int], business_id: Optional[int]) -> MoversProvider:
        """Resolve a provider for a public endpoint or raise 400/404"""
        if not provider_id and not business_id:
            raise HTTPException(status_code=400, detail="Provider ID or Business ID required")
        provider = self.resolve(provider_id, business_id)
        if not provider:
            raise HTTPException(status_code=404, detail="Provider not found")
        return provider

    def require_owned(
        self, provider_id: Optional[int], business_id: Optional[int], user: User
    ) -> MoversProvider:
        """Resolve a provider and check the caller owns it"""
        provider = self.require(provider_id, business_id)
        if provider.owner_user_id != user.id:
            logger.warning(f"⚠️ User {user.id} tried to manage provider {provider.id} they do not own")
            raise HTTPException(status_code=403, detail="Unauthorized")
        return provider
