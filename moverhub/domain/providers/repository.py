"""Provider repository - Database operations for movers providers"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import MoversProvider


class ProviderRepository:
    """Repository for provider lookups"""

    @staticmethod
    def get_by_id(db: Session, provider_id: int) -> Optional[MoversProvider]:
        return db.query(MoversProvider).filter(MoversProvider.id == provider_id).first()

    @staticmethod
    def get_by_business_id(db: Session, business_id: int) -> Optional[MoversProvider]:
        return db.query(MoversProvider).filter(MoversProvider.business_id == business_id).first()
