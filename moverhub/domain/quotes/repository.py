"""Quote repository - Database operations for movers quotes"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Quote


class QuoteRepository:
    """Repository for quote database operations"""

    @staticmethod
    def get_by_id(db: Session, quote_id: int) -> Optional[Quote]:
        return db.query(Quote).filter(Quote.id == quote_id).first()

    @staticmethod
    def find_latest_draft(db: Session, provider_id: int, move_date: date) -> Optional[Quote]:
        """Most recent unconfirmed quote for the provider and move date"""
        return (
            db.query(Quote)
            .filter(
                Quote.provider_id == provider_id,
                Quote.move_date == move_date,
                Quote.status == "draft",
            )
            .order_by(Quote.created_at.desc(), Quote.id.desc())
            .first()
        )

    @staticmethod
    def save(db: Session, quote: Quote) -> Quote:
        db.add(quote)
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(quote)
        return quote
