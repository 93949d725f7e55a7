"""Availability repository - capacity rules and date overrides"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...config import DEFAULT_AFTERNOON_JOBS, DEFAULT_MORNING_JOBS
from ...models import AvailabilityOverride, CapacityRule

logger = logging.getLogger(__name__)


class CapacityRuleRepository:
    """Per-provider, per-weekday capacity rules. One row per (provider, weekday)."""

    @staticmethod
    def get_rule(db: Session, provider_id: int, weekday: int) -> Optional[CapacityRule]:
        return (
            db.query(CapacityRule)
            .filter(CapacityRule.provider_id == provider_id, CapacityRule.weekday == weekday)
            .first()
        )

    @staticmethod
    def list_rules(db: Session, provider_id: int) -> list[CapacityRule]:
        return (
            db.query(CapacityRule)
            .filter(CapacityRule.provider_id == provider_id)
            .order_by(CapacityRule.weekday)
            .all()
        )

    @classmethod
    def create_default_rule(cls, db: Session, provider_id: int, weekday: int) -> CapacityRule:
        """
        Insert the default rule for a weekday.

        Safe under concurrent callers: the unique constraint rejects the
        duplicate and the loser re-reads the winner's row.
        """
        rule = CapacityRule(
            provider_id=provider_id,
            weekday=weekday,
            morning_jobs=DEFAULT_MORNING_JOBS,
            afternoon_jobs=DEFAULT_AFTERNOON_JOBS,
        )
        db.add(rule)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            existing = cls.get_rule(db, provider_id, weekday)
            if existing is None:
                raise
            logger.info(
                f"ℹ️ Rule for provider {provider_id} weekday {weekday} already created concurrently"
            )
            return existing
        db.refresh(rule)
        logger.info(
            f"✅ Auto-created default rule for provider {provider_id} weekday {weekday} "
            f"({rule.morning_jobs} morning / {rule.afternoon_jobs} afternoon)"
        )
        return rule

    @classmethod
    def resolve_rule(cls, db: Session, provider_id: int, weekday: int) -> tuple[CapacityRule, bool]:
        """Get the weekday rule, creating the default one if missing. Returns (rule, created)."""
        rule = cls.get_rule(db, provider_id, weekday)
        if rule:
            return rule, False
        return cls.create_default_rule(db, provider_id, weekday), True

    @staticmethod
    def replace_rules(db: Session, provider_id: int, rules: list[dict]) -> list[CapacityRule]:
        """Replace all weekday rules of a provider in one transaction"""
        try:
            db.query(CapacityRule).filter(CapacityRule.provider_id == provider_id).delete(
                synchronize_session=False
            )
            created = [CapacityRule(provider_id=provider_id, **data) for data in rules]
            db.add_all(created)
            db.commit()
        except Exception:
            db.rollback()
            raise
        for rule in created:
            db.refresh(rule)
        return sorted(created, key=lambda r: r.weekday)


class OverrideRepository:
    """Date-level blocks and extra capacity windows"""

    @staticmethod
    def list_for_date(db: Session, provider_id: int, day: date) -> list[AvailabilityOverride]:
        return (
            db.query(AvailabilityOverride)
            .filter(AvailabilityOverride.provider_id == provider_id, AvailabilityOverride.date == day)
            .all()
        )

    @staticmethod
    def list_for_range(
        db: Session, provider_id: int, start: date, end: date
    ) -> list[AvailabilityOverride]:
        return (
            db.query(AvailabilityOverride)
            .filter(
                AvailabilityOverride.provider_id == provider_id,
                AvailabilityOverride.date >= start,
                AvailabilityOverride.date <= end,
            )
            .all()
        )

    @staticmethod
    def find(
        db: Session, provider_id: int, day: date, kind: str, time_slot: Optional[str]
    ) -> Optional[AvailabilityOverride]:
        query = db.query(AvailabilityOverride).filter(
            AvailabilityOverride.provider_id == provider_id,
            AvailabilityOverride.date == day,
            AvailabilityOverride.kind == kind,
        )
        if time_slot is None:
            query = query.filter(AvailabilityOverride.time_slot.is_(None))
        else:
            query = query.filter(AvailabilityOverride.time_slot == time_slot)
        return query.first()

    @staticmethod
    def delete(
        db: Session,
        provider_id: int,
        day: date,
        kind: Optional[str] = None,
        time_slot: Optional[str] = None,
        commit: bool = True,
    ) -> int:
        query = db.query(AvailabilityOverride).filter(
            AvailabilityOverride.provider_id == provider_id, AvailabilityOverride.date == day
        )
        if kind:
            query = query.filter(AvailabilityOverride.kind == kind)
        if time_slot:
            query = query.filter(AvailabilityOverride.time_slot == time_slot)
        deleted = query.delete(synchronize_session=False)
        if commit:
            db.commit()
        return deleted

    @staticmethod
    def save(db: Session, override: AvailabilityOverride) -> AvailabilityOverride:
        db.add(override)
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(override)
        return override
