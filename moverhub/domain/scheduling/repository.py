"""Scheduled job repository - the capacity-consuming records"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from ...models import ACTIVE_JOB_STATUSES, TIME_SLOT_WINDOWS, ScheduledJob
from ..reservations.errors import SlotConflict

logger = logging.getLogger(__name__)


class ScheduledJobRepository:
    """Repository for scheduled job database operations"""

    @staticmethod
    def count_active(db: Session, provider_id: int, day: date, time_slot: str) -> int:
        """Jobs holding capacity (anything not cancelled) for a provider slot"""
        return (
            db.query(func.count(ScheduledJob.id))
            .filter(
                ScheduledJob.provider_id == provider_id,
                ScheduledJob.scheduled_date == day,
                ScheduledJob.time_slot == time_slot,
                ScheduledJob.status.in_(ACTIVE_JOB_STATUSES),
            )
            .scalar()
            or 0
        )

    @staticmethod
    def count_active_by_slot(
        db: Session, provider_id: int, start: date, end: date
    ) -> dict[tuple[date, str], int]:
        rows = (
            db.query(ScheduledJob.scheduled_date, ScheduledJob.time_slot, func.count(ScheduledJob.id))
            .filter(
                ScheduledJob.provider_id == provider_id,
                ScheduledJob.scheduled_date >= start,
                ScheduledJob.scheduled_date <= end,
                ScheduledJob.status.in_(ACTIVE_JOB_STATUSES),
            )
            .group_by(ScheduledJob.scheduled_date, ScheduledJob.time_slot)
            .all()
        )
        return {(row[0], row[1]): row[2] for row in rows}

    @staticmethod
    def taken_sequences(db: Session, provider_id: int, day: date, time_slot: str) -> set[int]:
        rows = (
            db.query(ScheduledJob.slot_sequence)
            .filter(
                ScheduledJob.provider_id == provider_id,
                ScheduledJob.scheduled_date == day,
                ScheduledJob.time_slot == time_slot,
                ScheduledJob.slot_sequence.isnot(None),
            )
            .all()
        )
        return {row[0] for row in rows}

    @classmethod
    def create_job(
        cls,
        db: Session,
        provider_id: int,
        quote_id: Optional[int],
        day: date,
        time_slot: str,
        crew_size: int,
        max_jobs: int,
    ) -> ScheduledJob:
        """
        Claim one capacity unit and insert the job.

        The job takes the lowest free slot_sequence in 1..max_jobs. The unique
        constraint on (provider_id, scheduled_date, time_slot, slot_sequence)
        makes the insert the linearization point: of two requests that picked
        the same unit, one commits and the other gets SlotConflict.
        """
        taken = cls.taken_sequences(db, provider_id, day, time_slot)
        free = [seq for seq in range(1, max_jobs + 1) if seq not in taken]
        if not free:
            logger.warning(
                f"⚠️ No free capacity unit for provider {provider_id} {day} {time_slot} "
                f"({len(taken)}/{max_jobs})"
            )
            raise SlotConflict(
                "This time slot was just booked by another customer. Please select another time."
            )

        start_time, end_time = TIME_SLOT_WINDOWS[time_slot]
        job = ScheduledJob(
            provider_id=provider_id,
            quote_id=quote_id,
            scheduled_date=day,
            time_slot=time_slot,
            slot_sequence=free[0],
            scheduled_start_time=start_time,
            scheduled_end_time=end_time,
            crew_size=crew_size,
            status="scheduled",
        )
        db.add(job)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.warning(
                f"⚠️ Lost race for provider {provider_id} {day} {time_slot} unit {free[0]}: {e.orig}"
            )
            raise SlotConflict(
                "This time slot was just booked by another customer. Please select another time.",
                details=str(e.orig),
            ) from e
        db.refresh(job)
        return job

    @staticmethod
    def list_jobs(
        db: Session, provider_id: int, start: Optional[date] = None, end: Optional[date] = None
    ) -> list[ScheduledJob]:
        query = (
            db.query(ScheduledJob)
            .options(joinedload(ScheduledJob.quote))
            .filter(ScheduledJob.provider_id == provider_id)
        )
        if start:
            query = query.filter(ScheduledJob.scheduled_date >= start)
        if end:
            query = query.filter(ScheduledJob.scheduled_date <= end)
        return query.order_by(ScheduledJob.scheduled_date, ScheduledJob.scheduled_start_time).all()
