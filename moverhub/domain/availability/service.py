"""
Availability evaluation.

The answer is always recomputed from primary data: the weekday rule, the
date's overrides and a live count of jobs holding capacity. Any cached or
remote "available" flag a caller passes in is a hint only; it is logged when
it disagrees and never decides the outcome.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ...config import ALLOW_UNCONFIGURED_SLOTS, DEFAULT_AFTERNOON_JOBS, DEFAULT_MORNING_JOBS
from ...models import TIME_SLOTS, AvailabilityOverride, CapacityRule
from ...shared.validators import weekday_of
from ..scheduling.repository import ScheduledJobRepository
from .repository import CapacityRuleRepository, OverrideRepository

logger = logging.getLogger(__name__)

MAX_SLOT_RANGE_DAYS = 62


@dataclass
class AvailabilityResult:
    available: bool
    reason: Optional[str] = None
    blocked: bool = False
    booked: int = 0
    max_jobs: Optional[int] = None
    # Units the job store may hand out; 1 when an unconfigured slot is let through
    capacity: int = 0
    rule_id: Optional[int] = None
    rule_created: bool = False


@dataclass
class SlotView:
    date: date
    time_slot: str
    available: bool
    max_jobs: int
    current_bookings: int
    blocked: bool = False
    notes: list[str] = field(default_factory=list)


def _blocking_override(
    overrides: list[AvailabilityOverride], time_slot: str
) -> Optional[AvailabilityOverride]:
    for override in overrides:
        if override.kind == "block" and override.time_slot in (None, "full_day", time_slot):
            return override
    return None


def _extra_capacity(overrides: list[AvailabilityOverride]) -> Optional[int]:
    for override in overrides:
        if override.kind == "extra" and override.max_concurrent_jobs is not None:
            return override.max_concurrent_jobs
    return None


def _default_max_jobs(time_slot: str) -> int:
    return DEFAULT_MORNING_JOBS if time_slot == "morning" else DEFAULT_AFTERNOON_JOBS


class AvailabilityEvaluator:
    """Decides whether a provider slot still has capacity"""

    def __init__(self, db: Session):
        self.db = db
        self.rules = CapacityRuleRepository()
        self.overrides = OverrideRepository()
        self.jobs = ScheduledJobRepository()

    def resolve_rule(self, provider_id: int, day: date) -> tuple[CapacityRule, bool]:
        """Weekday rule for the date, auto-provisioning the default when missing"""
        return self.rules.resolve_rule(self.db, provider_id, weekday_of(day))

    def is_available(
        self,
        provider_id: int,
        day: date,
        time_slot: str,
        rule: Optional[CapacityRule] = None,
        auto_create: bool = True,
        hint: Optional[bool] = None,
    ) -> AvailabilityResult:
        """
        Evaluate one slot.

        With ``auto_create`` a missing weekday rule is created with defaults;
        without it the defaults are applied in memory only (read-only checks).
        """
        rule_created = False
        if rule is None:
            if auto_create:
                rule, rule_created = self.resolve_rule(provider_id, day)
            else:
                rule = self.rules.get_rule(self.db, provider_id, weekday_of(day))

        overrides = self.overrides.list_for_date(self.db, provider_id, day)
        block = _blocking_override(overrides, time_slot)
        if block is not None:
            result = AvailabilityResult(
                available=False,
                reason="date blocked",
                blocked=True,
                rule_id=rule.id if rule else None,
                rule_created=rule_created,
            )
            self._compare_hint(hint, result, provider_id, day, time_slot)
            return result

        booked = self.jobs.count_active(self.db, provider_id, day, time_slot)
        if rule is not None:
            max_jobs = rule.max_jobs_for(time_slot)
        else:
            max_jobs = _default_max_jobs(time_slot)
        extra = _extra_capacity(overrides)
        if extra is not None:
            max_jobs = extra

        result = self._decide(booked, max_jobs, allow_unconfigured=extra is None)
        result.rule_id = rule.id if rule else None
        result.rule_created = rule_created
        self._compare_hint(hint, result, provider_id, day, time_slot)
        return result

    @staticmethod
    def _decide(
        booked: int, max_jobs: Optional[int], allow_unconfigured: bool = True
    ) -> AvailabilityResult:
        # An explicit override of 0 closes the slot; only rule gaps get the shim
        if not max_jobs:
            if booked == 0 and allow_unconfigured and ALLOW_UNCONFIGURED_SLOTS:
                logger.warning("⚠️ Slot has NULL/0 max jobs and no bookings - treating as available")
                return AvailabilityResult(available=True, booked=0, max_jobs=max_jobs, capacity=1)
            return AvailabilityResult(
                available=False,
                reason="slot has no capacity configured" if booked == 0 else "reached capacity",
                booked=booked,
                max_jobs=max_jobs,
            )

        if booked < max_jobs:
            return AvailabilityResult(available=True, booked=booked, max_jobs=max_jobs, capacity=max_jobs)
        return AvailabilityResult(
            available=False,
            reason=f"fully booked ({booked}/{max_jobs})",
            booked=booked,
            max_jobs=max_jobs,
            capacity=max_jobs,
        )

    @staticmethod
    def _compare_hint(
        hint: Optional[bool], result: AvailabilityResult, provider_id: int, day: date, time_slot: str
    ) -> None:
        if hint is None or hint == result.available:
            return
        logger.warning(
            f"⚠️ Advisory availability signal ({hint}) disagrees with live counts "
            f"({result.available}) for provider {provider_id} {day} {time_slot}; using live counts"
        )

    def list_slots(self, provider_id: int, start: date, end: date) -> list[SlotView]:
        """Read-only morning/afternoon view for each day in [start, end]"""
        if end < start:
            start, end = end, start
        if (end - start).days > MAX_SLOT_RANGE_DAYS:
            end = start + timedelta(days=MAX_SLOT_RANGE_DAYS)

        rules = {rule.weekday: rule for rule in self.rules.list_rules(self.db, provider_id)}
        overrides_by_date: dict[date, list[AvailabilityOverride]] = {}
        for override in self.overrides.list_for_range(self.db, provider_id, start, end):
            overrides_by_date.setdefault(override.date, []).append(override)
        counts = self.jobs.count_active_by_slot(self.db, provider_id, start, end)

        slots = []
        day = start
        while day <= end:
            overrides = overrides_by_date.get(day, [])
            rule = rules.get(weekday_of(day))
            extra = _extra_capacity(overrides)
            for time_slot in TIME_SLOTS:
                booked = counts.get((day, time_slot), 0)
                if _blocking_override(overrides, time_slot) is not None:
                    slots.append(SlotView(day, time_slot, False, 0, booked, blocked=True))
                    continue
                notes = []
                if rule is not None:
                    max_jobs = rule.max_jobs_for(time_slot)
                else:
                    max_jobs = _default_max_jobs(time_slot)
                    notes.append("default capacity")
                if extra is not None:
                    max_jobs = extra
                    notes.append("extra capacity")
                decision = self._decide(booked, max_jobs, allow_unconfigured=extra is None)
                slots.append(
                    SlotView(day, time_slot, decision.available, max_jobs or 0, booked, notes=notes)
                )
            day += timedelta(days=1)
        return slots
