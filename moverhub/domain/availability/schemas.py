"""Availability domain schemas - Pydantic models for validation"""

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class CapacityRuleIn(BaseModel):
    """One weekday rule as saved from the provider settings page"""

    weekday: int = Field(ge=0, le=6)
    morning_jobs: Optional[int] = Field(default=0, ge=0)
    afternoon_jobs: Optional[int] = Field(default=0, ge=0)
    morning_start: str = "08:00:00"
    afternoon_start: str = "12:00:00"
    afternoon_end: str = "17:00:00"


class ReplaceRulesRequest(BaseModel):
    providerId: Optional[int] = None
    businessId: Optional[int] = None
    rules: list[CapacityRuleIn] = []

    @field_validator("rules")
    @classmethod
    def unique_weekdays(cls, v: list[CapacityRuleIn]) -> list[CapacityRuleIn]:
        weekdays = [rule.weekday for rule in v]
        if len(weekdays) != len(set(weekdays)):
            raise ValueError("Each weekday may appear only once")
        return v


class CapacityRuleResponse(BaseModel):
    id: int
    provider_id: int
    weekday: int
    morning_jobs: Optional[int]
    afternoon_jobs: Optional[int]
    morning_start: Optional[str]
    afternoon_start: Optional[str]
    afternoon_end: Optional[str]

    class Config:
        from_attributes = True


class OverrideRequest(BaseModel):
    providerId: Optional[int] = None
    businessId: Optional[int] = None
    date: date
    kind: Literal["block", "extra"]
    timeSlot: Optional[Literal["full_day", "morning", "afternoon"]] = None
    maxConcurrentJobs: Optional[int] = Field(default=None, ge=0)
    note: Optional[str] = Field(default=None, max_length=1000)

    @model_validator(mode="after")
    def extra_needs_capacity(self):
        if self.kind == "extra" and self.maxConcurrentJobs is None:
            raise ValueError("maxConcurrentJobs is required for extra overrides")
        return self


class OverrideResponse(BaseModel):
    id: int
    provider_id: int
    date: date
    kind: str
    time_slot: Optional[str]
    max_concurrent_jobs: Optional[int]
    note: Optional[str]

    class Config:
        from_attributes = True


class AvailabilityCheckResponse(BaseModel):
    available: bool
    reason: Optional[str] = None
    blocked: bool = False
    booked: int = 0
    maxJobs: Optional[int] = None


class SlotResponse(BaseModel):
    date: date
    timeSlot: str
    available: bool
    maxJobs: int
    currentBookings: int
    blocked: bool = False
