from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

TIME_SLOTS = ("morning", "afternoon")

# Slot -> (scheduled_start_time, scheduled_end_time)
TIME_SLOT_WINDOWS = {
    "morning": ("08:00:00", "12:00:00"),
    "afternoon": ("12:00:00", "17:00:00"),
}

# Jobs in these states hold a slot; "cancelled" frees it
ACTIVE_JOB_STATUSES = ("scheduled", "in_progress", "completed")
JOB_STATUSES = ACTIVE_JOB_STATUSES + ("cancelled",)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    firebase_uid = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    notifications = relationship("Notification", back_populates="user")


class Business(Base):
    __tablename__ = "businesses"

    id = Column(Integer, primary_key=True, index=True)
    owner_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    provider = relationship("MoversProvider", back_populates="business", uselist=False)


class MoversProvider(Base):
    __tablename__ = "movers_providers"

    id = Column(Integer, primary_key=True, index=True)
    # Marketplace listing this provider operates under (one provider per business)
    business_id = Column(Integer, ForeignKey("businesses.id"), unique=True, nullable=True)
    owner_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    name = Column(String(255), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    business = relationship("Business", back_populates="provider")
    rules = relationship("CapacityRule", back_populates="provider")


class CapacityRule(Base):
    """Weekday capacity for a provider: max concurrent jobs per slot"""

    __tablename__ = "movers_availability_rules"
    __table_args__ = (
        UniqueConstraint("provider_id", "weekday", name="uq_availability_rule_provider_weekday"),
        CheckConstraint("weekday >= 0 AND weekday <= 6", name="ck_availability_rule_weekday"),
    )

    id = Column(Integer, primary_key=True, index=True)
    provider_id = Column(Integer, ForeignKey("movers_providers.id"), nullable=False, index=True)
    weekday = Column(Integer, nullable=False)  # 0 = Sunday ... 6 = Saturday
    morning_jobs = Column(Integer, nullable=True)
    afternoon_jobs = Column(Integer, nullable=True)
    morning_start = Column(String(10), default="08:00:00")
    afternoon_start = Column(String(10), default="12:00:00")
    afternoon_end = Column(String(10), default="17:00:00")
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    provider = relationship("MoversProvider", back_populates="rules")

    def max_jobs_for(self, time_slot: str):
        return self.morning_jobs if time_slot == "morning" else self.afternoon_jobs


class AvailabilityOverride(Base):
    """Date-level exception to the weekday rule"""

    __tablename__ = "movers_availability_overrides"
    __table_args__ = (
        UniqueConstraint(
            "provider_id", "date", "kind", "time_slot", name="uq_availability_override_slot"
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    provider_id = Column(Integer, ForeignKey("movers_providers.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    kind = Column(String(20), nullable=False)  # block, extra
    time_slot = Column(String(20), nullable=True)  # full_day, morning, afternoon (blocks only)
    max_concurrent_jobs = Column(Integer, nullable=True)  # extra only
    note = Column(String(1000), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Quote(Base):
    __tablename__ = "movers_quotes"
    __table_args__ = (
        CheckConstraint("price_total_cents >= 0", name="ck_quote_price_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    provider_id = Column(Integer, ForeignKey("movers_providers.id"), nullable=True, index=True)
    customer_id = Column(Integer, ForeignKey("users.id"), nullable=True)  # NULL for guests
    full_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    pickup_address = Column(String(500), nullable=True)
    dropoff_address = Column(String(500), nullable=True)
    move_date = Column(Date, nullable=True, index=True)
    crew_size = Column(Integer, nullable=True)
    price_total_cents = Column(Integer, default=0, nullable=False)
    status = Column(String(20), default="draft", nullable=False)  # draft, confirmed
    breakdown = Column(JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class ScheduledJob(Base):
    """A confirmed slot assignment; the record that consumes capacity"""

    __tablename__ = "movers_scheduled_jobs"
    __table_args__ = (
        # One active job per capacity unit. Cancelled jobs release their sequence (NULL).
        UniqueConstraint(
            "provider_id",
            "scheduled_date",
            "time_slot",
            "slot_sequence",
            name="uq_scheduled_job_slot_sequence",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    provider_id = Column(Integer, ForeignKey("movers_providers.id"), nullable=False, index=True)
    quote_id = Column(Integer, ForeignKey("movers_quotes.id"), nullable=True)
    scheduled_date = Column(Date, nullable=False, index=True)
    time_slot = Column(String(20), nullable=False)  # morning, afternoon
    slot_sequence = Column(Integer, nullable=True)  # 1..max_jobs while active
    scheduled_start_time = Column(String(10), nullable=True)  # HH:MM:SS
    scheduled_end_time = Column(String(10), nullable=True)
    crew_size = Column(Integer, nullable=True)
    status = Column(String(20), default="scheduled", nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    quote = relationship("Quote")


class Booking(Base):
    """Customer-facing mirror of a confirmed reservation"""

    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    service_type = Column(String(100), default="moving")
    booking_status = Column(String(50), default="confirmed")
    requested_date = Column(Date, nullable=True)
    requested_time = Column(String(10), nullable=True)
    total_price_cents = Column(Integer, default=0)
    base_price_cents = Column(Integer, default=0)
    service_address = Column(String(500), nullable=True)
    service_city = Column(String(255), nullable=True)
    service_state = Column(String(50), nullable=True)
    service_postal_code = Column(String(20), nullable=True)
    customer_email = Column(String(255), nullable=True)
    customer_phone = Column(String(50), nullable=True)
    service_details = Column(JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(String(2000), nullable=True)
    type = Column(String(50), nullable=True)  # reservation, ...
    related_id = Column(Integer, nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    user = relationship("User", back_populates="notifications")
