"""Shared test fixtures and helpers."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.setdefault("FIREBASE_PROJECT_ID", "moverhub-test")

from datetime import date
from typing import Optional

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from moverhub.auth import get_current_user, get_optional_user
from moverhub.database import Base, get_db
from moverhub.main import app
from moverhub.models import (
    ACTIVE_JOB_STATUSES,
    TIME_SLOT_WINDOWS,
    Business,
    CapacityRule,
    MoversProvider,
    ScheduledJob,
    User,
)
from moverhub.domain.reservations.router import rate_limit_reservations

# Fixed calendar: 2030-01-07 is a Monday, 2030-01-08 a Tuesday
MONDAY = date(2030, 1, 7)
TUESDAY = date(2030, 1, 8)
WEDNESDAY = date(2030, 1, 9)
CHRISTMAS = date(2025, 12, 25)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def owner(db):
    user = User(firebase_uid="owner-uid", email="owner@movers.test", full_name="Olivia Owner")
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def customer(db):
    user = User(firebase_uid="customer-uid", email="casey@example.com", full_name="Casey Customer")
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def business(db, owner):
    business = Business(owner_user_id=owner.id, name="Swift Movers", slug="swift-movers")
    db.add(business)
    db.commit()
    return business


@pytest.fixture
def provider(db, owner, business):
    provider = MoversProvider(business_id=business.id, owner_user_id=owner.id, name="Swift Movers")
    db.add(provider)
    db.commit()
    return provider


@pytest.fixture
def auth_state():
    """Who the API sees as signed in; None means guest"""
    return {"user": None}


@pytest.fixture
def client(db, auth_state):
    def current_user():
        if auth_state["user"] is None:
            raise HTTPException(status_code=401, detail="Not authenticated")
        return auth_state["user"]

    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_optional_user] = lambda: auth_state["user"]
    app.dependency_overrides[get_current_user] = current_user
    app.dependency_overrides[rate_limit_reservations] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


def add_rule(db, provider, weekday: int, morning: Optional[int] = 3, afternoon: Optional[int] = 2):
    rule = CapacityRule(
        provider_id=provider.id, weekday=weekday, morning_jobs=morning, afternoon_jobs=afternoon
    )
    db.add(rule)
    db.commit()
    return rule


def add_job(db, provider, day: date, time_slot: str = "morning", status: str = "scheduled"):
    """Insert a job the way the job store would: active jobs hold the next sequence"""
    sequence = None
    if status in ACTIVE_JOB_STATUSES:
        taken = {
            row[0]
            for row in db.query(ScheduledJob.slot_sequence).filter(
                ScheduledJob.provider_id == provider.id,
                ScheduledJob.scheduled_date == day,
                ScheduledJob.time_slot == time_slot,
                ScheduledJob.slot_sequence.isnot(None),
            )
        }
        sequence = next(n for n in range(1, len(taken) + 2) if n not in taken)
    start, end = TIME_SLOT_WINDOWS[time_slot]
    job = ScheduledJob(
        provider_id=provider.id,
        scheduled_date=day,
        time_slot=time_slot,
        slot_sequence=sequence,
        scheduled_start_time=start,
        scheduled_end_time=end,
        crew_size=2,
        status=status,
    )
    db.add(job)
    db.commit()
    return job


def reservation_body(provider, day: date = MONDAY, time_slot: str = "morning", **overrides) -> dict:
    body = {
        "providerId": provider.id,
        "moveDate": day.isoformat(),
        "timeSlot": time_slot,
        "fullName": "Casey Customer",
        "email": "casey@example.com",
        "phone": "(512) 555-0142",
        "pickupAddresses": ["123 Main St, Austin, TX 78701"],
        "deliveryAddresses": ["456 Oak Ave, Round Rock, TX 78664"],
        "teamSize": 3,
        "totalPriceCents": 45000,
    }
    body.update(overrides)
    return body
