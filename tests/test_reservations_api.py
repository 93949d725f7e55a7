"""HTTP contract tests for POST /reservations."""

import pytest

from moverhub.domain.availability.service import AvailabilityEvaluator, AvailabilityResult
from moverhub.domain.notifications.repository import NotificationRepository
from moverhub.domain.quotes.service import QuoteLedger
from moverhub.domain.scheduling.repository import ScheduledJobRepository
from moverhub.models import (
    AvailabilityOverride,
    Booking,
    CapacityRule,
    Notification,
    Quote,
    ScheduledJob,
)
from tests.conftest import CHRISTMAS, MONDAY, TUESDAY, add_job, add_rule, reservation_body


def active_jobs(db, provider, day, time_slot="morning"):
    return (
        db.query(ScheduledJob)
        .filter(
            ScheduledJob.provider_id == provider.id,
            ScheduledJob.scheduled_date == day,
            ScheduledJob.time_slot == time_slot,
            ScheduledJob.status != "cancelled",
        )
        .count()
    )


class TestScenarios:
    def test_a_missing_rule_is_created_and_reservation_succeeds(self, client, db, provider):
        response = client.post("/reservations", json=reservation_body(provider, MONDAY))
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["reservation_id"] == body["scheduled_job"]["id"]
        assert body["scheduled_job"]["scheduled_date"] == "2030-01-07"
        assert body["scheduled_job"]["scheduled_start_time"] == "08:00:00"
        assert body["scheduled_job"]["scheduled_end_time"] == "12:00:00"
        assert body["scheduled_job"]["crew_size"] == 3
        assert body["quote_id"] is not None
        assert body["references"]["rule_auto_created"] is True
        assert body["references"]["scheduled_job_id"] == body["reservation_id"]

        rule = db.query(CapacityRule).filter_by(provider_id=provider.id, weekday=1).one()
        assert rule.morning_jobs == 3

    def test_b_fully_booked_slot_is_rejected(self, client, db, provider):
        add_rule(db, provider, weekday=2, morning=2)
        add_job(db, provider, TUESDAY)
        add_job(db, provider, TUESDAY)
        response = client.post("/reservations", json=reservation_body(provider, TUESDAY))
        assert response.status_code == 400
        body = response.json()
        assert body["fullyBooked"] is True
        assert body["available"] is False
        assert body["error"]
        assert active_jobs(db, provider, TUESDAY) == 2

    def test_c_blocked_date_rejects_every_slot(self, client, db, provider):
        add_rule(db, provider, weekday=4, morning=5, afternoon=5)
        db.add(AvailabilityOverride(provider_id=provider.id, date=CHRISTMAS, kind="block", time_slot="full_day"))
        db.commit()
        for slot in ("morning", "afternoon"):
            response = client.post("/reservations", json=reservation_body(provider, CHRISTMAS, slot))
            assert response.status_code == 400
            assert response.json()["blocked"] is True
        assert db.query(ScheduledJob).count() == 0
        assert db.query(Quote).count() == 0

    def test_d_race_for_last_unit_yields_conflict(self, client, db, provider, monkeypatch):
        add_rule(db, provider, weekday=1, morning=1)
        first = client.post("/reservations", json=reservation_body(provider, MONDAY))
        assert first.status_code == 200

        # Second request passed its availability check before the first committed
        monkeypatch.setattr(
            AvailabilityEvaluator,
            "is_available",
            lambda self, *args, **kwargs: AvailabilityResult(
                available=True, booked=0, max_jobs=1, capacity=1
            ),
        )
        second = client.post("/reservations", json=reservation_body(provider, MONDAY))
        assert second.status_code == 409
        assert second.json()["conflict"] is True
        assert active_jobs(db, provider, MONDAY) == 1

    def test_d_unique_constraint_rejects_duplicate_unit(self, client, db, provider, monkeypatch):
        add_rule(db, provider, weekday=1, morning=1)
        add_job(db, provider, MONDAY)
        monkeypatch.setattr(
            AvailabilityEvaluator,
            "is_available",
            lambda self, *args, **kwargs: AvailabilityResult(
                available=True, booked=0, max_jobs=1, capacity=1
            ),
        )
        # Both requests saw unit 1 as free
        monkeypatch.setattr(ScheduledJobRepository, "taken_sequences", staticmethod(lambda *args: set()))
        response = client.post("/reservations", json=reservation_body(provider, MONDAY))
        assert response.status_code == 409
        body = response.json()
        assert body["conflict"] is True
        assert "details" in body
        assert active_jobs(db, provider, MONDAY) == 1


class TestProperties:
    def test_capacity_never_exceeded(self, client, db, provider):
        add_rule(db, provider, weekday=1, morning=2, afternoon=1)
        statuses = [
            client.post("/reservations", json=reservation_body(provider, MONDAY)).status_code
            for _ in range(4)
        ]
        assert statuses == [200, 200, 400, 400]
        assert active_jobs(db, provider, MONDAY) == 2
        sequences = {job.slot_sequence for job in db.query(ScheduledJob).all()}
        assert sequences == {1, 2}

    def test_cancelled_job_releases_its_unit(self, client, db, provider):
        add_rule(db, provider, weekday=1, morning=1)
        add_job(db, provider, MONDAY, status="cancelled")
        response = client.post("/reservations", json=reservation_body(provider, MONDAY))
        assert response.status_code == 200

    def test_quote_failure_degrades_to_null_quote(self, client, db, provider, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("quotes table locked")

        monkeypatch.setattr(QuoteLedger, "upsert_quote", boom)
        response = client.post("/reservations", json=reservation_body(provider, MONDAY))
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["quote_id"] is None
        assert body["scheduled_job"]["quote_id"] is None
        assert active_jobs(db, provider, MONDAY) == 1

    def test_degraded_quote_keeps_client_breakdown_in_booking(
        self, client, db, provider, customer, auth_state, monkeypatch
    ):
        def boom(*args, **kwargs):
            raise RuntimeError("quotes table locked")

        monkeypatch.setattr(QuoteLedger, "upsert_quote", boom)
        auth_state["user"] = customer
        response = client.post(
            "/reservations",
            json=reservation_body(
                provider, MONDAY, quoteBreakdown={"packing_help": "full", "stairs_flights": 2}
            ),
        )
        assert response.status_code == 200
        body = response.json()
        assert body["quote_id"] is None
        booking = db.get(Booking, body["booking_id"])
        assert booking.service_details["packing_help"] == "full"
        assert booking.service_details["stairs_flights"] == 2
        assert booking.service_details["quote_id"] is None

    def test_request_fields_win_in_mirrored_booking(self, client, db, provider, customer, auth_state):
        quote = Quote(
            provider_id=provider.id,
            move_date=MONDAY,
            status="draft",
            price_total_cents=30000,
            breakdown={"stairs_flights": 1, "packing_help": "full"},
        )
        db.add(quote)
        db.commit()
        auth_state["user"] = customer

        response = client.post(
            "/reservations",
            json=reservation_body(provider, MONDAY, quoteId=quote.id, stairs_flights=3),
        )
        assert response.status_code == 200
        body = response.json()
        assert body["quote_id"] == quote.id
        booking = db.get(Booking, body["booking_id"])
        assert booking.customer_id == customer.id
        assert booking.service_details["stairs_flights"] == 3
        assert booking.service_details["packing_help"] == "full"
        assert booking.service_city == "Austin"

        db.refresh(quote)
        assert quote.status == "confirmed"
        assert quote.customer_id == customer.id


class TestRequestHandling:
    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"teamSize": 50}, "teamSize"),
            ({"totalPriceCents": -1}, "totalPriceCents"),
            ({"providerId": "abc"}, "providerId"),
            ({"stairs_flights": -2}, "stairs_flights"),
            ({"pickupAddresses": "123 Main St"}, "pickupAddresses"),
        ],
    )
    def test_malformed_field_is_reported_as_invalid(self, client, db, provider, overrides, field):
        response = client.post("/reservations", json=reservation_body(provider, MONDAY, **overrides))
        assert response.status_code == 400
        body = response.json()
        assert body["invalid"] is True
        assert body["error"]
        assert field in body["invalidFields"]
        assert "detail" not in body
        assert db.query(ScheduledJob).count() == 0
        assert db.query(Quote).count() == 0

    def test_null_address_lists_are_tolerated(self, client, db, provider, customer, auth_state):
        auth_state["user"] = customer
        response = client.post(
            "/reservations",
            json=reservation_body(provider, MONDAY, pickupAddresses=None, deliveryAddresses=None),
        )
        assert response.status_code == 200
        body = response.json()
        quote = db.get(Quote, body["quote_id"])
        assert quote.pickup_address is None
        booking = db.get(Booking, body["booking_id"])
        assert booking.service_details["pickup_addresses"] == []
        assert booking.service_details["from_address"] is None

    def test_missing_fields_abort_before_any_write(self, client, db):
        response = client.post("/reservations", json={"fullName": "Nobody"})
        assert response.status_code == 400
        body = response.json()
        assert body["invalid"] is True
        assert set(body["missingFields"]) == {"providerId", "moveDate", "timeSlot"}
        assert db.query(CapacityRule).count() == 0
        assert db.query(Quote).count() == 0

    def test_unknown_provider_is_missing(self, client):
        response = client.post(
            "/reservations",
            json={"providerId": 999, "moveDate": "2030-01-07", "timeSlot": "morning"},
        )
        assert response.status_code == 400
        assert response.json()["missingFields"] == ["providerId"]

    def test_bad_time_slot(self, client, provider):
        response = client.post("/reservations", json=reservation_body(provider, time_slot="evening"))
        assert response.status_code == 400
        assert response.json()["invalid"] is True

    def test_bad_date(self, client, provider):
        response = client.post("/reservations", json=reservation_body(provider, moveDate="next monday"))
        assert response.status_code == 400
        assert response.json()["invalid"] is True

    def test_business_id_resolves_provider(self, client, db, provider, business):
        body = reservation_body(provider, MONDAY)
        del body["providerId"]
        body["businessId"] = business.id
        response = client.post("/reservations", json=body)
        assert response.status_code == 200
        assert response.json()["references"]["provider_id"] == provider.id

    def test_guest_gets_no_booking(self, client, db, provider):
        response = client.post("/reservations", json=reservation_body(provider, MONDAY))
        assert response.json()["booking_id"] is None
        assert db.query(Booking).count() == 0

    def test_stale_client_hint_is_ignored(self, client, provider):
        response = client.post("/reservations", json=reservation_body(provider, MONDAY, available=False))
        assert response.status_code == 200

    def test_job_insert_failure_is_internal(self, client, db, provider, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(ScheduledJobRepository, "create_job", boom)
        response = client.post("/reservations", json=reservation_body(provider, MONDAY))
        assert response.status_code == 500
        body = response.json()
        assert body["internal"] is True
        assert body["details"] == "connection reset"


class TestProviderNotification:
    def test_owner_is_notified(self, client, db, provider, owner):
        response = client.post("/reservations", json=reservation_body(provider, MONDAY))
        job_id = response.json()["reservation_id"]
        notification = db.query(Notification).filter_by(user_id=owner.id).one()
        assert notification.title == "New Reservation"
        assert notification.type == "reservation"
        assert notification.related_id == job_id
        assert notification.message == (
            "Casey Customer has booked a move on 01/07/2030 (morning). Total: $450.00"
        )
        assert response.json()["references"]["notification_id"] == notification.id

    def test_notification_failure_does_not_fail_reservation(self, client, db, provider, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("notifications down")

        monkeypatch.setattr(NotificationRepository, "create", staticmethod(boom))
        response = client.post("/reservations", json=reservation_body(provider, MONDAY))
        assert response.status_code == 200
        assert response.json()["references"]["notification_id"] is None
        assert db.query(Notification).count() == 0
