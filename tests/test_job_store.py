"""Tests for the scheduled job store."""

import pytest

from moverhub.domain.reservations.errors import SlotConflict
from moverhub.domain.scheduling.repository import ScheduledJobRepository
from tests.conftest import MONDAY, TUESDAY, add_job


class TestCreateJob:
    def test_maps_slot_to_window(self, db, provider):
        job = ScheduledJobRepository.create_job(db, provider.id, None, MONDAY, "afternoon", 2, 2)
        assert (job.scheduled_start_time, job.scheduled_end_time) == ("12:00:00", "17:00:00")
        assert job.status == "scheduled"
        assert job.slot_sequence == 1

    def test_takes_lowest_free_unit(self, db, provider):
        add_job(db, provider, MONDAY)
        second = add_job(db, provider, MONDAY)
        second.status = "cancelled"
        second.slot_sequence = None
        db.commit()
        job = ScheduledJobRepository.create_job(db, provider.id, None, MONDAY, "morning", 2, 3)
        assert job.slot_sequence == 2

    def test_no_free_unit_is_a_conflict(self, db, provider):
        add_job(db, provider, MONDAY)
        with pytest.raises(SlotConflict):
            ScheduledJobRepository.create_job(db, provider.id, None, MONDAY, "morning", 2, 1)


class TestQueries:
    def test_count_active_ignores_cancelled(self, db, provider):
        add_job(db, provider, MONDAY)
        add_job(db, provider, MONDAY, status="cancelled")
        add_job(db, provider, MONDAY, status="completed")
        assert ScheduledJobRepository.count_active(db, provider.id, MONDAY, "morning") == 2

    def test_list_jobs_in_range(self, db, provider):
        add_job(db, provider, MONDAY)
        add_job(db, provider, TUESDAY, "afternoon")
        jobs = ScheduledJobRepository.list_jobs(db, provider.id, start=TUESDAY)
        assert [(j.scheduled_date, j.time_slot) for j in jobs] == [(TUESDAY, "afternoon")]
