"""Tests for quote persistence and breakdown merging."""

import pytest

from moverhub.domain.quotes.breakdown import merge_breakdown, normalize_heavy_items_cost
from moverhub.domain.quotes.service import QuoteInput, QuoteLedger
from moverhub.models import Quote
from tests.conftest import MONDAY, TUESDAY


@pytest.fixture
def ledger(db):
    return QuoteLedger(db)


def add_quote(db, provider, day=MONDAY, status="draft", **fields):
    quote = Quote(provider_id=provider.id, move_date=day, status=status, price_total_cents=10000, **fields)
    db.add(quote)
    db.commit()
    return quote


class TestHeavyItemsCost:
    def test_list_is_summed_in_dollars(self):
        items = [
            {"name": "Piano", "price_cents": 15000, "count": 1},
            {"name": "Safe", "price_cents": 7500, "count": 2},
        ]
        assert normalize_heavy_items_cost({"heavy_items": items}) == 300.0

    def test_count_defaults_to_one(self):
        assert normalize_heavy_items_cost({"heavy_items": [{"price_cents": 2550}]}) == 25.5

    def test_zero_count_adds_nothing(self):
        items = [{"price_cents": 15000, "count": 0}, {"price_cents": 2000, "count": "2"}]
        assert normalize_heavy_items_cost({"heavy_items": items}) == 40.0

    def test_precomputed_number_is_accepted(self):
        assert normalize_heavy_items_cost({"heavy_items_cost": "125.50"}) == 125.5

    def test_missing_is_zero(self):
        assert normalize_heavy_items_cost({}) == 0.0


class TestMergeBreakdown:
    def test_richer_incoming_values_win(self):
        merged = merge_breakdown(
            {"stairs_flights": 1, "packing_materials": ["boxes"]},
            {"stairs_flights": 2, "packing_materials": ["tape", "wrap"]},
        )
        assert merged["stairs_flights"] == 2
        assert merged["packing_materials"] == ["tape", "wrap"]

    def test_empty_incoming_values_keep_stored(self):
        merged = merge_breakdown(
            {"heavy_items": [{"price_cents": 10000, "count": 1}], "trip_distances": {"a": 3}},
            {"heavy_items": [], "trip_distances": {}, "packing_help": None},
        )
        assert merged["heavy_items"] == [{"price_cents": 10000, "count": 1}]
        assert merged["trip_distances"] == {"a": 3}
        assert merged["heavy_items_cost"] == 100.0
        assert "packing_help" in merged

    def test_heavy_items_cost_recomputed_from_list(self):
        merged = merge_breakdown(
            {"heavy_items_cost": 999},
            {"heavy_items": [{"price_cents": 5000, "count": 3}]},
        )
        assert merged["heavy_items_cost"] == 150.0


class TestUpsertQuote:
    def test_inserts_confirmed_quote_when_nothing_matches(self, db, provider, ledger):
        quote = ledger.upsert_quote(
            QuoteInput(
                provider_id=provider.id,
                move_date=MONDAY,
                full_name="Casey Customer",
                price_total_cents=45000,
                breakdown={"stairs_flights": 2},
            )
        )
        assert quote.id is not None
        assert quote.status == "confirmed"
        assert quote.price_total_cents == 45000
        assert quote.breakdown["heavy_items_cost"] == 0.0

    def test_explicit_id_is_confirmed(self, db, provider, ledger):
        existing = add_quote(db, provider, full_name="Old Name")
        quote = ledger.upsert_quote(
            QuoteInput(
                provider_id=provider.id,
                move_date=MONDAY,
                existing_quote_id=existing.id,
                full_name="New Name",
                email="new@example.com",
            )
        )
        assert quote.id == existing.id
        assert quote.status == "confirmed"
        assert quote.full_name == "New Name"
        assert quote.price_total_cents == 10000
        assert db.query(Quote).count() == 1

    def test_latest_draft_for_date_is_reused(self, db, provider, ledger):
        add_quote(db, provider)
        newer = add_quote(db, provider)
        add_quote(db, provider, day=TUESDAY)
        quote = ledger.upsert_quote(QuoteInput(provider_id=provider.id, move_date=MONDAY))
        assert quote.id == newer.id
        assert db.query(Quote).count() == 3

    def test_confirmed_quotes_are_not_reused_without_id(self, db, provider, ledger):
        confirmed = add_quote(db, provider, status="confirmed")
        quote = ledger.upsert_quote(QuoteInput(provider_id=provider.id, move_date=MONDAY))
        assert quote.id != confirmed.id

    def test_unknown_id_falls_back_to_draft(self, db, provider, ledger):
        draft = add_quote(db, provider)
        quote = ledger.upsert_quote(
            QuoteInput(provider_id=provider.id, move_date=MONDAY, existing_quote_id=9999)
        )
        assert quote.id == draft.id

    def test_stored_breakdown_is_merged(self, db, provider, ledger):
        existing = add_quote(
            db, provider, breakdown={"heavy_items": [{"price_cents": 20000, "count": 1}], "stairs_flights": 1}
        )
        quote = ledger.upsert_quote(
            QuoteInput(
                provider_id=provider.id,
                move_date=MONDAY,
                existing_quote_id=existing.id,
                breakdown={"heavy_items": [], "stairs_flights": 3},
            )
        )
        assert quote.breakdown["stairs_flights"] == 3
        assert quote.breakdown["heavy_items_cost"] == 200.0


class TestCreateDraft:
    def test_draft_is_stored_with_normalized_breakdown(self, db, provider, customer, ledger):
        quote = ledger.create_draft(
            QuoteInput(
                provider_id=provider.id,
                move_date=MONDAY,
                customer_id=customer.id,
                price_total_cents=38000,
                breakdown={"heavy_items": [{"price_cents": 12000, "count": 2}]},
            )
        )
        assert quote.status == "draft"
        assert quote.customer_id == customer.id
        assert quote.breakdown["heavy_items_cost"] == 240.0

    def test_draft_is_confirmed_by_the_next_upsert(self, db, provider, ledger):
        draft = ledger.create_draft(QuoteInput(provider_id=provider.id, move_date=MONDAY))
        quote = ledger.upsert_quote(QuoteInput(provider_id=provider.id, move_date=MONDAY))
        assert quote.id == draft.id
        assert quote.status == "confirmed"
