"""Tests for the read-side query helpers."""

from datetime import date
from decimal import Decimal

import pytest

from cashflow_sim.generator import generate_historical_data
from cashflow_sim.models import CustomerTier, FlowType, Transaction, VendorImportance
from cashflow_sim.queries import (
    get_category_breakdown,
    get_top_entities,
    get_transaction_details,
)
from cashflow_sim.randomness import PythonRandomSource


def _txn(day, entity, amount, flow_type=FlowType.INFLOW, category="Sales", **extra):
    return Transaction(
        date=day,
        flow_type=flow_type,
        category=category,
        amount=Decimal(amount),
        entity=entity,
        **extra,
    )


@pytest.fixture
def ledger():
    return [
        _txn(date(2025, 1, 3), "Acme", "500", entity_tier=CustomerTier.LARGE),
        _txn(date(2025, 1, 1), "Globex", "300", entity_tier=CustomerTier.SMALL),
        _txn(
            date(2025, 1, 2),
            "Acme",
            "200",
            category="Services",
            entity_tier=CustomerTier.LARGE,
        ),
        _txn(date(2025, 1, 2), "Initech", "50"),
        _txn(date(2025, 1, 4), "Umbrella", "100"),
        _txn(
            date(2025, 1, 2),
            "Steel Co",
            "900",
            FlowType.OUTFLOW,
            category="Raw Materials",
            entity_importance=VendorImportance.CRITICAL,
        ),
        _txn(date(2025, 1, 5), "Landlord", "400", FlowType.OUTFLOW, category="Rent"),
    ]


@pytest.fixture(scope="module")
def historical():
    return generate_historical_data(
        "manufacturing", end_date=date(2025, 6, 30), rng=PythonRandomSource(seed=77)
    )


class TestTransactionDetails:
    def test_sorted_by_date(self, ledger):
        details = get_transaction_details(ledger)
        assert len(details) == len(ledger)
        assert [t.date for t in details] == sorted(t.date for t in ledger)

    def test_inclusive_bounds(self, ledger):
        details = get_transaction_details(ledger, date(2025, 1, 2), date(2025, 1, 4))
        assert {t.date.day for t in details} == {2, 3, 4}

    def test_bounds_apply_independently(self, ledger):
        later = get_transaction_details(ledger, start_date=date(2025, 1, 4))
        earlier = get_transaction_details(ledger, end_date=date(2025, 1, 1))
        assert {t.date.day for t in later} == {4, 5}
        assert {t.date.day for t in earlier} == {1}

    def test_dataset_uses_daily_records(self, historical):
        details = get_transaction_details(historical)
        embedded = sum(len(day.transactions) for day in historical.daily_data)
        assert len(details) == embedded
        assert all(historical.start_date <= t.date <= historical.end_date for t in details)


class TestTopEntities:
    def test_customers_ranked_by_inflow(self, ledger):
        top = get_top_entities(ledger, "customer", 3)
        assert [(e.name, e.total) for e in top] == [
            ("Acme", Decimal("700")),
            ("Globex", Decimal("300")),
            ("Umbrella", Decimal("100")),
        ]
        assert top[0].tier == CustomerTier.LARGE

    def test_vendors_ranked_by_outflow(self, ledger):
        top = get_top_entities(ledger, "vendor")
        assert [e.name for e in top] == ["Steel Co", "Landlord"]
        assert top[0].importance == VendorImportance.CRITICAL

    def test_unknown_entity_type(self, ledger):
        assert get_top_entities(ledger, "employee") == []

    def test_generated_dataset(self, historical):
        top = get_top_entities(historical, "customer", 3)
        assert 0 < len(top) <= 3
        totals = [e.total for e in top]
        assert totals == sorted(totals, reverse=True)


class TestCategoryBreakdown:
    def test_inflow_categories(self, ledger):
        breakdown = get_category_breakdown(ledger, FlowType.INFLOW)
        assert [(c.name, c.total) for c in breakdown] == [
            ("Sales", Decimal("950")),
            ("Services", Decimal("200")),
        ]

    def test_accepts_string_flow_type(self, ledger):
        breakdown = get_category_breakdown(ledger, "outflow")
        assert [c.name for c in breakdown] == ["Raw Materials", "Rent"]

    def test_unknown_flow_type(self, ledger):
        assert get_category_breakdown(ledger, "sideways") == []

    def test_totals_match_daily_flows(self, historical):
        breakdown = get_category_breakdown(historical, FlowType.OUTFLOW)
        total = sum((c.total for c in breakdown), Decimal("0"))
        assert total == sum((day.outflows for day in historical.daily_data), Decimal("0"))
