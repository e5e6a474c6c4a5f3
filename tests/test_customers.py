"""Tests for customer-driven inflow generation."""

from collections import Counter
from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal

import pytest

from cashflow_sim.config.industries import get_industry_profile
from cashflow_sim.customers import CustomerTransactionGenerator
from cashflow_sim.models import (
    BusinessPartners,
    CustomerTier,
    FlowType,
    PaymentReliability,
)
from cashflow_sim.partners import BusinessPartnerGenerator
from cashflow_sim.randomness import PythonRandomSource

MONDAY = date(2025, 1, 6)


class TestDailyTotals:
    def test_daily_inflow_combines_factors(self, scripted_rng, roster):
        generator = CustomerTransactionGenerator(
            get_industry_profile("manufacturing"), roster, scripted_rng(0.5)
        )
        # 25000 base * 0.9 January * 1.0 Monday, no noise at the midpoint draw
        assert generator.daily_inflow(MONDAY, None) == Decimal("22500")

    def test_event_factor_applied(self, scripted_rng, roster):
        retail = get_industry_profile("retail")
        generator = CustomerTransactionGenerator(retail, roster, scripted_rng(0.5))
        black_friday = date(2025, 11, 25)  # Tuesday
        event = retail.event_for(black_friday)
        assert generator.daily_inflow(black_friday, event) == Decimal("66150")

    def test_split_uses_share_of_remainder(self, scripted_rng, roster):
        generator = CustomerTransactionGenerator(
            get_industry_profile("manufacturing"), roster, scripted_rng(0.5)
        )
        amounts = generator.split_amounts(Decimal("22500"))
        assert amounts == [Decimal("11250"), Decimal("5625"), Decimal("5625")]

    @pytest.mark.parametrize("seed", range(5))
    def test_split_preserves_total(self, seed, roster):
        generator = CustomerTransactionGenerator(
            get_industry_profile("retail"), roster, PythonRandomSource(seed)
        )
        amounts = generator.split_amounts(Decimal("18345"))
        assert 4 <= len(amounts) <= 7
        assert sum(amounts) == Decimal("18345")

    def test_low_activity_day_skipped(self, scripted_rng, roster):
        quiet = replace(get_industry_profile("manufacturing"), weekday_factors=(0.05,) * 7)
        generator = CustomerTransactionGenerator(quiet, roster, scripted_rng(0.5))
        assert generator.generate(MONDAY, MONDAY + timedelta(days=6)) == []


class TestCustomerPick:
    @pytest.fixture
    def black_friday(self):
        return get_industry_profile("retail").event_for(date(2025, 11, 25))

    def test_event_draw_below_half_picks_small_customer(
        self, scripted_rng, roster, black_friday
    ):
        generator = CustomerTransactionGenerator(
            get_industry_profile("retail"), roster, scripted_rng(0.2)
        )
        assert generator.pick_customer(black_friday).name == "Customer 3"

    def test_event_draw_above_half_uses_shares(
        self, scripted_rng, roster, black_friday
    ):
        rng = scripted_rng(0.7)
        generator = CustomerTransactionGenerator(get_industry_profile("retail"), roster, rng)
        assert generator.pick_customer(black_friday).name == "Customer 2"
        assert rng.calls == 2

    def test_regular_day_uses_shares_only(self, scripted_rng, roster):
        rng = scripted_rng(0.2)
        generator = CustomerTransactionGenerator(get_industry_profile("retail"), roster, rng)
        assert generator.pick_customer(None).name == "Customer 1"
        assert rng.calls == 1


class TestGeneratedTransactions:
    def test_midpoint_day(self, scripted_rng, roster):
        generator = CustomerTransactionGenerator(
            get_industry_profile("manufacturing"), roster, scripted_rng(0.5)
        )
        transactions = generator.generate(MONDAY, MONDAY)

        assert [t.amount for t in transactions] == [
            Decimal("11250"),
            Decimal("5625"),
            Decimal("5625"),
        ]
        for transaction in transactions:
            assert transaction.flow_type == FlowType.INFLOW
            assert transaction.entity == "Customer 1"
            assert transaction.entity_tier == CustomerTier.LARGE
            assert transaction.category == "Product Sales"
            assert transaction.payment_terms == 45
            assert transaction.reliability == PaymentReliability.ON_TIME
            assert transaction.notes == "Regular Product Sales"
            assert transaction.event is None
            assert transaction.invoice_date is None

    def test_refund_category_becomes_outflow(self, scripted_rng, roster):
        generator = CustomerTransactionGenerator(
            get_industry_profile("retail"), roster, scripted_rng(0.9)
        )
        transactions = generator.generate(date(2025, 3, 3), date(2025, 3, 3))

        assert len(transactions) == 7
        for transaction in transactions:
            assert transaction.category == "Returns (Refunds)"
            assert transaction.flow_type == FlowType.OUTFLOW
            assert transaction.amount > 0
            assert transaction.payment_terms is None
            assert transaction.entity == "Customer 3"

    def test_event_prefers_small_customers_and_category(self, scripted_rng, roster):
        generator = CustomerTransactionGenerator(
            get_industry_profile("retail"), roster, scripted_rng(0.9)
        )
        transactions = generator.generate(date(2025, 11, 25), date(2025, 11, 25))

        assert transactions
        for transaction in transactions:
            assert transaction.entity == "Customer 3"
            assert transaction.entity_tier == CustomerTier.SMALL
            assert transaction.category == "In-store Sales"
            assert transaction.event == "Black Friday"
            assert transaction.notes == "Black Friday related transaction"
            assert transaction.flow_type == FlowType.INFLOW

    def test_event_without_small_customers_uses_shares(self, scripted_rng, roster):
        large_only = BusinessPartners(customers=roster.customers[:1], vendors=roster.vendors)
        generator = CustomerTransactionGenerator(
            get_industry_profile("retail"), large_only, scripted_rng(0.9)
        )
        transactions = generator.generate(date(2025, 11, 25), date(2025, 11, 25))
        assert {t.entity for t in transactions} == {"Customer 1"}

    def test_empty_roster_uses_walk_in_customer(self, scripted_rng):
        generator = CustomerTransactionGenerator(
            get_industry_profile("manufacturing"), BusinessPartners(), scripted_rng(0.5)
        )
        transactions = generator.generate(MONDAY, MONDAY)
        assert transactions
        assert {t.entity for t in transactions} == {"Walk-in Customer"}
        assert all(t.payment_terms is None for t in transactions)


class TestStatisticalProperties:
    @pytest.fixture
    def partners(self):
        return BusinessPartnerGenerator(PythonRandomSource(11)).generate("retail")

    @pytest.mark.parametrize(
        ("industry", "max_per_day"),
        [("retail", 7), ("manufacturing", 3), ("saas", 4)],
    )
    def test_transactions_per_day_within_band(self, industry, max_per_day, partners):
        generator = CustomerTransactionGenerator(
            get_industry_profile(industry), partners, PythonRandomSource(21)
        )
        transactions = generator.generate(date(2025, 4, 1), date(2025, 6, 30))
        per_day = Counter(t.date for t in transactions)
        assert per_day
        assert max(per_day.values()) <= max_per_day

    def test_amounts_at_least_minimum(self, partners):
        generator = CustomerTransactionGenerator(
            get_industry_profile("retail"), partners, PythonRandomSource(5)
        )
        transactions = generator.generate(date(2025, 1, 1), date(2025, 3, 31))
        assert all(t.amount >= Decimal("100") for t in transactions)

    def test_refunds_are_a_minority(self, partners):
        generator = CustomerTransactionGenerator(
            get_industry_profile("retail"), partners, PythonRandomSource(6)
        )
        transactions = generator.generate(date(2025, 1, 1), date(2025, 6, 30))
        refunds = [t for t in transactions if t.flow_type == FlowType.OUTFLOW]
        assert refunds
        assert all(t.category == "Returns (Refunds)" for t in refunds)
        assert len(refunds) / len(transactions) < 0.25
