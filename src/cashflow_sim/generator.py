"""Historical cash-flow dataset generation.

A run composes the recurring and customer generators over one window,
projects customer payment terms, and folds the result into daily records:

    profile + partners -> recurring + customer transactions
                       -> payment-terms projection -> daily aggregation
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

import structlog

from cashflow_sim.aggregation import aggregate_daily
from cashflow_sim.config.industries import (
    IndustryProfile,
    get_industry_profile,
    resolve_industry_key,
)
from cashflow_sim.config.settings import get_settings
from cashflow_sim.customers import CustomerTransactionGenerator
from cashflow_sim.models import (
    BusinessPartners,
    HistoricalDataset,
    HistoricalKpis,
    Transaction,
    to_money,
)
from cashflow_sim.partners import BusinessPartnerGenerator
from cashflow_sim.payment_terms import PaymentTermsProjector
from cashflow_sim.randomness import PythonRandomSource, RandomSource, uniform
from cashflow_sim.recurring import RecurringTransactionGenerator

logger = structlog.get_logger(__name__)

INVENTORY_DAYS = 30
DPO_JITTER = 4.0


def default_random_source() -> RandomSource:
    """Random source seeded from settings (entropy when RANDOM_SEED is unset)."""
    return PythonRandomSource(get_settings().random_seed)


def generate_window_transactions(
    profile: IndustryProfile,
    partners: BusinessPartners,
    start: date,
    end: date,
    rng: RandomSource,
) -> list[Transaction]:
    """All transactions for [start, end], payment terms applied, sorted by date.

    Recurring and customer transactions are generated separately and only
    concatenated afterwards.
    """
    recurring = RecurringTransactionGenerator(profile, partners, rng).generate(start, end)
    customer = CustomerTransactionGenerator(profile, partners, rng).generate(start, end)
    projected = PaymentTermsProjector(rng).apply(recurring + customer)
    projected.sort(key=lambda transaction: transaction.date)
    return projected


def compute_historical_kpis(
    transactions: list[Transaction],
    profile: IndustryProfile,
    rng: RandomSource,
) -> HistoricalKpis:
    """DSO from realised collection delays, DPO from the profile with jitter."""
    delays = [
        t.actual_payment_terms
        for t in transactions
        if t.is_inflow and t.actual_payment_terms is not None
    ]
    dso = sum(delays) / len(delays) if delays else profile.average_dso
    dpo = profile.average_dpo + uniform(rng, -DPO_JITTER, DPO_JITTER)
    return HistoricalKpis(
        dso=dso,
        dpo=dpo,
        cash_conversion_cycle=dso + INVENTORY_DAYS - dpo,
    )


def generate_historical_data(
    industry: str | None = None,
    *,
    start_date: date | None = None,
    end_date: date | None = None,
    starting_balance: int | Decimal | None = None,
    partners: BusinessPartners | None = None,
    rng: RandomSource | None = None,
) -> HistoricalDataset:
    """Generate a historical dataset for an industry.

    Args:
        industry: Industry key or display name. Unknown values fall back to
            manufacturing.
        start_date: First day of the window. Defaults to ``history_days``
            before ``end_date``.
        end_date: Last day of the window. Defaults to today.
        starting_balance: Opening cash balance. Defaults to settings.
        partners: Roster to reuse. A fresh one is generated when omitted.
        rng: Random source. Defaults to one seeded from settings.

    Returns:
        Fully built, immutable HistoricalDataset.
    """
    settings = get_settings()
    rng = rng or default_random_source()
    key = resolve_industry_key(industry or settings.default_industry)
    profile = get_industry_profile(key)

    end = end_date or date.today()
    start = start_date or end - timedelta(days=settings.history_days)
    if start > end:
        raise ValueError(f"start_date {start} is after end_date {end}")
    opening = to_money(
        settings.starting_balance if starting_balance is None else starting_balance
    )

    with structlog.contextvars.bound_contextvars(industry=key):
        roster = partners or BusinessPartnerGenerator(rng).generate(key)
        transactions = generate_window_transactions(profile, roster, start, end, rng)
        daily = aggregate_daily(transactions, start, end, opening)
        closing = daily[-1].balance if daily else opening
        kpis = compute_historical_kpis(transactions, profile, rng)

        logger.info(
            "historical_data_generated",
            start=start.isoformat(),
            end=end.isoformat(),
            transactions=len(transactions),
            ending_balance=str(closing),
        )

    return HistoricalDataset(
        daily_data=tuple(daily),
        transactions=tuple(transactions),
        business_partners=roster,
        start_date=start,
        end_date=end,
        starting_balance=opening,
        ending_balance=closing,
        industry=key,
        kpis=kpis,
    )

