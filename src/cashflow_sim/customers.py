"""Seasonality-driven customer inflows, with refunds booked as outflows."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import structlog

from cashflow_sim.config.industries import IndustryProfile, SpecialEvent
from cashflow_sim.models import (
    BusinessPartners,
    Customer,
    CustomerTier,
    FlowType,
    Transaction,
    to_money,
)
from cashflow_sim.randomness import (
    RandomSource,
    chance,
    choice,
    randint,
    uniform,
    weighted_choice,
)
from cashflow_sim.recurring import iter_days

logger = structlog.get_logger(__name__)

MIN_TRANSACTION_AMOUNT = Decimal("100")
LOW_ACTIVITY_RATIO = Decimal("0.1")
EVENT_SMALL_CUSTOMER_PROBABILITY = 0.5
DEFAULT_INFLOW_CATEGORY = "Sales"
WALK_IN_CUSTOMER = "Walk-in Customer"


class CustomerTransactionGenerator:
    """Generates day-by-day customer inflows for an industry.

    The daily total is ``base * month factor * weekday factor * event factor``
    with the industry's daily noise applied, then split into a handful of
    customer transactions. Days whose total falls to 10% of the base or less
    produce nothing.
    """

    def __init__(
        self,
        profile: IndustryProfile,
        partners: BusinessPartners,
        rng: RandomSource,
    ):
        self._profile = profile
        self._customers = partners.customers
        self._small_customers = tuple(
            customer for customer in partners.customers if customer.tier == CustomerTier.SMALL
        )
        self._rng = rng
        self._logger = logger.bind(component="customer_generator", industry=profile.key)

    def daily_inflow(self, day: date, event: SpecialEvent | None) -> Decimal:
        """Total customer inflow for one day before splitting."""
        profile = self._profile
        event_factor = event.inflow_factor if event else 1.0
        noise = 1 + uniform(self._rng, -1.0, 1.0) * profile.daily_variability
        return to_money(
            float(profile.base_daily_inflow)
            * profile.inflow_factor(day.month)
            * profile.weekday_factor(day.weekday())
            * event_factor
            * noise
        )

    def split_amounts(self, total: Decimal) -> list[Decimal]:
        """Split a day's total; each piece but the last takes a share of the rest."""
        count = randint(self._rng, *self._profile.transactions_per_day)
        low, high = self._profile.split_share
        amounts: list[Decimal] = []
        remaining = total
        for idx in range(count):
            if idx == count - 1:
                amounts.append(remaining)
                break
            amount = to_money(remaining * Decimal(str(uniform(self._rng, low, high))))
            remaining -= amount
            amounts.append(amount)
        return amounts

    def pick_customer(self, event: SpecialEvent | None) -> Customer | None:
        """Weighted by share; during events small customers are favoured half the time."""
        if event and chance(self._rng, EVENT_SMALL_CUSTOMER_PROBABILITY):
            customer = choice(self._rng, self._small_customers)
            if customer is not None:
                return customer

        if not self._customers:
            return None
        target = self._rng.next()
        cumulative = 0.0
        for customer in self._customers:
            cumulative += customer.share
            if target <= cumulative:
                return customer
        return self._customers[0]

    def pick_category(self, event: SpecialEvent | None) -> str:
        if event and event.inflow_category:
            if self._profile.find_inflow_category(event.inflow_category):
                return event.inflow_category
        return weighted_choice(
            self._rng, self._profile.inflow_categories, DEFAULT_INFLOW_CATEGORY
        )

    def _build(
        self,
        day: date,
        amount: Decimal,
        customer: Customer | None,
        category_name: str,
        event: SpecialEvent | None,
    ) -> Transaction:
        category = self._profile.find_inflow_category(category_name)
        is_refund = category is not None and category.is_refund
        notes = f"{event.name} related transaction" if event else f"Regular {category_name}"
        common = dict(
            date=day,
            category=category_name,
            amount=abs(amount),
            entity=customer.name if customer else WALK_IN_CUSTOMER,
            notes=notes,
            event=event.name if event else None,
            entity_tier=customer.tier if customer else None,
        )
        if is_refund or customer is None:
            return Transaction(
                flow_type=FlowType.OUTFLOW if is_refund else FlowType.INFLOW, **common
            )
        return Transaction(
            flow_type=FlowType.INFLOW,
            payment_terms=customer.payment_terms,
            reliability=customer.payment_reliability,
            **common,
        )

    def generate(self, start: date, end: date) -> list[Transaction]:
        """Generate customer transactions for every day in [start, end]."""
        base = self._profile.base_daily_inflow
        transactions: list[Transaction] = []
        skipped_days = 0
        for day in iter_days(start, end):
            event = self._profile.event_for(day)
            total = self.daily_inflow(day, event)
            if total <= base * LOW_ACTIVITY_RATIO:
                skipped_days += 1
                continue

            for amount in self.split_amounts(total):
                if amount < MIN_TRANSACTION_AMOUNT:
                    continue
                customer = self.pick_customer(event)
                category = self.pick_category(event)
                transactions.append(self._build(day, amount, customer, category, event))

        self._logger.debug(
            "customer_transactions_generated",
            start=start.isoformat(),
            end=end.isoformat(),
            count=len(transactions),
            skipped_days=skipped_days,
        )
        return transactions
