"""Calendar-anchored recurring outflows (payroll, rent, utilities, ...)."""

from __future__ import annotations

import calendar
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import date, timedelta

import structlog

from cashflow_sim.config.industries import IndustryProfile
from cashflow_sim.models import (
    BusinessPartners,
    FlowType,
    Transaction,
    Vendor,
    VendorImportance,
    to_money,
)
from cashflow_sim.randomness import RandomSource, choice, uniform

logger = structlog.get_logger(__name__)

QUARTER_START_MONTHS = frozenset({1, 4, 7, 10})
PEAK_SEASON_THRESHOLD = 1.2
PEAK_MARKETING_BOOST = 1.5
CLOUD_MONTHLY_GROWTH = 0.01


def iter_days(start: date, end: date) -> Iterator[date]:
    """Every calendar day from start to end, inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def is_last_day_of_month(day: date) -> bool:
    return day.day == calendar.monthrange(day.year, day.month)[1]


def months_between(start: date, current: date) -> int:
    return (current.year - start.year) * 12 + (current.month - start.month)


def utilities_season_factor(month: int) -> float:
    """Heating in Nov-Feb, cooling in Jun-Sep."""
    if month <= 2 or month >= 11:
        return 1.3
    if 6 <= month <= 9:
        return 1.2
    return 1.0


@dataclass(frozen=True)
class RecurringRule:
    """One recurring cost: when it fires and how its amount is drawn."""

    cost_key: str
    is_due: Callable[[date], bool]
    build: Callable[[date], Transaction]


@dataclass(frozen=True)
class _FallbackVendor:
    name: str
    importance: VendorImportance


class RecurringTransactionGenerator:
    """Walks a date range and emits one outflow per matching rule per day.

    Rules are independent; a day can match several. A rule only runs for
    industries whose profile lists its cost base.
    """

    def __init__(
        self,
        profile: IndustryProfile,
        partners: BusinessPartners,
        rng: RandomSource,
    ):
        self._profile = profile
        self._partners = partners
        self._rng = rng
        self._window_start: date | None = None
        self._logger = logger.bind(component="recurring_generator", industry=profile.key)
        self._rules = [
            rule
            for rule in self._build_rules()
            if profile.recurring_cost(rule.cost_key) is not None
        ]

    def _build_rules(self) -> list[RecurringRule]:
        return [
            RecurringRule(
                "payroll",
                lambda d: d.day == 15 or is_last_day_of_month(d),
                self._payroll,
            ),
            RecurringRule("rent", lambda d: d.day == 1, self._rent),
            RecurringRule("utilities", lambda d: d.day == 10, self._utilities),
            RecurringRule("software", lambda d: d.day == 5, self._software),
            RecurringRule(
                "insurance",
                lambda d: d.day == 15 and d.month in QUARTER_START_MONTHS,
                self._insurance,
            ),
            RecurringRule("cloud", lambda d: d.day == 3, self._cloud),
            RecurringRule(
                "raw_materials", lambda d: d.day in (5, 20), self._raw_materials
            ),
            RecurringRule("inventory", lambda d: d.weekday() == 1, self._inventory),
            RecurringRule("marketing", lambda d: d.day == 20, self._marketing),
        ]

    @property
    def active_costs(self) -> list[str]:
        return [rule.cost_key for rule in self._rules]

    def _base(self, cost_key: str) -> float:
        return float(self._profile.recurring_costs[cost_key])

    def _jittered(self, cost_key: str, factor: float, low: float, high: float) -> float:
        return self._base(cost_key) * factor * uniform(self._rng, low, high)

    def _outflow(
        self,
        day: date,
        category: str,
        amount: float,
        entity: str,
        notes: str,
        **extra,
    ) -> Transaction:
        return Transaction(
            date=day,
            flow_type=FlowType.OUTFLOW,
            category=category,
            amount=to_money(amount),
            entity=entity,
            notes=notes,
            is_recurring=True,
            **extra,
        )

    def _pick_vendor(self, category: str, fallback: _FallbackVendor) -> Vendor | _FallbackVendor:
        candidates = [
            vendor
            for vendor in self._partners.vendors
            if vendor.category == category
            or vendor.importance == VendorImportance.CRITICAL
        ]
        vendor = choice(self._rng, candidates)
        if vendor is None:
            self._logger.debug(
                "recurring_vendor_fallback", category=category, vendor=fallback.name
            )
            return fallback
        return vendor

    def _payroll(self, day: date) -> Transaction:
        amount = self._jittered("payroll", 1.0, 0.9, 1.1)
        notes = "Mid-month payroll" if day.day == 15 else "End-month payroll"
        return self._outflow(day, "Payroll", amount, "Employees", notes)

    def _rent(self, day: date) -> Transaction:
        category = self._profile.find_outflow_category(
            "Rent", "Office Space", "Facility Costs", default="Rent"
        )
        return self._outflow(
            day, category, self._base("rent"), "Property Management", "Monthly lease payment"
        )

    def _utilities(self, day: date) -> Transaction:
        amount = self._jittered("utilities", utilities_season_factor(day.month), 0.9, 1.1)
        return self._outflow(
            day, "Utilities", amount, "Utility Providers", "Monthly utilities cost"
        )

    def _software(self, day: date) -> Transaction:
        category = self._profile.find_outflow_category(
            "Software Licenses", "Software", default="Software Subscriptions"
        )
        return self._outflow(
            day,
            category,
            self._base("software"),
            "Various Software Vendors",
            "Monthly software licenses and services",
        )

    def _insurance(self, day: date) -> Transaction:
        return self._outflow(
            day,
            "Insurance",
            self._base("insurance"),
            "Insurance Provider",
            "Quarterly insurance premium",
        )

    def _cloud(self, day: date) -> Transaction:
        start = self._window_start or day
        growth = 1 + months_between(start, day) * CLOUD_MONTHLY_GROWTH
        amount = self._jittered("cloud", growth, 0.9, 1.2)
        return self._outflow(
            day,
            "Cloud Infrastructure",
            amount,
            "Cloud Provider",
            "Monthly cloud computing costs",
        )

    def _raw_materials(self, day: date) -> Transaction:
        amount = self._jittered(
            "raw_materials", self._profile.inflow_factor(day.month), 0.9, 1.1
        )
        vendor = self._pick_vendor(
            "Raw Materials", _FallbackVendor("Primary Supplier", VendorImportance.CRITICAL)
        )
        notes = "Early month materials order" if day.day == 5 else "Late month materials order"
        return self._outflow(
            day,
            "Raw Materials",
            amount,
            vendor.name,
            notes,
            entity_importance=vendor.importance,
        )

    def _inventory(self, day: date) -> Transaction:
        factor = 0.7 + self._profile.inflow_factor(day.month) * 0.3
        amount = self._jittered("inventory", factor, 0.85, 1.15)
        vendor = self._pick_vendor(
            "Inventory Purchase",
            _FallbackVendor("Inventory Supplier", VendorImportance.IMPORTANT),
        )
        return self._outflow(
            day,
            "Inventory Purchase",
            amount,
            vendor.name,
            "Weekly inventory restock",
            entity_importance=vendor.importance,
        )

    def _marketing(self, day: date) -> Transaction:
        next_month = day.month % 12 + 1
        boosted = self._profile.inflow_factor(next_month) > PEAK_SEASON_THRESHOLD
        factor = PEAK_MARKETING_BOOST if boosted else 1.0
        amount = self._jittered("marketing", factor, 0.8, 1.2)
        notes = (
            "Increased marketing for upcoming peak season"
            if boosted
            else "Regular marketing spend"
        )
        return self._outflow(day, "Marketing", amount, "Marketing Agencies", notes)

    def generate(self, start: date, end: date) -> list[Transaction]:
        """Generate recurring outflows for every day in [start, end]."""
        self._window_start = start
        transactions: list[Transaction] = []
        for day in iter_days(start, end):
            for rule in self._rules:
                if rule.is_due(day):
                    transactions.append(rule.build(day))
        self._logger.debug(
            "recurring_transactions_generated",
            start=start.isoformat(),
            end=end.isoformat(),
            count=len(transactions),
        )
        return transactions
