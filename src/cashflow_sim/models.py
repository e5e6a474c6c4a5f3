"""Value types shared by the generators, the forecaster and the query helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

WHOLE_UNITS = Decimal("1")
ZERO = Decimal("0")


def to_money(value: float | int | Decimal) -> Decimal:
    """Round a value half-up to whole currency units."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(WHOLE_UNITS, rounding=ROUND_HALF_UP)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(Decimal(str(value)).quantize(WHOLE_UNITS, rounding=ROUND_HALF_UP))


class FlowType(str, Enum):
    """Direction of a cash movement."""

    INFLOW = "inflow"
    OUTFLOW = "outflow"


class CustomerTier(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class VendorImportance(str, Enum):
    STANDARD = "standard"
    IMPORTANT = "important"
    CRITICAL = "critical"


class PaymentReliability(str, Enum):
    """How a customer settles relative to its payment terms."""

    EARLY = "early"
    ON_TIME = "on-time"
    LATE = "late"


@dataclass(frozen=True)
class Customer:
    id: str
    name: str
    tier: CustomerTier
    share: float
    payment_terms: int  # days
    payment_reliability: PaymentReliability


@dataclass(frozen=True)
class Vendor:
    id: str
    name: str
    importance: VendorImportance
    share: float
    payment_terms: int  # days
    category: str


@dataclass(frozen=True)
class BusinessPartners:
    """Customer and vendor roster for one simulation run."""

    customers: tuple[Customer, ...] = ()
    vendors: tuple[Vendor, ...] = ()


@dataclass(frozen=True)
class Transaction:
    """A single cash movement.

    ``amount`` is never negative; the direction lives in ``flow_type``.
    ``date`` is the settlement date. Customer inflows carry the customer's
    ``payment_terms`` and ``reliability`` until the payment-terms projector
    moves them, after which ``invoice_date`` holds the original date.
    """

    date: date
    flow_type: FlowType
    category: str
    amount: Decimal
    entity: str
    notes: str = ""
    is_recurring: bool = False
    event: str | None = None
    entity_tier: CustomerTier | None = None
    entity_importance: VendorImportance | None = None
    payment_terms: int | None = None
    reliability: PaymentReliability | None = None
    invoice_date: date | None = None
    actual_payment_terms: int | None = None

    @property
    def is_inflow(self) -> bool:
        return self.flow_type == FlowType.INFLOW


@dataclass(frozen=True)
class DailyRecord:
    """Cash position at the end of one calendar day."""

    date: date
    inflows: Decimal
    outflows: Decimal
    balance: Decimal
    transactions: tuple[Transaction, ...] = ()

    @property
    def net_flow(self) -> Decimal:
        return self.inflows - self.outflows

    @property
    def opening_balance(self) -> Decimal:
        """Balance carried in from the previous day."""
        return self.balance - self.net_flow


@dataclass(frozen=True)
class ForecastRecord(DailyRecord):
    """A forecasted day with its confidence percentage (50-95)."""

    confidence: int = 95


@dataclass(frozen=True)
class MonthlyForecast:
    month: str
    inflows: Decimal
    outflows: Decimal
    balance: Decimal
    confidence: int


@dataclass(frozen=True)
class HistoricalKpis:
    dso: float
    dpo: float
    cash_conversion_cycle: float


@dataclass(frozen=True)
class ForecastKpis:
    dso: float
    dpo: float
    burn_rate: int
    cash_conversion_cycle: float
    revenue_growth: float


@dataclass(frozen=True)
class HistoricalDataset:
    daily_data: tuple[DailyRecord, ...]
    transactions: tuple[Transaction, ...]
    business_partners: BusinessPartners | None
    start_date: date
    end_date: date
    starting_balance: Decimal
    ending_balance: Decimal
    industry: str
    kpis: HistoricalKpis | None = None


@dataclass(frozen=True)
class ForecastDataset:
    daily_forecasts: tuple[ForecastRecord, ...]
    monthly_forecasts: tuple[MonthlyForecast, ...]
    transactions: tuple[Transaction, ...]
    business_partners: BusinessPartners
    kpis: ForecastKpis
    start_date: date
    end_date: date
    industry: str
    opening_balance: Decimal = field(default=ZERO)
