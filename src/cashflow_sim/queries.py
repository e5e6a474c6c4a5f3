"""Read-side helpers over generated datasets."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from cashflow_sim.models import (
    ZERO,
    CustomerTier,
    FlowType,
    ForecastDataset,
    HistoricalDataset,
    Transaction,
    VendorImportance,
)

Dataset = HistoricalDataset | ForecastDataset | Iterable[Transaction]

ENTITY_FLOW_TYPES = {
    "customer": FlowType.INFLOW,
    "vendor": FlowType.OUTFLOW,
}


@dataclass
class EntityTotal:
    name: str
    total: Decimal
    tier: CustomerTier | None = None
    importance: VendorImportance | None = None


@dataclass
class CategoryTotal:
    name: str
    total: Decimal


def _embedded_transactions(dataset: Dataset) -> list[Transaction]:
    """Transactions attached to the dataset's days (or the raw list given)."""
    if isinstance(dataset, HistoricalDataset):
        return [t for day in dataset.daily_data for t in day.transactions]
    if isinstance(dataset, ForecastDataset):
        return [t for day in dataset.daily_forecasts for t in day.transactions]
    return list(dataset)


def get_transaction_details(
    dataset: Dataset,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[Transaction]:
    """Flatten a dataset's transactions, optionally bounded, sorted by date.

    Each bound is inclusive and may be given on its own.
    """
    transactions = _embedded_transactions(dataset)
    if start_date is not None:
        transactions = [t for t in transactions if t.date >= start_date]
    if end_date is not None:
        transactions = [t for t in transactions if t.date <= end_date]
    transactions.sort(key=lambda t: t.date)
    return transactions


def get_top_entities(
    dataset: Dataset,
    entity_type: str,
    count: int = 5,
) -> list[EntityTotal]:
    """Largest customers (by inflow) or vendors (by outflow), descending.

    An unrecognised ``entity_type`` yields an empty list.
    """
    flow_type = ENTITY_FLOW_TYPES.get(entity_type)
    if flow_type is None or count <= 0:
        return []

    totals: dict[str, EntityTotal] = {}
    for transaction in get_transaction_details(dataset):
        if transaction.flow_type != flow_type:
            continue
        entry = totals.get(transaction.entity)
        if entry is None:
            entry = EntityTotal(
                name=transaction.entity,
                total=ZERO,
                tier=transaction.entity_tier,
                importance=transaction.entity_importance,
            )
            totals[transaction.entity] = entry
        entry.total += transaction.amount

    ranked = sorted(totals.values(), key=lambda e: e.total, reverse=True)
    return ranked[:count]


def get_category_breakdown(dataset: Dataset, flow_type: FlowType | str) -> list[CategoryTotal]:
    """Total amount per category for one flow direction, descending."""
    try:
        wanted = FlowType(flow_type)
    except ValueError:
        return []

    totals: dict[str, CategoryTotal] = {}
    for transaction in get_transaction_details(dataset):
        if transaction.flow_type != wanted:
            continue
        entry = totals.setdefault(
            transaction.category, CategoryTotal(name=transaction.category, total=ZERO)
        )
        entry.total += transaction.amount

    return sorted(totals.values(), key=lambda c: c.total, reverse=True)
