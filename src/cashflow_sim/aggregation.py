"""Fold transactions into a gap-free, date-ordered daily cash series."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Iterable
from datetime import date
from decimal import Decimal

from cashflow_sim.models import ZERO, DailyRecord, Transaction
from cashflow_sim.recurring import iter_days

# (day index, inflows, outflows) -> adjusted (inflows, outflows)
FlowAdjuster = Callable[[int, Decimal, Decimal], tuple[Decimal, Decimal]]


def bucket_by_date(transactions: Iterable[Transaction]) -> dict[date, list[Transaction]]:
    """Group transactions by settlement date, keeping their input order."""
    buckets: dict[date, list[Transaction]] = defaultdict(list)
    for transaction in transactions:
        buckets[transaction.date].append(transaction)
    return buckets


def sum_flows(transactions: Iterable[Transaction]) -> tuple[Decimal, Decimal]:
    inflows = ZERO
    outflows = ZERO
    for transaction in transactions:
        if transaction.is_inflow:
            inflows += transaction.amount
        else:
            outflows += transaction.amount
    return inflows, outflows


def aggregate_daily(
    transactions: Iterable[Transaction],
    start: date,
    end: date,
    starting_balance: Decimal,
    adjust: FlowAdjuster | None = None,
) -> list[DailyRecord]:
    """Build one record per day in [start, end], carrying the balance forward.

    Days without transactions get zero flows. Transactions dated outside the
    window are left out. ``adjust`` may rewrite a day's totals before they
    enter the running balance.
    """
    buckets = bucket_by_date(transactions)
    records: list[DailyRecord] = []
    balance = starting_balance
    for index, day in enumerate(iter_days(start, end)):
        day_transactions = tuple(buckets.get(day, ()))
        inflows, outflows = sum_flows(day_transactions)
        if adjust is not None:
            inflows, outflows = adjust(index, inflows, outflows)
        balance = balance + inflows - outflows
        records.append(
            DailyRecord(
                date=day,
                inflows=inflows,
                outflows=outflows,
                balance=balance,
                transactions=day_transactions,
            )
        )
    return records

