"""What-if adjustments layered on top of a generated forecast."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, timedelta
from decimal import Decimal

import structlog

from cashflow_sim.forecast import burn_rate, generate_forecast_data, rollup_monthly
from cashflow_sim.models import (
    ZERO,
    ForecastDataset,
    ForecastRecord,
    HistoricalDataset,
    to_money,
)
from cashflow_sim.randomness import RandomSource

logger = structlog.get_logger(__name__)

DELAY_LOOKAHEAD_DAYS = 60
DELAYED_INFLOW_DAYS = 5


@dataclass(frozen=True)
class ScenarioAdjustment:
    """Percentage flow changes plus optional one-off items and payment delays."""

    name: str = "Custom Scenario"
    inflow_adjustment_pct: float = 0.0
    outflow_adjustment_pct: float = 0.0
    one_time_expense: Decimal = ZERO
    one_time_expense_date: date | None = None
    one_time_revenue: Decimal = ZERO
    one_time_revenue_date: date | None = None
    delayed_payment_days: int = 0


BASE = ScenarioAdjustment(name="Base Case")
OPTIMISTIC = ScenarioAdjustment(
    name="Optimistic", inflow_adjustment_pct=15.0, outflow_adjustment_pct=-10.0
)
PESSIMISTIC = ScenarioAdjustment(
    name="Pessimistic", inflow_adjustment_pct=-15.0, outflow_adjustment_pct=10.0
)
PRESETS = {"base": BASE, "optimistic": OPTIMISTIC, "pessimistic": PESSIMISTIC}


def _scale(amount: Decimal, pct: float) -> Decimal:
    if not pct:
        return amount
    return to_money(amount * Decimal(str(1 + pct / 100)))


def _delay_large_inflows(
    inflows: list[Decimal], dates: list[date], delay_days: int
) -> list[Decimal]:
    """Move the first few above-average inflow days forward by ``delay_days``.

    A moved amount lands on the target day when it is inside the window and
    otherwise leaves it.
    """
    if delay_days <= 0 or not inflows:
        return inflows
    average = sum(inflows, ZERO) / len(inflows)
    candidates = [
        idx
        for idx in range(min(DELAY_LOOKAHEAD_DAYS, len(inflows)))
        if inflows[idx] > average
    ][:DELAYED_INFLOW_DAYS]

    moved = list(inflows)
    index_by_date = {day: idx for idx, day in enumerate(dates)}
    for idx in candidates:
        amount = inflows[idx]
        moved[idx] -= amount
        target = index_by_date.get(dates[idx] + timedelta(days=delay_days))
        if target is not None:
            moved[target] += amount
    return moved


def apply_scenario(
    forecast: ForecastDataset, adjustment: ScenarioAdjustment
) -> ForecastDataset:
    """Return an adjusted copy of ``forecast`` with balances re-folded."""
    days = forecast.daily_forecasts
    dates = [day.date for day in days]
    inflows = [_scale(day.inflows, adjustment.inflow_adjustment_pct) for day in days]
    outflows = [_scale(day.outflows, adjustment.outflow_adjustment_pct) for day in days]

    for idx, day in enumerate(dates):
        if adjustment.one_time_expense > 0 and day == adjustment.one_time_expense_date:
            outflows[idx] += adjustment.one_time_expense
        if adjustment.one_time_revenue > 0 and day == adjustment.one_time_revenue_date:
            inflows[idx] += adjustment.one_time_revenue

    inflows = _delay_large_inflows(inflows, dates, adjustment.delayed_payment_days)

    balance = forecast.opening_balance
    adjusted: list[ForecastRecord] = []
    for day, day_in, day_out in zip(days, inflows, outflows):
        balance = balance + day_in - day_out
        adjusted.append(replace(day, inflows=day_in, outflows=day_out, balance=balance))

    monthly = tuple(rollup_monthly(adjusted))
    logger.debug(
        "scenario_applied",
        scenario=adjustment.name,
        closing_balance=str(balance),
    )
    return replace(
        forecast,
        daily_forecasts=tuple(adjusted),
        monthly_forecasts=monthly,
        kpis=replace(forecast.kpis, burn_rate=burn_rate(monthly)),
    )


def build_scenarios(
    historical: HistoricalDataset,
    forecast_length: int | None = None,
    *,
    rng: RandomSource | None = None,
) -> dict[str, ForecastDataset]:
    """Base, optimistic and pessimistic forecasts from one shared projection."""
    base = generate_forecast_data(historical, forecast_length, rng=rng)
    return {key: apply_scenario(base, preset) for key, preset in PRESETS.items()}
