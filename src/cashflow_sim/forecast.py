"""Forward projection of a historical dataset."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import timedelta
from decimal import Decimal

import structlog

from cashflow_sim.aggregation import aggregate_daily
from cashflow_sim.config.industries import get_industry_profile, resolve_industry_key
from cashflow_sim.config.settings import get_settings
from cashflow_sim.generator import default_random_source, generate_window_transactions
from cashflow_sim.models import (
    ZERO,
    DailyRecord,
    ForecastDataset,
    ForecastKpis,
    ForecastRecord,
    HistoricalDataset,
    MonthlyForecast,
    round_half_up,
    to_money,
)
from cashflow_sim.partners import BusinessPartnerGenerator
from cashflow_sim.randomness import RandomSource, uniform

logger = structlog.get_logger(__name__)

MAX_CONFIDENCE = 95
CONFIDENCE_SPAN = 45
VARIANCE_GROWTH = 0.8
BURN_RATE_DAYS = 30
FALLBACK_CCC = 60.0


def variance_factor(day_index: int, horizon: int) -> float:
    """Noise multiplier growing linearly from 1.0 to 1.8 across the horizon."""
    return 1 + (day_index / horizon) * VARIANCE_GROWTH


def confidence_for_day(day_index: int, horizon: int) -> int:
    """Confidence decaying linearly from 95 towards 50."""
    return round_half_up(MAX_CONFIDENCE - (day_index / horizon) * CONFIDENCE_SPAN)


def month_label(record: DailyRecord) -> str:
    return record.date.strftime("%b %Y")


def rollup_monthly(records: Sequence[ForecastRecord]) -> list[MonthlyForecast]:
    """Group ordered daily records into calendar months.

    The first month starts at the first record; every later month starts on
    its day 1. Months whose day 1 is absent (other than the first) never get
    a group, which cannot happen for a gap-free series.
    """
    groups: list[list[ForecastRecord]] = []
    for record in records:
        if not groups or record.date.day == 1:
            groups.append([record])
        else:
            groups[-1].append(record)

    monthly: list[MonthlyForecast] = []
    for group in groups:
        monthly.append(
            MonthlyForecast(
                month=month_label(group[0]),
                inflows=sum((r.inflows for r in group), ZERO),
                outflows=sum((r.outflows for r in group), ZERO),
                balance=group[-1].balance,
                confidence=round_half_up(
                    sum(r.confidence for r in group) / len(group)
                ),
            )
        )
    return monthly


def burn_rate(monthly: Sequence[MonthlyForecast]) -> int:
    if not monthly:
        return 0
    return round_half_up(float(monthly[0].outflows) / BURN_RATE_DAYS)


class ForecastProjector:
    """Projects a historical dataset forward over a fixed horizon.

    The forecast reuses the historical industry and partner roster, starts the
    day after the historical window, and opens at its ending balance. Daily
    totals get extra noise that widens with distance from the start.
    """

    def __init__(self, rng: RandomSource):
        self._rng = rng
        self._logger = logger.bind(component="forecast_projector")

    def _noisy(self, amount: Decimal, variability: float, factor: float) -> Decimal:
        noise = 1 + uniform(self._rng, -1.0, 1.0) * variability * factor
        return to_money(amount * Decimal(str(noise)))

    def _kpis(
        self,
        historical: HistoricalDataset,
        monthly: Sequence[MonthlyForecast],
        average_dso: float,
        average_dpo: float,
    ) -> ForecastKpis:
        inherited = historical.kpis
        if inherited is not None:
            dso = inherited.dso
            dpo = inherited.dpo
            ccc = inherited.cash_conversion_cycle
        else:
            dso = average_dso + uniform(self._rng, -5.0, 5.0)
            dpo = average_dpo + uniform(self._rng, -4.0, 4.0)
            ccc = FALLBACK_CCC + uniform(self._rng, -7.5, 7.5)
        return ForecastKpis(
            dso=dso,
            dpo=dpo,
            burn_rate=burn_rate(monthly),
            cash_conversion_cycle=ccc,
            revenue_growth=0.08 + uniform(self._rng, -0.02, 0.02),
        )

    def project(self, historical: HistoricalDataset, forecast_length: int) -> ForecastDataset:
        if forecast_length < 1:
            raise ValueError(f"forecast_length must be at least 1, got {forecast_length}")

        key = resolve_industry_key(historical.industry)
        profile = get_industry_profile(key)
        partners = historical.business_partners
        if partners is None:
            self._logger.info("business_partners_regenerated", industry=key)
            partners = BusinessPartnerGenerator(self._rng).generate(key)

        start = historical.end_date + timedelta(days=1)
        end = start + timedelta(days=forecast_length - 1)
        transactions = generate_window_transactions(profile, partners, start, end, self._rng)

        def widen(index: int, inflows: Decimal, outflows: Decimal) -> tuple[Decimal, Decimal]:
            factor = variance_factor(index, forecast_length)
            return (
                self._noisy(inflows, profile.daily_variability, factor),
                self._noisy(outflows, profile.daily_variability, factor),
            )

        daily = aggregate_daily(
            transactions, start, end, historical.ending_balance, adjust=widen
        )
        forecasts = tuple(
            ForecastRecord(
                date=record.date,
                inflows=record.inflows,
                outflows=record.outflows,
                balance=record.balance,
                transactions=record.transactions,
                confidence=confidence_for_day(index, forecast_length),
            )
            for index, record in enumerate(daily)
        )
        monthly = tuple(rollup_monthly(forecasts))
        kpis = self._kpis(historical, monthly, profile.average_dso, profile.average_dpo)

        self._logger.info(
            "forecast_data_generated",
            industry=key,
            start=start.isoformat(),
            days=forecast_length,
            months=len(monthly),
            closing_balance=str(forecasts[-1].balance),
        )
        return ForecastDataset(
            daily_forecasts=forecasts,
            monthly_forecasts=monthly,
            transactions=tuple(transactions),
            business_partners=partners,
            kpis=kpis,
            start_date=start,
            end_date=end,
            industry=key,
            opening_balance=historical.ending_balance,
        )


def generate_forecast_data(
    historical: HistoricalDataset,
    forecast_length: int | None = None,
    *,
    rng: RandomSource | None = None,
) -> ForecastDataset:
    """Project ``historical`` forward by ``forecast_length`` days (default 90)."""
    length = get_settings().forecast_days if forecast_length is None else forecast_length
    return ForecastProjector(rng or default_random_source()).project(historical, length)
