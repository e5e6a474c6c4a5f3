"""Cash-flow simulator - synthetic transaction histories and forecasts."""

__version__ = "0.1.0"

from cashflow_sim.config import configure_logging, get_industry_profile, get_settings
from cashflow_sim.forecast import ForecastProjector, generate_forecast_data
from cashflow_sim.generator import generate_historical_data
from cashflow_sim.models import (
    BusinessPartners,
    Customer,
    DailyRecord,
    FlowType,
    ForecastDataset,
    ForecastRecord,
    HistoricalDataset,
    MonthlyForecast,
    Transaction,
    Vendor,
)
from cashflow_sim.queries import (
    get_category_breakdown,
    get_top_entities,
    get_transaction_details,
)
from cashflow_sim.randomness import PythonRandomSource, RandomSource
from cashflow_sim.scenarios import ScenarioAdjustment, apply_scenario, build_scenarios

__all__ = [
    # Version
    "__version__",
    # Generation
    "generate_historical_data",
    "generate_forecast_data",
    "ForecastProjector",
    # Queries
    "get_transaction_details",
    "get_top_entities",
    "get_category_breakdown",
    # Scenarios
    "ScenarioAdjustment",
    "apply_scenario",
    "build_scenarios",
    # Models
    "BusinessPartners",
    "Customer",
    "Vendor",
    "Transaction",
    "FlowType",
    "DailyRecord",
    "ForecastRecord",
    "MonthlyForecast",
    "HistoricalDataset",
    "ForecastDataset",
    # Randomness
    "RandomSource",
    "PythonRandomSource",
    # Config
    "get_settings",
    "get_industry_profile",
    "configure_logging",
]
