"""Configuration module for the cash-flow simulator."""

from cashflow_sim.config.industries import (
    DEFAULT_INDUSTRY,
    CategoryWeight,
    IndustryProfile,
    SpecialEvent,
    get_industry_profile,
    load_industry_profiles,
    resolve_industry_key,
)
from cashflow_sim.config.logging import configure_logging, get_logger
from cashflow_sim.config.settings import Settings, get_settings

__all__ = [
    "DEFAULT_INDUSTRY",
    "CategoryWeight",
    "IndustryProfile",
    "SpecialEvent",
    "Settings",
    "configure_logging",
    "get_industry_profile",
    "get_logger",
    "get_settings",
    "load_industry_profiles",
    "resolve_industry_key",
]
