"""Pytest configuration and fixtures."""

from datetime import date

import pytest

from cashflow_sim.config.settings import get_settings
from cashflow_sim.models import (
    BusinessPartners,
    Customer,
    CustomerTier,
    PaymentReliability,
    Vendor,
    VendorImportance,
)
from cashflow_sim.randomness import PythonRandomSource


class ScriptedRandom:
    """RandomSource replaying a fixed list of draws, cycling when exhausted."""

    def __init__(self, values):
        self._values = list(values)
        self._index = 0
        self.calls = 0

    def next(self) -> float:
        value = self._values[self._index % len(self._values)]
        self._index += 1
        self.calls += 1
        return value


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Isolate each test from the caller's environment and settings cache."""
    for name in (
        "STARTING_BALANCE",
        "HISTORY_DAYS",
        "FORECAST_DAYS",
        "DEFAULT_INDUSTRY",
        "RANDOM_SEED",
        "LOG_LEVEL",
        "LOG_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def scripted_rng():
    """Factory building a ScriptedRandom from the given draws."""
    return lambda *values: ScriptedRandom(values)


@pytest.fixture
def seeded_rng():
    return PythonRandomSource(seed=1234)


@pytest.fixture
def history_end():
    return date(2025, 6, 30)


@pytest.fixture
def roster():
    """Small hand-built roster with one partner per tier."""
    return BusinessPartners(
        customers=(
            Customer(
                id="cust-1",
                name="Customer 1",
                tier=CustomerTier.LARGE,
                share=0.5,
                payment_terms=45,
                payment_reliability=PaymentReliability.ON_TIME,
            ),
            Customer(
                id="cust-2",
                name="Customer 2",
                tier=CustomerTier.MEDIUM,
                share=0.3,
                payment_terms=30,
                payment_reliability=PaymentReliability.LATE,
            ),
            Customer(
                id="cust-3",
                name="Customer 3",
                tier=CustomerTier.SMALL,
                share=0.2,
                payment_terms=15,
                payment_reliability=PaymentReliability.EARLY,
            ),
        ),
        vendors=(
            Vendor(
                id="vendor-1",
                name="Vendor 1",
                importance=VendorImportance.CRITICAL,
                share=0.6,
                payment_terms=15,
                category="Raw Materials",
            ),
            Vendor(
                id="vendor-2",
                name="Vendor 2",
                importance=VendorImportance.STANDARD,
                share=0.4,
                payment_terms=45,
                category="Utilities",
            ),
        ),
    )
