"""Industry profile catalog loader."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import structlog
import yaml  # type: ignore[import-untyped]

logger = structlog.get_logger(__name__)

DEFAULT_INDUSTRY = "manufacturing"

RECURRING_COST_KEYS = frozenset(
    {
        "payroll",
        "rent",
        "utilities",
        "software",
        "insurance",
        "marketing",
        "cloud",
        "raw_materials",
        "inventory",
    }
)
REQUIRED_COST_KEYS = ("payroll", "rent", "utilities", "insurance", "marketing")


@dataclass(frozen=True)
class SpecialEvent:
    """Calendar-anchored multiplier layered on top of seasonality."""

    name: str
    month: int
    day: int
    inflow_factor: float = 1.0
    outflow_factor: float = 1.0
    inflow_category: str | None = None

    def matches(self, target_date: date) -> bool:
        return self.month == target_date.month and self.day == target_date.day


@dataclass(frozen=True)
class CategoryWeight:
    name: str
    weight: float

    @property
    def is_refund(self) -> bool:
        return self.weight < 0


@dataclass(frozen=True)
class IndustryProfile:
    """Seasonality, calendar events and category tables for one industry."""

    key: str
    name: str
    inflow_seasonality: tuple[float, ...]
    outflow_seasonality: tuple[float, ...]
    weekday_factors: tuple[float, ...]
    special_events: tuple[SpecialEvent, ...]
    average_dso: float
    average_dpo: float
    daily_variability: float
    base_daily_inflow: Decimal
    transactions_per_day: tuple[int, int]
    split_share: tuple[float, float]
    inflow_categories: tuple[CategoryWeight, ...]
    outflow_categories: tuple[CategoryWeight, ...]
    recurring_costs: Mapping[str, Decimal]

    def inflow_factor(self, month: int) -> float:
        """Inflow multiplier for a 1-based month."""
        return self.inflow_seasonality[month - 1]

    def weekday_factor(self, weekday: int) -> float:
        """Multiplier for ``date.weekday()`` (0=Monday)."""
        return self.weekday_factors[weekday]

    def event_for(self, target_date: date) -> SpecialEvent | None:
        """Special event on the given date; the last listed match wins."""
        found = None
        for event in self.special_events:
            if event.matches(target_date):
                found = event
        return found

    def recurring_cost(self, key: str) -> Decimal | None:
        return self.recurring_costs.get(key)

    @property
    def outflow_category_names(self) -> tuple[str, ...]:
        return tuple(category.name for category in self.outflow_categories)

    def find_outflow_category(self, *names: str, default: str) -> str:
        """First outflow category among ``names`` defined for this industry."""
        known = set(self.outflow_category_names)
        for name in names:
            if name in known:
                return name
        return default

    def find_inflow_category(self, name: str) -> CategoryWeight | None:
        for category in self.inflow_categories:
            if category.name == name:
                return category
        return None


def _float_list(value: Any, length: int, field_name: str, key: str) -> tuple[float, ...]:
    if not isinstance(value, list) or len(value) != length:
        raise ValueError(f"{key}: {field_name} must be a list of {length} numbers")
    try:
        return tuple(float(item) for item in value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{key}: {field_name} contains a non-number") from exc


def _pair(value: Any, cast: type, field_name: str, key: str) -> tuple[Any, Any]:
    if not isinstance(value, list) or len(value) != 2:
        raise ValueError(f"{key}: {field_name} must be a [low, high] pair")
    low, high = cast(value[0]), cast(value[1])
    if low > high:
        raise ValueError(f"{key}: {field_name} low bound exceeds high bound")
    return low, high


def _parse_categories(value: Any, field_name: str, key: str) -> tuple[CategoryWeight, ...]:
    if not isinstance(value, list) or not value:
        raise ValueError(f"{key}: categories.{field_name} must be a non-empty list")
    results: list[CategoryWeight] = []
    for idx, item in enumerate(value):
        if not isinstance(item, dict) or not item.get("name"):
            raise ValueError(f"{key}: categories.{field_name}[{idx}] missing name")
        try:
            weight = float(item.get("weight", 0))
        except (TypeError, ValueError) as exc:
            raise ValueError(
                f"{key}: categories.{field_name}[{idx}] invalid weight"
            ) from exc
        results.append(CategoryWeight(name=str(item["name"]), weight=weight))
    return tuple(results)


def _parse_event(item: Any, idx: int, key: str) -> SpecialEvent:
    if not isinstance(item, dict) or not item.get("name"):
        raise ValueError(f"{key}: special_events[{idx}] missing name")
    month = item.get("month")
    day = item.get("day")
    if not isinstance(month, int) or not isinstance(day, int):
        raise ValueError(f"{key}: special_events[{idx}] requires integer month/day")
    if not (1 <= month <= 12) or not (1 <= day <= 31):
        raise ValueError(f"{key}: special_events[{idx}] month/day out of range")
    category = item.get("inflow_category")
    return SpecialEvent(
        name=str(item["name"]),
        month=month,
        day=day,
        inflow_factor=float(item.get("inflow_factor", 1.0)),
        outflow_factor=float(item.get("outflow_factor", 1.0)),
        inflow_category=str(category) if category else None,
    )


def _parse_costs(value: Any, key: str) -> Mapping[str, Decimal]:
    if not isinstance(value, dict):
        raise ValueError(f"{key}: recurring_costs must be a mapping")
    unknown = set(value) - RECURRING_COST_KEYS
    if unknown:
        raise ValueError(f"{key}: unknown recurring_costs {sorted(unknown)}")
    missing = [name for name in REQUIRED_COST_KEYS if name not in value]
    if missing:
        raise ValueError(f"{key}: recurring_costs missing {missing}")
    return MappingProxyType(
        {name: Decimal(str(amount)) for name, amount in value.items()}
    )


def _parse_profile(key: str, data: Any) -> IndustryProfile:
    if not isinstance(data, dict):
        raise ValueError(f"profile {key!r} must be a mapping")

    seasonality = data.get("seasonality") or {}
    categories = data.get("categories") or {}
    raw_events = data.get("special_events") or []
    if not isinstance(raw_events, list):
        raise ValueError(f"{key}: special_events must be a list")

    variability = float(data.get("daily_variability", 0.0))
    if not 0 <= variability < 1:
        raise ValueError(f"{key}: daily_variability must be in [0, 1)")

    inflows = _float_list(seasonality.get("inflows"), 12, "seasonality.inflows", key)
    outflows = _float_list(seasonality.get("outflows"), 12, "seasonality.outflows", key)
    per_day = _pair(data.get("transactions_per_day"), int, "transactions_per_day", key)

    return IndustryProfile(
        key=key,
        name=str(data.get("name") or key),
        inflow_seasonality=inflows,
        outflow_seasonality=outflows,
        weekday_factors=_float_list(seasonality.get("weekdays"), 7, "seasonality.weekdays", key),
        special_events=tuple(_parse_event(item, idx, key) for idx, item in enumerate(raw_events)),
        average_dso=float(data["average_dso"]),
        average_dpo=float(data["average_dpo"]),
        daily_variability=variability,
        base_daily_inflow=Decimal(str(data["base_daily_inflow"])),
        transactions_per_day=per_day,
        split_share=_pair(data.get("split_share"), float, "split_share", key),
        inflow_categories=_parse_categories(categories.get("inflows"), "inflows", key),
        outflow_categories=_parse_categories(categories.get("outflows"), "outflows", key),
        recurring_costs=_parse_costs(data.get("recurring_costs"), key),
    )


@lru_cache
def load_industry_profiles() -> Mapping[str, IndustryProfile]:
    """Load the packaged industry profiles from YAML."""
    profiles_path = Path(__file__).resolve().parent / "industries.yaml"
    data = yaml.safe_load(profiles_path.read_text(encoding="utf-8"))
    if not isinstance(data, dict) or not isinstance(data.get("profiles"), dict):
        raise ValueError("industries.yaml must be a mapping with 'profiles'")

    profiles: dict[str, IndustryProfile] = {}
    for key, item in data["profiles"].items():
        try:
            profiles[str(key)] = _parse_profile(str(key), item)
        except KeyError as exc:
            raise ValueError(f"{key}: missing field {exc.args[0]!r}") from exc

    if DEFAULT_INDUSTRY not in profiles:
        raise ValueError(f"industries.yaml must define {DEFAULT_INDUSTRY!r}")
    return MappingProxyType(profiles)


def resolve_industry_key(industry: str | None) -> str:
    """Map a key or display name to a catalog key, defaulting to manufacturing."""
    profiles = load_industry_profiles()
    if industry:
        normalized = industry.strip().lower()
        if normalized in profiles:
            return normalized
        for key, profile in profiles.items():
            if profile.name.lower() == normalized:
                return key
    logger.warning(
        "industry_profile_fallback", requested=industry, fallback=DEFAULT_INDUSTRY
    )
    return DEFAULT_INDUSTRY


def get_industry_profile(industry: str | None) -> IndustryProfile:
    """Look up a profile; unknown or missing keys get the default profile."""
    return load_industry_profiles()[resolve_industry_key(industry)]
