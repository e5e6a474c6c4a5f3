"""Customer and vendor roster generation."""

from __future__ import annotations

import structlog

from cashflow_sim.config.industries import get_industry_profile
from cashflow_sim.models import (
    BusinessPartners,
    Customer,
    CustomerTier,
    PaymentReliability,
    Vendor,
    VendorImportance,
)
from cashflow_sim.randomness import RandomSource, choice, randint

logger = structlog.get_logger(__name__)

CUSTOMER_COUNT_RANGE = (15, 34)
VENDOR_COUNT_RANGE = (8, 19)

# tier -> (share weight, payment terms in days)
CUSTOMER_TIER_TERMS: dict[CustomerTier, tuple[int, int]] = {
    CustomerTier.LARGE: (5, 45),
    CustomerTier.MEDIUM: (2, 30),
    CustomerTier.SMALL: (1, 15),
}

VENDOR_IMPORTANCE_TERMS: dict[VendorImportance, tuple[int, int]] = {
    VendorImportance.CRITICAL: (8, 15),
    VendorImportance.IMPORTANT: (3, 30),
    VendorImportance.STANDARD: (1, 45),
}

DEFAULT_VENDOR_CATEGORY = "General"


def tier_for_draw(draw: float) -> CustomerTier:
    if draw > 0.8:
        return CustomerTier.LARGE
    if draw > 0.5:
        return CustomerTier.MEDIUM
    return CustomerTier.SMALL


def importance_for_draw(draw: float) -> VendorImportance:
    if draw > 0.8:
        return VendorImportance.CRITICAL
    if draw > 0.5:
        return VendorImportance.IMPORTANT
    return VendorImportance.STANDARD


class BusinessPartnerGenerator:
    """Generates a randomized customer and vendor roster for one run."""

    def __init__(self, rng: RandomSource):
        self._rng = rng
        self._logger = logger.bind(component="partner_generator")

    def _reliability(self) -> PaymentReliability:
        if self._rng.next() > 0.8:
            return PaymentReliability.LATE
        if self._rng.next() > 0.3:
            return PaymentReliability.ON_TIME
        return PaymentReliability.EARLY

    def generate_customers(self) -> tuple[Customer, ...]:
        count = randint(self._rng, *CUSTOMER_COUNT_RANGE)
        drafts: list[tuple[CustomerTier, PaymentReliability]] = []
        for _ in range(count):
            tier = tier_for_draw(self._rng.next())
            drafts.append((tier, self._reliability()))

        total_weight = sum(CUSTOMER_TIER_TERMS[tier][0] for tier, _ in drafts)
        return tuple(
            Customer(
                id=f"cust-{idx}",
                name=f"Customer {idx}",
                tier=tier,
                share=CUSTOMER_TIER_TERMS[tier][0] / total_weight,
                payment_terms=CUSTOMER_TIER_TERMS[tier][1],
                payment_reliability=reliability,
            )
            for idx, (tier, reliability) in enumerate(drafts, start=1)
        )

    def generate_vendors(self, industry: str) -> tuple[Vendor, ...]:
        categories = get_industry_profile(industry).outflow_category_names
        count = randint(self._rng, *VENDOR_COUNT_RANGE)
        drafts: list[tuple[VendorImportance, str]] = []
        for _ in range(count):
            importance = importance_for_draw(self._rng.next())
            category = choice(self._rng, categories) or DEFAULT_VENDOR_CATEGORY
            drafts.append((importance, category))

        total_weight = sum(VENDOR_IMPORTANCE_TERMS[imp][0] for imp, _ in drafts)
        return tuple(
            Vendor(
                id=f"vendor-{idx}",
                name=f"Vendor {idx}",
                importance=importance,
                share=VENDOR_IMPORTANCE_TERMS[importance][0] / total_weight,
                payment_terms=VENDOR_IMPORTANCE_TERMS[importance][1],
                category=category,
            )
            for idx, (importance, category) in enumerate(drafts, start=1)
        )

    def generate(self, industry: str) -> BusinessPartners:
        """Build a fresh roster; shares sum to 1.0 within each group."""
        partners = BusinessPartners(
            customers=self.generate_customers(),
            vendors=self.generate_vendors(industry),
        )
        self._logger.debug(
            "business_partners_generated",
            industry=industry,
            customers=len(partners.customers),
            vendors=len(partners.vendors),
        )
        return partners
