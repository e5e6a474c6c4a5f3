"""Shift customer inflows from invoice date to expected cash date."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from datetime import timedelta

import structlog

from cashflow_sim.models import PaymentReliability, Transaction, round_half_up
from cashflow_sim.randomness import RandomSource, uniform

logger = structlog.get_logger(__name__)

EARLY_DAYS_RANGE = (5.0, 10.0)
LATE_DAYS_RANGE = (5.0, 15.0)


class PaymentTermsProjector:
    """Moves each customer inflow to ``invoice date + realised delay``.

    Must run once over the full transaction list before daily aggregation.
    Outflows and inflows without customer payment terms pass through.
    """

    def __init__(self, rng: RandomSource):
        self._rng = rng
        self._logger = logger.bind(component="payment_terms_projector")

    def delay_days(self, payment_terms: int, reliability: PaymentReliability | None) -> int:
        """Realised collection delay; early payers never go below zero."""
        if reliability == PaymentReliability.EARLY:
            return max(0, payment_terms - round_half_up(uniform(self._rng, *EARLY_DAYS_RANGE)))
        if reliability == PaymentReliability.LATE:
            return payment_terms + round_half_up(uniform(self._rng, *LATE_DAYS_RANGE))
        return payment_terms

    def project(self, transaction: Transaction) -> Transaction:
        if not transaction.is_inflow or transaction.payment_terms is None:
            return transaction
        delay = self.delay_days(transaction.payment_terms, transaction.reliability)
        return replace(
            transaction,
            date=transaction.date + timedelta(days=delay),
            invoice_date=transaction.date,
            actual_payment_terms=delay,
        )

    def apply(self, transactions: Iterable[Transaction]) -> list[Transaction]:
        """Return a new list with every eligible inflow shifted."""
        projected = [self.project(transaction) for transaction in transactions]
        shifted = sum(1 for t in projected if t.invoice_date is not None)
        self._logger.debug("payment_terms_applied", shifted=shifted, total=len(projected))
        return projected
