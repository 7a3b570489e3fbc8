"""Ledger protocols and typed operation outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pointman.models import PointProgram


@dataclass(frozen=True)
class AccrualOutcome:
    """Result of crediting points for a payment."""

    customer_code: str
    payment_amount: Decimal
    points_added: int
    balance: int
    tier: str
    entry_id: int | None = None  # None when the payment earned no points


@dataclass(frozen=True)
class RedemptionOutcome:
    """Result of spending points for a discount."""

    customer_code: str
    points_used: int
    discount_amount: Decimal
    balance: int
    program_code: str
    entry_id: int


@dataclass(frozen=True)
class AdjustmentOutcome:
    """Result of a manual staff correction."""

    customer_code: str
    points: int
    balance: int
    reason: str
    entry_id: int


@dataclass(frozen=True)
class PointsInfo:
    """Point summary for a customer (balance, tier and program terms)."""

    customer_code: str
    name: str
    balance: int
    lifetime_points: int
    tier: str
    program_code: str | None = None
    program_name: str | None = None
    discount_rate_per_point: Decimal | None = None
    redeemable_value: Decimal | None = None


@dataclass(frozen=True)
class ReconciliationResult:
    """Balance compared against the sum of its history."""

    customer_code: str
    balance: int
    history_total: int

    @property
    def is_consistent(self) -> bool:
        return self.balance == self.history_total

    @property
    def drift(self) -> int:
        return self.balance - self.history_total


@runtime_checkable
class AccrualPolicy(Protocol):
    """
    Protocol for turning a payment into loyalty points.

    Configuration in settings.py:
        POINTMAN = {
            "ACCRUAL_POLICY": "pointman.policies.UnitAmountAccrualPolicy",
        }
    """

    def points_for(self, amount: Decimal, program: PointProgram | None) -> int:
        """
        Return points earned for a payment.

        Args:
            amount: Non-negative payment amount
            program: Customer's active program, or None

        Returns:
            Points to credit (>= 0, and 0 for a zero payment)
        """
        ...
