"""Pointman protocols."""

from pointman.protocols.ledger import (
    AccrualPolicy,
    AccrualOutcome,
    RedemptionOutcome,
    AdjustmentOutcome,
    PointsInfo,
    ReconciliationResult,
)

__all__ = [
    # Policies
    "AccrualPolicy",
    # Outcomes
    "AccrualOutcome",
    "RedemptionOutcome",
    "AdjustmentOutcome",
    "PointsInfo",
    "ReconciliationResult",
]
