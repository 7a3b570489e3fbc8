"""Pointman models."""

from pointman.models.program import PointProgram
from pointman.models.customer import Customer, LoyaltyTier
from pointman.models.point_history import PointHistoryEntry, TransactionType

__all__ = [
    "PointProgram",
    "Customer",
    "LoyaltyTier",
    # Audit trail
    "PointHistoryEntry",
    "TransactionType",
]
