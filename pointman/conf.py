"""
Pointman configuration.

Usage in settings.py:
    POINTMAN = {
        "ACCRUAL_UNIT_AMOUNT": "10",
        "ACCRUAL_ROUNDING": "ROUND_DOWN",
    }
"""

from dataclasses import dataclass, field
from typing import Any

from django.conf import settings


def _default_tier_thresholds() -> dict[str, int]:
    return {
        "platinum": 5000,
        "gold": 2000,
        "silver": 500,
        "bronze": 0,
    }


@dataclass
class PointmanSettings:
    """Pointman configuration settings."""

    # Dotted path to an AccrualPolicy implementation
    ACCRUAL_POLICY: str = "pointman.policies.UnitAmountAccrualPolicy"

    # Currency units per accrued point when the program sets none
    ACCRUAL_UNIT_AMOUNT: str = "10"

    # Name of a decimal rounding constant (ROUND_DOWN, ROUND_HALF_UP, ...)
    ACCRUAL_ROUNDING: str = "ROUND_DOWN"

    # Lifetime points needed per tier
    TIER_THRESHOLDS: dict[str, int] = field(default_factory=_default_tier_thresholds)

    # Default number of history entries returned per query
    HISTORY_PAGE_SIZE: int = 50


def get_pointman_settings() -> PointmanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "POINTMAN", {})
    return PointmanSettings(**user_settings)


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_pointman_settings(), name)


pointman_settings = _LazySettings()
