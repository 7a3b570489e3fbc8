"""
Django Pointman - Loyalty Points Ledger.

Usage:
    from pointman import LedgerService

    outcome = LedgerService.accrue("KH-0001", Decimal("100.00"))
    outcome.points_added  # 10 with the default 1 point per 10 units

    redemption = LedgerService.redeem("KH-0001", 6)
    redemption.discount_amount
    balance = LedgerService.get_balance("KH-0001")
"""


def __getattr__(name):
    if name == "LedgerService":
        from pointman.service import LedgerService

        return LedgerService
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["LedgerService"]
__version__ = "0.1.0"
