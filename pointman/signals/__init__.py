"""
Pointman signals - public event API.

Emitted on transaction commit by LedgerService, so receivers only ever
see effects that are durably stored:
- points_accrued: Emitted by LedgerService.accrue()
- points_redeemed: Emitted by LedgerService.redeem()
- points_adjusted: Emitted by LedgerService.adjust()
"""

from django.dispatch import Signal

# Ledger signals (emitted by LedgerService)
points_accrued = Signal()  # sender=Customer, customer=Customer, outcome=AccrualOutcome
points_redeemed = Signal()  # sender=Customer, customer=Customer, outcome=RedemptionOutcome
points_adjusted = Signal()  # sender=Customer, customer=Customer, outcome=AdjustmentOutcome
