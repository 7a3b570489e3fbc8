"""Pointman internal services.

- programs: point program store (read-only)
- ledger: customer balances and atomic adjustments
- history: append-only point history

The public API composing them is pointman.service.LedgerService.
"""

from pointman.services import programs
from pointman.services import ledger
from pointman.services import history

__all__ = ["programs", "ledger", "history"]
