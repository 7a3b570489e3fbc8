"""Accrual policies: how many points a payment earns."""

import decimal
from decimal import Decimal

from django.utils.module_loading import import_string

from pointman.conf import pointman_settings
from pointman.protocols.ledger import AccrualPolicy


class UnitAmountAccrualPolicy:
    """
    One point per ``unit`` currency units spent.

    The unit comes from the program's ``accrual_unit_amount`` when set,
    otherwise from ``POINTMAN["ACCRUAL_UNIT_AMOUNT"]``. Partial units are
    rounded with ``POINTMAN["ACCRUAL_ROUNDING"]`` (ROUND_DOWN by default,
    so 99.99 earns 9 points at a unit of 10).
    """

    def points_for(self, amount: Decimal, program=None) -> int:
        if amount <= 0:
            return 0
        unit = self.unit_amount(program)
        rounding = getattr(decimal, pointman_settings.ACCRUAL_ROUNDING)
        points = (amount / unit).to_integral_value(rounding=rounding)
        return max(0, int(points))

    @staticmethod
    def unit_amount(program=None) -> Decimal:
        if program is not None and program.accrual_unit_amount:
            return Decimal(program.accrual_unit_amount)
        return Decimal(str(pointman_settings.ACCRUAL_UNIT_AMOUNT))


def get_accrual_policy() -> AccrualPolicy:
    """Instantiate the configured AccrualPolicy."""
    policy_class = import_string(pointman_settings.ACCRUAL_POLICY)
    return policy_class()
