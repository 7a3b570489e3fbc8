"""Customer ledger - point balance reads and atomic adjustments.

Every balance write goes through adjust_balance(), which applies the delta
with one conditional UPDATE (``point_balance = point_balance + delta WHERE
point_balance >= -delta``). The row lock taken by that UPDATE is held until
the surrounding transaction commits, so adjustments on the same customer
are serialized while other customers proceed in parallel.
"""

import logging

from django.db import DatabaseError, transaction
from django.db.models import F
from django.utils import timezone

from pointman.exceptions import (
    InsufficientBalanceError,
    InvalidArgumentError,
    NotFoundError,
    PersistenceError,
)
from pointman.models import Customer

logger = logging.getLogger(__name__)

# IntegerField range shared by every supported backend
MAX_POINTS = 2**31 - 1


def check_customer_code(customer_code) -> None:
    """Reject empty or non-string customer codes."""
    if not isinstance(customer_code, str) or not customer_code.strip():
        raise InvalidArgumentError("INVALID_CUSTOMER_CODE", customer_code=customer_code)


def get_customer(customer_code: str) -> Customer:
    """Get active customer (with program) by code."""
    check_customer_code(customer_code)
    try:
        return Customer.objects.select_related("program").get(
            code=customer_code, is_active=True
        )
    except Customer.DoesNotExist:
        raise NotFoundError("CUSTOMER_NOT_FOUND", customer_code=customer_code)
    except DatabaseError as exc:
        raise PersistenceError("LEDGER_READ_FAILED", customer_code=customer_code) from exc


def get_balance(customer_code: str) -> int:
    """Current point balance of an active customer."""
    check_customer_code(customer_code)
    try:
        return Customer.objects.values_list("point_balance", flat=True).get(
            code=customer_code, is_active=True
        )
    except Customer.DoesNotExist:
        raise NotFoundError("CUSTOMER_NOT_FOUND", customer_code=customer_code)
    except DatabaseError as exc:
        raise PersistenceError("LEDGER_READ_FAILED", customer_code=customer_code) from exc


def adjust_balance(customer_code: str, delta: int, *, lifetime: bool = False) -> int:
    """
    Atomically apply ``delta`` to the customer's balance.

    Args:
        customer_code: Customer code
        delta: Signed point change
        lifetime: Also add a positive delta to lifetime_points (accruals)

    Returns:
        New balance

    Raises:
        InvalidArgumentError: If delta is not an int or would overflow a point counter
        InsufficientBalanceError: If delta would drive the balance negative
        NotFoundError: If the customer does not exist
        PersistenceError: If the database write fails
    """
    check_customer_code(customer_code)
    if isinstance(delta, bool) or not isinstance(delta, int):
        raise InvalidArgumentError("INVALID_POINTS", delta=delta)
    if delta == 0:
        return get_balance(customer_code)
    if abs(delta) > MAX_POINTS:
        raise InvalidArgumentError("INVALID_POINTS", delta=delta)

    updates = {
        "point_balance": F("point_balance") + delta,
        "updated_at": timezone.now(),
    }
    if lifetime and delta > 0:
        updates["lifetime_points"] = F("lifetime_points") + delta

    qs = Customer.objects.filter(code=customer_code, is_active=True)
    if delta < 0:
        qs = qs.filter(point_balance__gte=-delta)
    else:
        qs = qs.filter(point_balance__lte=MAX_POINTS - delta)
        if lifetime:
            qs = qs.filter(lifetime_points__lte=MAX_POINTS - delta)

    try:
        with transaction.atomic():
            if not qs.update(**updates):
                # Nothing matched: no such customer, not enough points or a full counter
                available = get_balance(customer_code)
                if delta > 0:
                    raise InvalidArgumentError(
                        "INVALID_POINTS",
                        customer_code=customer_code,
                        delta=delta,
                        balance=available,
                    )
                raise InsufficientBalanceError(
                    "INSUFFICIENT_POINTS",
                    customer_code=customer_code,
                    available=available,
                    requested=-delta,
                )
            return Customer.objects.values_list("point_balance", flat=True).get(
                code=customer_code
            )
    except DatabaseError as exc:
        logger.exception("Point balance update failed for %s (delta=%s)", customer_code, delta)
        raise PersistenceError(
            "LEDGER_WRITE_FAILED",
            customer_code=customer_code,
            delta=delta,
        ) from exc
