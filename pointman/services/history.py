"""Point history log - append-only audit trail.

There is no update or delete here; corrections are recorded as new
compensating entries.
"""

import logging
from decimal import Decimal

from django.db import DatabaseError
from django.db.models import Sum

from pointman.conf import pointman_settings
from pointman.exceptions import InvalidArgumentError, PersistenceError
from pointman.models import Customer, PointHistoryEntry

logger = logging.getLogger(__name__)


def append(
    customer: Customer,
    points: int,
    transaction_type: str,
    *,
    balance_after: int,
    amount: Decimal | None = None,
    description: str = "",
    reference: str = "",
    created_by: str = "",
) -> int:
    """
    Record a balance change.

    Must run in the same transaction as the balance update it describes.

    Returns:
        Id of the created PointHistoryEntry

    Raises:
        PersistenceError: If the insert fails
    """
    if isinstance(points, bool) or not isinstance(points, int) or points == 0:
        raise InvalidArgumentError("INVALID_POINTS", points=points)

    try:
        entry = PointHistoryEntry.objects.create(
            customer=customer,
            transaction_type=transaction_type,
            points=points,
            balance_after=balance_after,
            amount=amount,
            description=description,
            reference=reference,
            created_by=created_by,
        )
    except DatabaseError as exc:
        logger.exception("Point history append failed for %s", customer.code)
        raise PersistenceError(
            "HISTORY_WRITE_FAILED",
            customer_code=customer.code,
            points=points,
        ) from exc

    return entry.pk


def entries(
    customer_code: str,
    limit: int | None = None,
    transaction_type: str | None = None,
) -> list[PointHistoryEntry]:
    """Customer's history, most recent first."""
    if limit is None:
        limit = pointman_settings.HISTORY_PAGE_SIZE

    qs = PointHistoryEntry.objects.filter(
        customer__code=customer_code,
        customer__is_active=True,
    )
    if transaction_type:
        qs = qs.filter(transaction_type=transaction_type)
    return list(qs[:limit])


def total_points(customer_code: str) -> int:
    """Sum of every recorded delta for the customer."""
    total = PointHistoryEntry.objects.filter(
        customer__code=customer_code,
    ).aggregate(total=Sum("points"))["total"]
    return total or 0
