"""
Pointman public API.

CORE (essential):
    LedgerService.accrue(code, amount)   - Credit points for a payment
    LedgerService.redeem(code, points)   - Spend points for a discount
    LedgerService.get_balance(code)      - Current point balance

CONVENIENCE (helpers):
    LedgerService.adjust(...)            - Manual staff correction
    LedgerService.get_program(code)      - Point program lookup
    LedgerService.get_points_info(code)  - Balance, tier and program terms
    LedgerService.get_history(code)      - Point history
    LedgerService.reconcile(code)        - Balance vs. history check
"""

import logging
from decimal import Decimal, InvalidOperation
from functools import partial

from django.db import DatabaseError, transaction
from django.db.models import Sum
from django.db.models.functions import Coalesce

from pointman.conf import pointman_settings
from pointman.exceptions import (
    InsufficientBalanceError,
    InvalidArgumentError,
    PersistenceError,
)
from pointman.models import (
    Customer,
    LoyaltyTier,
    PointHistoryEntry,
    PointProgram,
    TransactionType,
)
from pointman.policies import get_accrual_policy
from pointman.protocols.ledger import (
    AccrualOutcome,
    AdjustmentOutcome,
    PointsInfo,
    ReconciliationResult,
    RedemptionOutcome,
)
from pointman.services import history, ledger, programs
from pointman.signals import points_accrued, points_adjusted, points_redeemed

logger = logging.getLogger(__name__)


_TIER_ORDER = list(LoyaltyTier.values)

# Largest amount PointHistoryEntry.amount can hold (14 digits, 4 decimal places)
MAX_AMOUNT = Decimal("9999999999.9999")


class LedgerService:
    """
    Loyalty points ledger.

    Uses @classmethod for extensibility (consistent with the other services).
    Each balance change and its history entry are written in one
    transaction.atomic() block: both are stored or neither is. Nothing is
    retried here and nothing is idempotent, so issuing the same redemption
    twice spends points twice.
    """

    # ======================================================================
    # CORE API
    # ======================================================================

    @classmethod
    def get_balance(cls, customer_code: str) -> int:
        """
        Get current points balance.

        Raises:
            NotFoundError: If customer not found
        """
        return ledger.get_balance(customer_code)

    @classmethod
    def accrue(
        cls,
        customer_code: str,
        payment_amount,
        description: str = "",
        reference: str = "",
        created_by: str = "",
    ) -> AccrualOutcome:
        """
        Credit points earned by a payment.

        Points come from the configured AccrualPolicy. A payment too small
        to earn a point changes nothing and records no history.

        Args:
            customer_code: Customer code
            payment_amount: Amount paid (Decimal, int or numeric string)
            description: Reason for the accrual
            reference: External reference (folio:123)
            created_by: Who triggered the accrual

        Returns:
            AccrualOutcome

        Raises:
            InvalidArgumentError: If the amount is negative, non-finite, too large or a float,
                or the policy yields more points than a balance can hold
            NotFoundError: If customer not found
            PersistenceError: If the ledger could not be written
        """
        amount = cls._to_amount(payment_amount)

        try:
            with transaction.atomic():
                customer = ledger.get_customer(customer_code)
                program = programs.active_program(customer)
                points = get_accrual_policy().points_for(amount, program)

                if isinstance(points, bool) or not isinstance(points, int):
                    raise InvalidArgumentError("INVALID_POINTS", points=points)
                if points < 0 or points > ledger.MAX_POINTS:
                    raise InvalidArgumentError("INVALID_POINTS", points=points)

                if points == 0:
                    return AccrualOutcome(
                        customer_code=customer.code,
                        payment_amount=amount,
                        points_added=0,
                        balance=customer.point_balance,
                        tier=customer.tier,
                    )

                balance = ledger.adjust_balance(customer_code, points, lifetime=True)
                entry_id = history.append(
                    customer,
                    points,
                    TransactionType.ACCRUE,
                    balance_after=balance,
                    amount=amount,
                    description=description,
                    reference=reference,
                    created_by=created_by,
                )
                tier = cls._update_tier(customer)

                outcome = AccrualOutcome(
                    customer_code=customer.code,
                    payment_amount=amount,
                    points_added=points,
                    balance=balance,
                    tier=tier,
                    entry_id=entry_id,
                )
                transaction.on_commit(
                    partial(points_accrued.send, sender=Customer, customer=customer, outcome=outcome)
                )
        except DatabaseError as exc:
            logger.exception("Accrual failed for %s", customer_code)
            raise PersistenceError("LEDGER_WRITE_FAILED", customer_code=customer_code) from exc

        logger.info(
            "Accrued %s points for %s (amount=%s, balance=%s)",
            points,
            customer_code,
            amount,
            balance,
        )
        return outcome

    @classmethod
    def redeem(
        cls,
        customer_code: str,
        points: int,
        description: str = "",
        reference: str = "",
        created_by: str = "",
    ) -> RedemptionOutcome:
        """
        Spend points for a discount.

        discount_amount = points * program.discount_rate_per_point, in exact
        decimal arithmetic.

        Args:
            customer_code: Customer code
            points: Points to redeem (must be a positive int)
            description: What the discount was applied to
            reference: External reference
            created_by: Who triggered the redemption

        Returns:
            RedemptionOutcome

        Raises:
            InvalidArgumentError: If points <= 0
            NotFoundError: If customer not found or has no usable program
            InsufficientBalanceError: If the balance does not cover points
            PersistenceError: If the ledger could not be written
        """
        cls._check_points(points)

        try:
            with transaction.atomic():
                customer = ledger.get_customer(customer_code)

                # Early exit only; adjust_balance() re-checks atomically
                if customer.point_balance < points:
                    raise InsufficientBalanceError(
                        "INSUFFICIENT_POINTS",
                        customer_code=customer_code,
                        available=customer.point_balance,
                        requested=points,
                    )

                program = programs.program_for(customer)
                discount_amount = Decimal(points) * program.discount_rate_per_point

                balance = ledger.adjust_balance(customer_code, -points)
                entry_id = history.append(
                    customer,
                    -points,
                    TransactionType.REDEEM,
                    balance_after=balance,
                    amount=discount_amount,
                    description=description,
                    reference=reference,
                    created_by=created_by,
                )
                customer.point_balance = balance

                outcome = RedemptionOutcome(
                    customer_code=customer.code,
                    points_used=points,
                    discount_amount=discount_amount,
                    balance=balance,
                    program_code=program.code,
                    entry_id=entry_id,
                )
                transaction.on_commit(
                    partial(points_redeemed.send, sender=Customer, customer=customer, outcome=outcome)
                )
        except InsufficientBalanceError as exc:
            logger.warning(
                "Redemption rejected for %s: requested=%s available=%s",
                customer_code,
                points,
                exc.data.get("available"),
            )
            raise
        except DatabaseError as exc:
            logger.exception("Redemption failed for %s", customer_code)
            raise PersistenceError("LEDGER_WRITE_FAILED", customer_code=customer_code) from exc

        logger.info(
            "Redeemed %s points for %s (discount=%s, balance=%s)",
            points,
            customer_code,
            discount_amount,
            balance,
        )
        return outcome

    # ======================================================================
    # CONVENIENCE API
    # ======================================================================

    @classmethod
    def adjust(
        cls,
        customer_code: str,
        points: int,
        reason: str,
        reference: str = "",
        created_by: str = "",
    ) -> AdjustmentOutcome:
        """
        Apply a manual correction (positive or negative).

        Recorded as an "adjust" history entry. Does not count toward
        lifetime points and cannot overdraw the balance.

        Raises:
            InvalidArgumentError: If points is 0 or reason is empty
            NotFoundError: If customer not found
            InsufficientBalanceError: If a negative adjustment exceeds the balance
        """
        if isinstance(points, bool) or not isinstance(points, int) or points == 0:
            raise InvalidArgumentError("INVALID_POINTS", points=points)
        if not isinstance(reason, str) or not reason.strip():
            raise InvalidArgumentError("INVALID_REASON", customer_code=customer_code)

        try:
            with transaction.atomic():
                customer = ledger.get_customer(customer_code)
                balance = ledger.adjust_balance(customer_code, points)
                entry_id = history.append(
                    customer,
                    points,
                    TransactionType.ADJUST,
                    balance_after=balance,
                    description=reason,
                    reference=reference,
                    created_by=created_by,
                )
                customer.point_balance = balance

                outcome = AdjustmentOutcome(
                    customer_code=customer.code,
                    points=points,
                    balance=balance,
                    reason=reason,
                    entry_id=entry_id,
                )
                transaction.on_commit(
                    partial(points_adjusted.send, sender=Customer, customer=customer, outcome=outcome)
                )
        except DatabaseError as exc:
            logger.exception("Adjustment failed for %s", customer_code)
            raise PersistenceError("LEDGER_WRITE_FAILED", customer_code=customer_code) from exc

        logger.info(
            "Adjusted %s points for %s by %s: %s",
            points,
            customer_code,
            created_by or "-",
            reason,
        )
        return outcome

    @classmethod
    def get_program(cls, program_code: str) -> PointProgram:
        """Get active point program by code (NotFoundError if absent)."""
        return programs.lookup(program_code)

    @classmethod
    def get_points_info(cls, customer_code: str) -> PointsInfo:
        """Balance, tier and program terms for a customer."""
        customer = ledger.get_customer(customer_code)
        program = programs.active_program(customer)

        if program is None:
            return PointsInfo(
                customer_code=customer.code,
                name=customer.name,
                balance=customer.point_balance,
                lifetime_points=customer.lifetime_points,
                tier=customer.tier,
            )

        return PointsInfo(
            customer_code=customer.code,
            name=customer.name,
            balance=customer.point_balance,
            lifetime_points=customer.lifetime_points,
            tier=customer.tier,
            program_code=program.code,
            program_name=program.name,
            discount_rate_per_point=program.discount_rate_per_point,
            redeemable_value=customer.point_balance * program.discount_rate_per_point,
        )

    @classmethod
    def get_history(
        cls,
        customer_code: str,
        limit: int | None = None,
        transaction_type: str | None = None,
    ) -> list[PointHistoryEntry]:
        """Get point history for a customer (most recent first)."""
        ledger.get_customer(customer_code)
        return history.entries(customer_code, limit=limit, transaction_type=transaction_type)

    @classmethod
    def reconcile(cls, customer_code: str) -> ReconciliationResult:
        """Compare the stored balance with the sum of the customer's history."""
        customer = ledger.get_customer(customer_code)
        result = ReconciliationResult(
            customer_code=customer.code,
            balance=customer.point_balance,
            history_total=history.total_points(customer.code),
        )
        if not result.is_consistent:
            logger.warning(
                "Point balance drift for %s: balance=%s history=%s",
                customer.code,
                result.balance,
                result.history_total,
            )
        return result

    @classmethod
    def reconcile_all(cls) -> list[ReconciliationResult]:
        """Reconcile every active customer in one query."""
        rows = (
            Customer.objects.filter(is_active=True)
            .annotate(history_total=Coalesce(Sum("point_history__points"), 0))
            .values_list("code", "point_balance", "history_total")
            .order_by("code")
        )
        return [
            ReconciliationResult(customer_code=code, balance=balance, history_total=total)
            for code, balance, total in rows
        ]

    # ======================================================================
    # Internals
    # ======================================================================

    @staticmethod
    def _to_amount(value) -> Decimal:
        """Coerce a payment amount to Decimal. Floats are refused."""
        if isinstance(value, (bool, float)):
            raise InvalidArgumentError("INVALID_AMOUNT", amount=value)
        try:
            amount = value if isinstance(value, Decimal) else Decimal(value)
        except (InvalidOperation, TypeError, ValueError):
            raise InvalidArgumentError("INVALID_AMOUNT", amount=value)
        if not amount.is_finite() or amount < 0 or amount > MAX_AMOUNT:
            raise InvalidArgumentError("INVALID_AMOUNT", amount=value)
        return amount

    @staticmethod
    def _check_points(points) -> None:
        if isinstance(points, bool) or not isinstance(points, int) or points <= 0:
            raise InvalidArgumentError("INVALID_POINTS", points=points)

    @classmethod
    def _tier_for(cls, lifetime_points: int) -> str:
        thresholds = sorted(
            pointman_settings.TIER_THRESHOLDS.items(),
            key=lambda item: item[1],
            reverse=True,
        )
        for tier, threshold in thresholds:
            if lifetime_points >= threshold:
                return tier
        return LoyaltyTier.BRONZE

    @classmethod
    def _update_tier(cls, customer: Customer) -> str:
        """Auto-upgrade tier from lifetime points. Never downgrades."""
        customer.refresh_from_db(fields=["point_balance", "lifetime_points", "tier"])
        tier = cls._tier_for(customer.lifetime_points)
        if _TIER_ORDER.index(tier) > _TIER_ORDER.index(customer.tier):
            Customer.objects.filter(pk=customer.pk).update(tier=tier)
            customer.tier = tier
        return customer.tier
