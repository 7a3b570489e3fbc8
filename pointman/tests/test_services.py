"""Tests for Pointman internal services and accrual policies."""

from decimal import Decimal
from unittest.mock import patch

import pytest
from django.db import DatabaseError, transaction
from django.db.models import QuerySet
from django.test import override_settings

from pointman.exceptions import (
    InsufficientBalanceError,
    InvalidArgumentError,
    NotFoundError,
    PersistenceError,
)
from pointman.models import PointHistoryEntry, TransactionType
from pointman.models.point_history import PointHistoryQuerySet
from pointman.policies import UnitAmountAccrualPolicy, get_accrual_policy
from pointman.protocols import AccrualPolicy
from pointman.services import history, ledger, programs


pytestmark = pytest.mark.django_db


class TestProgramStore:
    """Tests for the point program store."""

    def test_lookup(self, program):
        assert programs.lookup("standard") == program

    def test_lookup_unknown_raises(self, db):
        with pytest.raises(NotFoundError, match="PROGRAM_NOT_FOUND"):
            programs.lookup("missing")

    def test_lookup_inactive_raises(self, program):
        program.is_active = False
        program.save()

        with pytest.raises(NotFoundError, match="PROGRAM_NOT_FOUND"):
            programs.lookup("standard")

    def test_lookup_non_string_raises(self, db):
        with pytest.raises(InvalidArgumentError, match="INVALID_PROGRAM_CODE"):
            programs.lookup(None)

    def test_program_for_member(self, customer, program):
        assert programs.program_for(customer) == program

    def test_program_for_non_member_raises(self, customer_no_program):
        with pytest.raises(NotFoundError, match="NO_PROGRAM") as exc_info:
            programs.program_for(customer_no_program)
        assert exc_info.value.data["customer_code"] == "KH-0002"

    def test_active_program(self, customer, customer_no_program, program):
        assert programs.active_program(customer) == program
        assert programs.active_program(customer_no_program) is None

        program.is_active = False
        program.save()
        customer.refresh_from_db()
        assert programs.active_program(customer) is None


class TestCustomerLedger:
    """Tests for balance reads and atomic adjustments."""

    def test_get_balance(self, customer):
        assert ledger.get_balance("KH-0001") == 0

    def test_get_balance_unknown_raises(self, db):
        with pytest.raises(NotFoundError, match="CUSTOMER_NOT_FOUND"):
            ledger.get_balance("NOPE")

    def test_get_balance_inactive_raises(self, customer):
        customer.is_active = False
        customer.save()

        with pytest.raises(NotFoundError, match="CUSTOMER_NOT_FOUND"):
            ledger.get_balance("KH-0001")

    @pytest.mark.parametrize("code", ["", "   ", None, 42])
    def test_malformed_code_raises(self, db, code):
        with pytest.raises(InvalidArgumentError, match="INVALID_CUSTOMER_CODE"):
            ledger.get_customer(code)

    def test_adjust_credit(self, customer):
        assert ledger.adjust_balance("KH-0001", 25) == 25
        customer.refresh_from_db()
        assert customer.point_balance == 25
        assert customer.lifetime_points == 0

    def test_adjust_credit_counts_lifetime(self, customer):
        ledger.adjust_balance("KH-0001", 25, lifetime=True)
        customer.refresh_from_db()
        assert customer.lifetime_points == 25

    def test_adjust_debit(self, customer):
        ledger.adjust_balance("KH-0001", 25)
        assert ledger.adjust_balance("KH-0001", -20) == 5

    def test_adjust_debit_to_exactly_zero(self, customer):
        ledger.adjust_balance("KH-0001", 7)
        assert ledger.adjust_balance("KH-0001", -7) == 0

    def test_overdraw_raises_without_change(self, customer):
        ledger.adjust_balance("KH-0001", 3)

        with pytest.raises(InsufficientBalanceError, match="INSUFFICIENT_POINTS") as exc_info:
            ledger.adjust_balance("KH-0001", -5)

        assert exc_info.value.data["available"] == 3
        assert exc_info.value.data["requested"] == 5
        assert ledger.get_balance("KH-0001") == 3

    def test_adjust_unknown_customer_raises(self, db):
        with pytest.raises(NotFoundError, match="CUSTOMER_NOT_FOUND"):
            ledger.adjust_balance("NOPE", -1)

    def test_adjust_zero_is_noop(self, customer):
        assert ledger.adjust_balance("KH-0001", 0) == 0

    @pytest.mark.parametrize("delta", [1.5, "3", True, None])
    def test_adjust_non_integer_raises(self, customer, delta):
        with pytest.raises(InvalidArgumentError, match="INVALID_POINTS"):
            ledger.adjust_balance("KH-0001", delta)

    @pytest.mark.parametrize("delta", [2**31, -(2**40)])
    def test_adjust_outside_counter_range_raises(self, customer, delta):
        with pytest.raises(InvalidArgumentError, match="INVALID_POINTS"):
            ledger.adjust_balance("KH-0001", delta)
        assert ledger.get_balance("KH-0001") == 0

    def test_adjust_credit_cannot_overflow_balance(self, customer):
        ledger.adjust_balance("KH-0001", ledger.MAX_POINTS - 1)

        with pytest.raises(InvalidArgumentError, match="INVALID_POINTS"):
            ledger.adjust_balance("KH-0001", 2)

        assert ledger.adjust_balance("KH-0001", 1) == ledger.MAX_POINTS

    def test_adjust_touches_only_one_customer(self, customer, customer_no_program):
        ledger.adjust_balance("KH-0001", 10)

        customer_no_program.refresh_from_db()
        assert customer_no_program.point_balance == 0

    def test_database_failure_becomes_persistence_error(self, customer):
        with patch.object(QuerySet, "update", side_effect=DatabaseError("disk I/O error")):
            with pytest.raises(PersistenceError, match="LEDGER_WRITE_FAILED") as exc_info:
                ledger.adjust_balance("KH-0001", 5)

        assert isinstance(exc_info.value.__cause__, DatabaseError)
        assert ledger.get_balance("KH-0001") == 0


class TestPointHistoryLog:
    """Tests for the append-only history log."""

    def test_append_returns_entry_id(self, customer):
        entry_id = history.append(
            customer,
            10,
            TransactionType.ACCRUE,
            balance_after=10,
            amount=Decimal("100.00"),
            reference="folio:1",
        )

        entry = PointHistoryEntry.objects.get(pk=entry_id)
        assert entry.customer == customer
        assert entry.points == 10
        assert entry.transaction_type == "accrue"
        assert entry.amount == Decimal("100.00")
        assert entry.reference == "folio:1"
        assert entry.created_at is not None

    @pytest.mark.parametrize("points", [0, 2.5, True])
    def test_append_rejects_invalid_points(self, customer, points):
        with pytest.raises(InvalidArgumentError, match="INVALID_POINTS"):
            history.append(customer, points, TransactionType.ADJUST, balance_after=0)

    def test_append_failure_becomes_persistence_error(self, customer):
        with patch.object(
            PointHistoryQuerySet, "create", side_effect=DatabaseError("table is locked")
        ):
            with pytest.raises(PersistenceError, match="HISTORY_WRITE_FAILED"):
                history.append(customer, 5, TransactionType.ACCRUE, balance_after=5)

    def test_entries_most_recent_first(self, customer):
        first = history.append(customer, 10, TransactionType.ACCRUE, balance_after=10)
        second = history.append(customer, -4, TransactionType.REDEEM, balance_after=6)

        assert [e.pk for e in history.entries("KH-0001")] == [second, first]

    def test_entries_filter_and_limit(self, customer):
        history.append(customer, 10, TransactionType.ACCRUE, balance_after=10)
        history.append(customer, 5, TransactionType.ACCRUE, balance_after=15)
        history.append(customer, -4, TransactionType.REDEEM, balance_after=11)

        assert len(history.entries("KH-0001", limit=2)) == 2
        redeemed = history.entries("KH-0001", transaction_type=TransactionType.REDEEM)
        assert [e.points for e in redeemed] == [-4]

    @override_settings(POINTMAN={"HISTORY_PAGE_SIZE": 1})
    def test_entries_default_page_size(self, customer):
        history.append(customer, 10, TransactionType.ACCRUE, balance_after=10)
        history.append(customer, 5, TransactionType.ACCRUE, balance_after=15)

        assert len(history.entries("KH-0001")) == 1

    def test_total_points(self, customer):
        assert history.total_points("KH-0001") == 0

        history.append(customer, 10, TransactionType.ACCRUE, balance_after=10)
        history.append(customer, -4, TransactionType.REDEEM, balance_after=6)
        assert history.total_points("KH-0001") == 6

    def test_append_rolls_back_with_transaction(self, customer):
        with pytest.raises(RuntimeError):
            with transaction.atomic():
                history.append(customer, 10, TransactionType.ACCRUE, balance_after=10)
                raise RuntimeError("abort")

        assert not PointHistoryEntry.objects.exists()


class TestAccrualPolicy:
    """Tests for the default accrual policy."""

    policy = UnitAmountAccrualPolicy()

    def test_implements_protocol(self):
        assert isinstance(self.policy, AccrualPolicy)
        assert isinstance(get_accrual_policy(), UnitAmountAccrualPolicy)

    @pytest.mark.parametrize(
        "amount, expected",
        [
            (Decimal("0"), 0),
            (Decimal("9.99"), 0),
            (Decimal("10"), 1),
            (Decimal("99.99"), 9),
            (Decimal("100.00"), 10),
            (Decimal("1234.56"), 123),
        ],
    )
    def test_one_point_per_ten_units(self, amount, expected):
        assert self.policy.points_for(amount, None) == expected

    def test_program_unit_overrides_default(self, program_premium):
        assert self.policy.points_for(Decimal("100.00"), program_premium) == 20

    def test_program_without_unit_uses_default(self, program):
        assert self.policy.points_for(Decimal("100.00"), program) == 10

    @override_settings(POINTMAN={"ACCRUAL_ROUNDING": "ROUND_HALF_UP"})
    def test_rounding_is_configurable(self):
        assert self.policy.points_for(Decimal("95.00"), None) == 10
        assert self.policy.points_for(Decimal("94.99"), None) == 9

    @override_settings(POINTMAN={"ACCRUAL_UNIT_AMOUNT": "2.5"})
    def test_unit_is_configurable(self):
        assert self.policy.points_for(Decimal("10"), None) == 4
