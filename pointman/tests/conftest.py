"""Pytest fixtures for Pointman tests."""

from decimal import Decimal

import pytest

from pointman.models import Customer, PointProgram
from pointman.service import LedgerService


@pytest.fixture
def program(db):
    """Standard program: 0.50 per redeemed point, global accrual unit."""
    return PointProgram.objects.create(
        code="standard",
        name="Standard",
        discount_rate_per_point=Decimal("0.50"),
    )


@pytest.fixture
def program_premium(db):
    """Premium program: 1 point per 5 units spent, 1.25 per redeemed point."""
    return PointProgram.objects.create(
        code="premium",
        name="Premium",
        discount_rate_per_point=Decimal("1.25"),
        accrual_unit_amount=Decimal("5.00"),
    )


@pytest.fixture
def customer(db, program):
    """Create a test customer enrolled in the standard program."""
    return Customer.objects.create(
        code="KH-0001",
        first_name="Nguyen",
        last_name="An",
        email="an@example.com",
        phone="0901234567",
        program=program,
    )


@pytest.fixture
def customer_no_program(db):
    """Create a customer without a point program."""
    return Customer.objects.create(
        code="KH-0002",
        first_name="Tran",
        last_name="Binh",
    )


@pytest.fixture
def funded(customer):
    """Give a customer a balance through the ledger so history stays consistent."""

    def _fund(points: int, target: Customer = customer) -> Customer:
        LedgerService.adjust(target.code, points, "Opening balance")
        target.refresh_from_db()
        return target

    return _fund
