"""Point program store - read-only lookups."""

from pointman.exceptions import InvalidArgumentError, NotFoundError
from pointman.models import Customer, PointProgram


def lookup(program_code: str) -> PointProgram:
    """
    Get an active point program by code.

    Raises:
        NotFoundError: PROGRAM_NOT_FOUND if the code does not resolve
        InvalidArgumentError: If program_code is not a string
    """
    if not isinstance(program_code, str):
        raise InvalidArgumentError("INVALID_PROGRAM_CODE", program_code=program_code)
    try:
        return PointProgram.objects.get(code=program_code, is_active=True)
    except PointProgram.DoesNotExist:
        raise NotFoundError("PROGRAM_NOT_FOUND", program_code=program_code)


def program_for(customer: Customer) -> PointProgram:
    """Get the customer's usable program or raise NotFoundError."""
    if customer.program_id is None:
        raise NotFoundError("NO_PROGRAM", customer_code=customer.code)

    program = customer.program
    if not program.is_active:
        raise NotFoundError(
            "PROGRAM_NOT_FOUND",
            customer_code=customer.code,
            program_code=program.code,
        )
    return program


def active_program(customer: Customer) -> PointProgram | None:
    """Customer's program if it is usable, else None."""
    if customer.program_id is None or not customer.program.is_active:
        return None
    return customer.program
