"""Pointman exceptions."""


class PointmanError(Exception):
    """
    Structured exception for ledger operations.

    Every error carries a stable ``code``, a human message and a ``data``
    dict with the values that caused it.

    Usage:
        try:
            LedgerService.redeem("CUST-001", 50)
        except PointmanError as e:
            if e.code == "INSUFFICIENT_POINTS":
                show_balance(e.data["available"])
    """

    _default_messages = {
        "HISTORY_IMMUTABLE": "Point history entries are append-only",
    }

    def __init__(self, code: str, message: str | None = None, **data):
        self.code = code
        self.message = message or self._lookup_message(code)
        self.data = data
        super().__init__(f"[{code}] {self.message}")

    @classmethod
    def _lookup_message(cls, code: str) -> str:
        for klass in cls.__mro__:
            messages = klass.__dict__.get("_default_messages", {})
            if code in messages:
                return messages[code]
        return code.replace("_", " ").capitalize()

    def as_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "data": self.data,
        }


class NotFoundError(PointmanError):
    """Customer or point program does not resolve."""

    _default_messages = {
        "CUSTOMER_NOT_FOUND": "Customer not found",
        "PROGRAM_NOT_FOUND": "Point program not found",
        "NO_PROGRAM": "Customer is not enrolled in a point program",
    }


class InsufficientBalanceError(PointmanError):
    """Operation would drive a point balance negative."""

    _default_messages = {
        "INSUFFICIENT_POINTS": "Insufficient points for redemption",
    }


class InvalidArgumentError(PointmanError):
    """Malformed identifier, amount or point quantity."""

    _default_messages = {
        "INVALID_POINTS": "Points must be a positive integer",
        "INVALID_AMOUNT": "Payment amount must be a non-negative decimal",
        "INVALID_CUSTOMER_CODE": "Invalid customer code",
        "INVALID_PROGRAM_CODE": "Invalid point program code",
        "INVALID_REASON": "A reason is required",
    }


class PersistenceError(PointmanError):
    """Underlying storage failed on read, write or append."""

    _default_messages = {
        "LEDGER_READ_FAILED": "Could not read point balance",
        "LEDGER_WRITE_FAILED": "Could not update point balance",
        "HISTORY_WRITE_FAILED": "Could not record point history",
    }
