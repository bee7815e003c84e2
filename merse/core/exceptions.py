"""Domain errors raised by the ledger, limiter and Orion Loop."""

from fastapi import status

from merse.api.core.exceptions.base import MerseException
from merse.api.core.messages import MessageCode


class InsufficientCreditsError(MerseException):
    """A plan charge would drive the balance below zero."""

    def __init__(self, balance: int, required: int):
        super().__init__(
            MessageCode.INSUFFICIENT_CREDITS,
            status.HTTP_402_PAYMENT_REQUIRED,
            details={"balance": balance, "required": required},
        )
        self.balance = balance
        self.required = required


class InsufficientBalanceError(MerseException):
    """An advisory consume hit an existing profile without enough balance."""

    def __init__(self, balance: int, required: int):
        super().__init__(
            MessageCode.INSUFFICIENT_BALANCE,
            status.HTTP_402_PAYMENT_REQUIRED,
            details={"balance": balance, "required": required},
        )
        self.balance = balance
        self.required = required


class InvalidAmountError(MerseException):
    """A consume amount that is not a finite number."""

    def __init__(self, amount: float):
        super().__init__(
            MessageCode.INVALID_INPUT,
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            details={"description": f"amount must be a finite number, got {amount}"},
        )


class StoreUnavailableError(MerseException):
    def __init__(self, reason: str):
        super().__init__(
            MessageCode.STORE_UNAVAILABLE,
            status.HTTP_503_SERVICE_UNAVAILABLE,
            details={"description": reason},
        )


class TransactionConflictError(MerseException):
    def __init__(self, attempts: int):
        super().__init__(
            MessageCode.TRANSACTION_CONFLICT,
            status.HTTP_409_CONFLICT,
            details={"attempts": attempts},
        )


class ProjectNotFoundError(MerseException):
    def __init__(self, project_id: str):
        super().__init__(
            MessageCode.PROJECT_NOT_FOUND,
            status.HTTP_404_NOT_FOUND,
            details={"project_id": project_id},
        )


class OrionEndpointError(MerseException):
    """An Orion trigger endpoint answered with a non-2xx status or was unreachable."""

    def __init__(self, path: str, status_code: int | None, body: str = ""):
        super().__init__(
            MessageCode.EXTERNAL_SERVICE_ERROR,
            status.HTTP_502_BAD_GATEWAY,
            details={
                "description": f"Call to {path} failed",
                "upstream_status": status_code,
                "upstream_body": body[:500],
            },
        )
        self.path = path
        self.upstream_status = status_code


class AuditWriteFailedError(Exception):
    """Raised inside the usage recorder only; never leaves it."""


class CounterBackendUnavailableError(Exception):
    """Raised by counter backends; the tiered limiter converts it to fail-open."""
