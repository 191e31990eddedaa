"""
Accounting exceptions and the handler that renders them.

crud functions raise these; main.py registers `accounting_exception_handler`
so every failure reaches the caller as
{"error_code": ..., "message": ..., "details": {...}}.
"""

from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse


class AccountingError(Exception):
    """Base accounting exception."""

    error_code = "ERR_ACCOUNTING"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(AccountingError):
    """Malformed input."""

    error_code = "ERR_VALIDATION"
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(AccountingError):
    error_code = "ERR_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} with id {resource_id} not found"
        super().__init__(message, details={"resource": resource, "id": resource_id})


class InactiveLedgerError(AccountingError):
    error_code = "ERR_INACTIVE_LEDGER"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, ledger_id: Any, ledger_name: str, resolution: Optional[str] = None):
        message = f"Ledger '{ledger_name}' is inactive and cannot take new vouchers"
        details = {"ledger_id": ledger_id, "ledger_name": ledger_name}
        if resolution:
            message = f"{message}. {resolution}"
            details["resolution"] = resolution
        super().__init__(message, details=details)


class UnbalancedVoucherError(AccountingError):
    error_code = "ERR_UNBALANCED_VOUCHER"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, total_debit, total_credit):
        super().__init__(
            f"Total debit {total_debit} does not equal total credit {total_credit}",
            details={"total_debit": str(total_debit), "total_credit": str(total_credit)},
        )


class SameLedgerError(AccountingError):
    error_code = "ERR_SAME_LEDGER"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, ledger_id: Any):
        super().__init__(
            "Debit and credit ledger must be different",
            details={"ledger_id": ledger_id},
        )


class MissingCashLedgerError(AccountingError):
    error_code = "ERR_MISSING_CASH_LEDGER"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self):
        super().__init__("No active Cash ledger exists. Create a ledger of type 'Cash' first.")


class ConflictError(AccountingError):
    error_code = "ERR_CONFLICT"
    status_code = status.HTTP_409_CONFLICT


class ConcurrentUpdateError(ConflictError):
    """A ledger row changed underneath the posting transaction."""

    error_code = "ERR_CONCURRENT_UPDATE"


async def accounting_exception_handler(request: Request, exc: AccountingError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details,
        },
    )
