"""Ledger error taxonomy.

Every refusal raised by the services is an ``HTTPException`` carrying a
``{"message", "code", "hint"}`` detail, so the API layer can let them
propagate untouched. None of them is fatal: the caller corrects the input or
retries the whole operation.
"""

from fastapi import HTTPException


class LedgerError(HTTPException):
    status_code = 400
    code = "LEDGER_ERROR"
    hint = ""

    def __init__(self, message: str, hint: str | None = None):
        self.message = message
        super().__init__(
            status_code=self.status_code,
            detail={
                "message": message,
                "code": self.code,
                "hint": hint if hint is not None else self.hint,
            },
        )

    def __str__(self) -> str:
        return self.message


class LedgerValidationError(LedgerError):
    code = "VALIDATION_ERROR"
    hint = "Check the submitted values and try again."


class InvalidAmount(LedgerValidationError):
    code = "INVALID_AMOUNT"
    hint = "Use an amount within the allowed range."


class InsufficientBalance(LedgerError):
    code = "INSUFFICIENT_BALANCE"
    hint = "Lower the amount or wait for more profit to accrue."


class DailyLimitExceeded(LedgerError):
    status_code = 429
    code = "DAILY_LIMIT_EXCEEDED"
    hint = "Only one withdrawal can be requested per day. Try again tomorrow."


class NotFound(LedgerError):
    status_code = 404
    code = "NOT_FOUND"


class InvalidTransition(LedgerError):
    status_code = 409
    code = "INVALID_TRANSITION"
    hint = "Only pending requests can be reviewed."


class ConcurrencyConflict(LedgerError):
    status_code = 409
    code = "CONCURRENCY_CONFLICT"
    hint = "The wallet changed while the request was processed. Retry the operation."


class PersistenceError(LedgerError):
    status_code = 503
    code = "PERSISTENCE_ERROR"
    hint = "The ledger store is unavailable. Nothing was applied; retry shortly."
