# app/core/errors.py
"""
Error taxonomy for the savings ledger.

Every error carries a stable code and the HTTP status it maps to at the
request boundary (see the handlers registered in app/main.py).
"""
from typing import Optional


class LedgerError(Exception):
    """Base class for all errors surfaced to API clients."""

    code = "LEDGER_ERROR"
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict:
        return {"detail": self.message, "code": self.code}


class AuthenticationRequired(LedgerError):
    code = "AUTHENTICATION_REQUIRED"
    http_status = 401

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class ValidationError(LedgerError):
    code = "VALIDATION_ERROR"
    http_status = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFound(LedgerError):
    code = "NOT_FOUND"
    http_status = 404

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")
        self.resource = resource


class InsufficientFunds(LedgerError):
    code = "INSUFFICIENT_FUNDS"
    http_status = 400

    def __init__(self, available, requested):
        super().__init__(
            f"Insufficient funds: requested {requested:.2f}, available {available:.2f}"
        )
        self.available = available
        self.requested = requested


class StoreError(LedgerError):
    """The database rejected or failed a unit of work. Never retried."""

    code = "STORE_ERROR"
    http_status = 500

    def __init__(self, operation: str, message: str = "Database operation failed"):
        super().__init__(f"{message} ({operation})")
        self.operation = operation
