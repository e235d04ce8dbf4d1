"""Error Hierarchy — typed, categorized exceptions for all Mosaic failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Rejection is the closed set of causes a ledger entry point can fail with
    - Each ledger kind maps causes to its own numeric wire codes (ERROR_CODES)
    - A LedgerError raised by a nested ledger keeps the nested ledger's kind and code
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with MosaicError base: FastAPI global handler catches all
    - Numeric codes live in one table, not on the exception classes, so the
      same cause can carry a different code per component
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from mosaic.core.domain_types import LedgerKind


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"


class Rejection(str, Enum):
    """Causes an entry point can be rejected with."""
    NOT_AUTHORIZED = "NOT_AUTHORIZED"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    CONTRACT_DISABLED = "CONTRACT_DISABLED"
    ZERO_ADDRESS = "ZERO_ADDRESS"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    INVALID_TOKEN_CONTRACT = "INVALID_TOKEN_CONTRACT"
    INVALID_PORTFOLIO = "INVALID_PORTFOLIO"
    INVALID_ASSET = "INVALID_ASSET"
    ASSET_EXISTS = "ASSET_EXISTS"
    UNKNOWN_ASSET = "UNKNOWN_ASSET"
    INVALID_FEE = "INVALID_FEE"
    INVALID_STRATEGY = "INVALID_STRATEGY"
    INVALID_MAX_PORTFOLIOS = "INVALID_MAX_PORTFOLIOS"
    INVALID_NAME = "INVALID_NAME"
    INVALID_DESCRIPTION = "INVALID_DESCRIPTION"
    MAX_SUPPLY_REACHED = "MAX_SUPPLY_REACHED"
    INSUFFICIENT_ALLOWANCE = "INSUFFICIENT_ALLOWANCE"
    SELF_TRANSFER = "SELF_TRANSFER"


# ─── Wire codes per component ───────────────────────────────────

ERROR_CODES: dict[LedgerKind, dict[Rejection, int]] = {
    LedgerKind.REGISTRY: {
        Rejection.NOT_AUTHORIZED: 100,
        Rejection.INVALID_NAME: 101,
        Rejection.INVALID_PORTFOLIO: 102,
        Rejection.ZERO_ADDRESS: 104,
        Rejection.CONTRACT_DISABLED: 105,
        Rejection.INVALID_FEE: 106,
        Rejection.INVALID_STRATEGY: 107,
        Rejection.INVALID_MAX_PORTFOLIOS: 108,
        Rejection.INVALID_DESCRIPTION: 109,
    },
    LedgerKind.SHARES: {
        Rejection.NOT_AUTHORIZED: 100,
        Rejection.INSUFFICIENT_BALANCE: 101,
        Rejection.INVALID_AMOUNT: 102,
        Rejection.ZERO_ADDRESS: 103,
        Rejection.CONTRACT_DISABLED: 104,
        Rejection.MAX_SUPPLY_REACHED: 106,
        Rejection.INSUFFICIENT_ALLOWANCE: 107,
    },
    LedgerKind.CUSTODY: {
        Rejection.NOT_AUTHORIZED: 100,
        Rejection.INVALID_AMOUNT: 101,
        Rejection.CONTRACT_DISABLED: 102,
        Rejection.ZERO_ADDRESS: 103,
        Rejection.INSUFFICIENT_BALANCE: 104,
        Rejection.INVALID_TOKEN_CONTRACT: 105,
        Rejection.INVALID_PORTFOLIO: 106,
        Rejection.INVALID_ASSET: 107,
        Rejection.ASSET_EXISTS: 107,
        Rejection.UNKNOWN_ASSET: 107,
    },
    LedgerKind.VALUE: {
        Rejection.INSUFFICIENT_BALANCE: 1,
        Rejection.SELF_TRANSFER: 2,
        Rejection.INVALID_AMOUNT: 3,
        Rejection.NOT_AUTHORIZED: 4,
    },
}


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    ledger: str | None = None
    entry: str | None = None
    caller: str | None = None
    debug_info: dict[str, Any] | None = None


class MosaicError(Exception):
    """Base exception for all Mosaic errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "ledger": self.context.ledger,
                    "entry": self.context.entry,
                    "caller": self.context.caller,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class LedgerError(MosaicError):
    """An entry point rejected its call. State is untouched."""

    def __init__(
        self, kind: LedgerKind, reason: Rejection,
        detail: str | None = None, context: ErrorContext | None = None,
    ):
        if reason not in ERROR_CODES[kind]:
            raise KeyError(f"{reason.value} has no {kind.value} code")
        status = 403 if reason is Rejection.NOT_AUTHORIZED else 409
        category = (
            ErrorCategory.AUTHORIZATION
            if reason is Rejection.NOT_AUTHORIZED
            else ErrorCategory.BUSINESS_RULE
        )
        super().__init__(
            detail or f"{kind.value} rejected call: {reason.value}",
            reason.value, category, ErrorSeverity.WARNING, context, status,
        )
        self.kind = kind
        self.reason = reason

    @property
    def numeric_code(self) -> int:
        return ERROR_CODES[self.kind][self.reason]

    def to_envelope(self) -> dict:
        """The entry-point failure envelope: numeric code plus cause."""
        return {
            "error": self.numeric_code,
            "reason": self.reason.value,
            "component": self.kind.value,
        }


class ResourceNotFoundError(MosaicError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class InvalidArgumentsError(MosaicError):
    """An entry point was called with a missing or mistyped argument."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_ARGUMENTS", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(MosaicError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
