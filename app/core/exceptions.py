"""Custom exception hierarchy for the VAT engine.

Error codes follow pattern: [CATEGORY][NUMBER]
- TAX: VAT configuration and computation errors (300-399)
- RPT: Report request errors (100-199)
- SYS: System errors (400-499)

Only configuration errors are meant to reach an end user as a blocking
message. Computation errors are caught by the report generator and the
affected order is reported with zero VAT.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any


class VATEngineException(Exception):
    """Base exception for all application errors.

    All custom exceptions inherit from this to enable centralized error handling.
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        """Initialize exception with user-friendly message and metadata.

        Args:
            message: User-friendly error message
            code: Unique error code (e.g., "TAX310")
            status_code: HTTP status code (default: 400 Bad Request)
            details: Optional additional context
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response format."""
        return {
            "error": {
                "message": self.message,
                "code": self.code,
                "details": self.details,
            }
        }


# ============================================================================
# VAT ERRORS (TAX300-399)
# ============================================================================

class VATError(VATEngineException):
    """Base class for VAT configuration/computation errors."""
    pass


class VATRateNotSetError(VATError):
    """Item (or component) has no VAT rate chosen."""

    def __init__(self, item_name: str | None = None):
        target = f" for '{item_name}'" if item_name else " for this item"
        message = f"Please select a VAT rate (0% or 20%){target}"
        super().__init__(
            message=message,
            code="TAX310",
            status_code=400,
            details={"item": item_name} if item_name else {},
        )


class InvalidVATRateError(VATError):
    """VAT rate is negative, non-finite or otherwise unusable."""

    def __init__(self, rate: Any, item_name: str | None = None, reason: str | None = None):
        base = f"Invalid VAT rate {rate!s}"
        if item_name:
            base = f"{base} for '{item_name}'"
        message = f"{base}. {reason}" if reason else base
        super().__init__(
            message=message,
            code="TAX311",
            status_code=400,
            details={"rate": str(rate), "item": item_name, "reason": reason},
        )


class MixedItemComponentsError(VATError):
    """Mixed item components are missing or do not reconcile to the item price."""

    def __init__(
        self,
        item_name: str | None,
        reason: str,
        component_total: Decimal | None = None,
        item_price: Decimal | None = None,
    ):
        label = f"'{item_name}'" if item_name else "Mixed item"
        super().__init__(
            message=f"{label}: {reason}",
            code="TAX312",
            status_code=400,
            details={
                "item": item_name,
                "component_total": str(component_total) if component_total is not None else None,
                "item_price": str(item_price) if item_price is not None else None,
            },
        )


class OrderVATResolutionError(VATError):
    """A line in an order could not be resolved to a VAT amount."""

    def __init__(self, order_ref: str | None, reason: str):
        message = f"Could not resolve VAT for order {order_ref or '?'}: {reason}"
        super().__init__(
            message=message,
            code="TAX313",
            status_code=422,
            details={"order": order_ref, "reason": reason},
        )


# ============================================================================
# REPORT ERRORS (RPT100-199)
# ============================================================================

class ReportError(VATEngineException):
    """Base class for report request errors."""
    pass


class InvalidReportRangeError(ReportError, ValueError):
    """Report date range is inverted or incomplete."""

    def __init__(self, start: Any, end: Any):
        super().__init__(
            message=f"Report start date {start} is after end date {end}",
            code="RPT100",
            status_code=400,
            details={"start_date": str(start), "end_date": str(end)},
        )


# ============================================================================
# SYSTEM ERRORS (SYS400-499)
# ============================================================================

class SystemError(VATEngineException):
    """Base class for system/infrastructure errors."""
    pass


class GreetingCounterUnavailable(SystemError):
    """Greeting counter storage could not be reached."""

    def __init__(self, backend: str, reason: str | None = None):
        message = f"Greeting counter backend '{backend}' is unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            message=message,
            code="SYS400",
            status_code=503,
            details={"backend": backend, "reason": reason},
        )


class ConfigurationError(SystemError):
    """Application configuration is invalid or missing."""

    def __init__(self, parameter: str):
        message = f"Configuration error: {parameter} is not configured properly"
        super().__init__(
            message=message,
            code="SYS401",
            status_code=500,
            details={"parameter": parameter},
        )
