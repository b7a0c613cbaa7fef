from typing import Any, Dict, Optional


class BillingError(Exception):
    """Base exception for the billing ingestion pipeline."""

    def __init__(
        self,
        message: str,
        code: str = "billing_error",
        provider: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.provider = provider
        self.details = details or {}

    def __str__(self) -> str:
        if self.provider:
            return f"[{self.provider}] {self.message}"
        return self.message


class ConfigurationError(BillingError):
    """Raised when a component is constructed with invalid parameters."""

    def __init__(self, message: str, provider: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="config_error", provider=provider, details=details)


class ParseError(BillingError):
    """Raised when a raw export cannot be decoded into rows at all."""

    def __init__(self, message: str, provider: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="parse_error", provider=provider, details=details)


class FieldValidationError(BillingError):
    """
    Describes a single field that failed type or range validation.

    Never raised by the normalizers; carried inside a FieldResult so the
    caller can log it and substitute the neutral value.
    """

    def __init__(self, field: str, value: str, message: Optional[str] = None):
        super().__init__(
            message or f"{field} '{value}' is invalid",
            code="field_invalid",
            details={"field": field, "value": value},
        )
        self.field = field
        self.value = value


class EmptyResultError(BillingError):
    """Raised when a whole provider run produced no usable records."""

    def __init__(self, message: str, provider: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="empty_result", provider=provider, details=details)


class RequestError(BillingError):
    """Raised when a provider endpoint could not be reached."""

    def __init__(self, message: str, provider: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="request_error", provider=provider, details=details)


class ResponseError(BillingError):
    """Raised when a provider endpoint answers with a non-success status."""

    def __init__(self, status: str, provider: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"unexpected response: {status}", code="response_error", provider=provider, details=details)
        self.status = status
