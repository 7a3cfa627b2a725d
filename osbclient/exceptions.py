"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
osbclient, a product of Garudex Labs

Exception hierarchy for osbclient.

All custom exceptions inherit from OSBClientError base class.
"""

from typing import Optional


class OSBClientError(Exception):
    """Base exception for all osbclient errors."""
    pass


# Local validation errors (raised before any I/O)
class ValidationError(OSBClientError):
    """Base exception for request validation errors."""
    pass


class MissingRequiredFieldError(ValidationError):
    """Raised when a required request field is empty or missing."""

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"{field_name} is required")


class OperationNotAllowedError(ValidationError):
    """Raised when an operation or feature is gated behind a newer API version."""

    def __init__(self, operation: str, required_version, actual_version):
        self.operation = operation
        self.required_version = required_version
        self.actual_version = actual_version
        super().__init__(
            f"{operation} not allowed: operation not allowed: "
            f"must have API version >= {required_version}. Current: {actual_version}"
        )


class InvalidIdentityAssertionError(ValidationError):
    """Raised when an originating identity has an empty platform or a non-JSON value."""
    pass


class RequestEncodingError(ValidationError):
    """Raised when a request body cannot be serialized to JSON."""
    pass


# Transport and wire errors
class TransportError(OSBClientError):
    """Raised by adapters when the request could not be exchanged (connection, timeout)."""
    pass


class DecodeError(OSBClientError):
    """Raised when a response body is not parseable as the expected shape."""
    pass


class BrokerError(OSBClientError):
    """
    A broker response that did not complete the operation.

    Carries the HTTP status and whichever of the broker's ``error`` and
    ``description`` fields were present. When the body could not be parsed,
    ``response_error`` holds the parse failure.
    """

    ASYNC_REQUIRED = "AsyncRequired"
    APP_GUID_REQUIRED = "RequiresApp"
    CONCURRENCY_ERROR = "ConcurrencyError"
    MAINTENANCE_INFO_CONFLICT = "MaintenanceInfoConflict"

    def __init__(
        self,
        status_code: int,
        error_message: Optional[str] = None,
        description: Optional[str] = None,
        response_error: Optional[Exception] = None,
    ):
        self.status_code = status_code
        self.error_message = error_message
        self.description = description
        self.response_error = response_error
        super().__init__(str(self))

    def __str__(self) -> str:
        return (
            f"Status: {self.status_code}; "
            f"ErrorMessage: {_or_nil(self.error_message)}; "
            f"Description: {_or_nil(self.description)}; "
            f"ResponseError: {_or_nil(self.response_error)}"
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, BrokerError):
            return NotImplemented
        return (
            self.status_code == other.status_code
            and self.error_message == other.error_message
            and self.description == other.description
            and str(self.response_error) == str(other.response_error)
        )

    __hash__ = OSBClientError.__hash__

    def _is_unprocessable(self, error_message: str) -> bool:
        return self.status_code == 422 and self.error_message == error_message

    @property
    def is_gone(self) -> bool:
        return self.status_code == 410

    @property
    def is_conflict(self) -> bool:
        return self.status_code == 409

    @property
    def is_async_required(self) -> bool:
        return self._is_unprocessable(self.ASYNC_REQUIRED)

    @property
    def is_app_guid_required(self) -> bool:
        return self._is_unprocessable(self.APP_GUID_REQUIRED)

    @property
    def is_concurrency_error(self) -> bool:
        return self._is_unprocessable(self.CONCURRENCY_ERROR)

    @property
    def is_maintenance_info_conflict(self) -> bool:
        return self._is_unprocessable(self.MAINTENANCE_INFO_CONFLICT)


def _or_nil(value) -> str:
    return "<nil>" if value is None else str(value)


# Polling errors
class PollError(OSBClientError):
    """Base exception for long-running operation polling."""
    pass


class PollCancelledError(PollError):
    """Raised (or reported) when polling was cancelled or its deadline elapsed."""
    pass


class PollExceededRetriesError(PollError):
    """Raised when transient polling errors exceeded the configured retry budget."""

    def __init__(self, attempts: int, last_error: Exception):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"polling gave up after {attempts} failed attempts: {last_error}"
        )


# Configuration Errors
class ConfigurationError(OSBClientError):
    """Base exception for configuration-related errors."""
    pass


class InvalidConfigurationError(ConfigurationError):
    """Raised when configuration is invalid or malformed."""
    pass
