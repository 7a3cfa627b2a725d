"""
Unit tests for exception hierarchy.
"""

import pytest
from osbclient.exceptions import (
    BrokerError,
    ConfigurationError,
    DecodeError,
    InvalidConfigurationError,
    InvalidIdentityAssertionError,
    MissingRequiredFieldError,
    OperationNotAllowedError,
    OSBClientError,
    PollCancelledError,
    PollError,
    PollExceededRetriesError,
    RequestEncodingError,
    TransportError,
    ValidationError,
)


class TestExceptionHierarchy:
    """Test that exception hierarchy is correctly defined."""

    def test_base_exception(self):
        """Test that OSBClientError is the base exception."""
        error = OSBClientError("test error")
        assert isinstance(error, Exception)
        assert str(error) == "test error"

    @pytest.mark.parametrize("exc_class", [
        MissingRequiredFieldError,
        OperationNotAllowedError,
        InvalidIdentityAssertionError,
        RequestEncodingError,
    ])
    def test_validation_errors(self, exc_class):
        """Test local validation errors share a base."""
        assert issubclass(exc_class, ValidationError)
        assert issubclass(exc_class, OSBClientError)

    def test_poll_errors(self):
        """Test polling errors share a base."""
        assert issubclass(PollCancelledError, PollError)
        assert issubclass(PollExceededRetriesError, PollError)

    def test_standalone_errors(self):
        """Test transport, decode and broker errors are not validation errors."""
        for exc_class in (TransportError, DecodeError, BrokerError):
            assert issubclass(exc_class, OSBClientError)
            assert not issubclass(exc_class, ValidationError)

    def test_configuration_errors(self):
        """Test configuration errors."""
        assert issubclass(InvalidConfigurationError, ConfigurationError)


class TestValidationMessages:
    """Test validation error messages."""

    def test_missing_required_field(self):
        """Test the field is named in the message."""
        error = MissingRequiredFieldError("instance_id")
        assert error.field_name == "instance_id"
        assert str(error) == "instance_id is required"

    def test_operation_not_allowed(self):
        """Test the message names both versions."""
        error = OperationNotAllowedError("GetInstance", "2.14", "2.13")
        assert str(error) == (
            "GetInstance not allowed: operation not allowed: "
            "must have API version >= 2.14. Current: 2.13"
        )

    def test_poll_exceeded_retries(self):
        """Test the last error is kept."""
        cause = TransportError("reset")
        error = PollExceededRetriesError(4, cause)
        assert error.attempts == 4
        assert error.last_error is cause
        assert "4 failed attempts" in str(error)


class TestBrokerError:
    """Test broker error rendering and predicates."""

    def test_str_with_all_fields(self):
        """Test the rendered form."""
        error = BrokerError(422, "AsyncRequired", "needs async", DecodeError("bad"))
        assert str(error) == (
            "Status: 422; ErrorMessage: AsyncRequired; Description: needs async; ResponseError: bad"
        )

    def test_str_with_missing_fields(self):
        """Test absent fields render as <nil>."""
        assert str(BrokerError(500)) == (
            "Status: 500; ErrorMessage: <nil>; Description: <nil>; ResponseError: <nil>"
        )

    def test_equality(self):
        """Test equality compares fields."""
        assert BrokerError(409, "x") == BrokerError(409, "x")
        assert BrokerError(409, "x") != BrokerError(409, "y")

    @pytest.mark.parametrize("status,message,predicate", [
        (410, None, "is_gone"),
        (409, None, "is_conflict"),
        (422, "AsyncRequired", "is_async_required"),
        (422, "RequiresApp", "is_app_guid_required"),
        (422, "ConcurrencyError", "is_concurrency_error"),
        (422, "MaintenanceInfoConflict", "is_maintenance_info_conflict"),
    ])
    def test_predicates(self, status, message, predicate):
        """Test each predicate matches exactly its convention."""
        predicates = [
            "is_gone", "is_conflict", "is_async_required", "is_app_guid_required",
            "is_concurrency_error", "is_maintenance_info_conflict",
        ]
        error = BrokerError(status, message)
        for name in predicates:
            assert getattr(error, name) is (name == predicate)

    def test_unprocessable_requires_422(self):
        """Test error codes only count on 422."""
        assert not BrokerError(400, "AsyncRequired").is_async_required
