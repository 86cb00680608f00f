"""Tests for domain and infrastructure exceptions (error_code, message, details)."""

import pytest

from app.domain.exceptions import (
    AdAlertException,
    AuthenticationException,
    AuthorizationException,
    DuplicateEmailException,
    PaymentException,
    ResourceNotFoundException,
    ValidationException,
)
from app.infrastructure.exceptions import (
    EmailDispatchError,
    PaymentGatewayError,
    RecordStoreError,
    StorageUploadError,
)


def test_base_exception_default_error_code() -> None:
    """Base AdAlertException uses class name as error_code when not provided."""
    exc = AdAlertException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "AdAlertException"
    assert exc.details == {}


def test_base_exception_to_dict() -> None:
    exc = AdAlertException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.to_dict() == {"error": "CUSTOM", "message": "Oops", "details": {"key": "value"}}


def test_validation_exception() -> None:
    """ValidationException sets VALIDATION_ERROR and optional field in details."""
    exc = ValidationException("Invalid format", field="email")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "email"}


def test_validation_exception_without_field() -> None:
    exc = ValidationException("Invalid")
    assert exc.details == {}


def test_authentication_exception_default_message() -> None:
    exc = AuthenticationException()
    assert exc.message == "Authentication failed"
    assert exc.error_code == "AUTHENTICATION_ERROR"


def test_authorization_exception_default() -> None:
    exc = AuthorizationException()
    assert exc.message == "Permission denied"
    assert exc.error_code == "PERMISSION_DENIED"
    assert exc.details == {}


def test_authorization_exception_builds_message_from_resource_and_action() -> None:
    exc = AuthorizationException(resource="company", action="delete")
    assert exc.message == "Permission denied: delete on company"
    assert exc.details == {"resource": "company", "action": "delete"}


def test_authorization_exception_keeps_explicit_message() -> None:
    exc = AuthorizationException("user", "update", "Managers can only edit their own profile")
    assert exc.message == "Managers can only edit their own profile"
    assert exc.details == {"resource": "user", "action": "update"}


def test_resource_not_found_exception() -> None:
    exc = ResourceNotFoundException("ads_account", "acc-9")
    assert "acc-9" in exc.message
    assert exc.error_code == "RESOURCE_NOT_FOUND"
    assert exc.details == {"resource_type": "ads_account", "resource_id": "acc-9"}


def test_duplicate_email_exception() -> None:
    exc = DuplicateEmailException("max@acme.test")
    assert exc.error_code == "DUPLICATE_EMAIL"
    assert exc.details == {"email": "max@acme.test"}


def test_payment_exception_keeps_provider_message() -> None:
    exc = PaymentException("Your card was declined.", step="create_payment_method")
    assert exc.message == "Your card was declined."
    assert exc.error_code == "PAYMENT_FAILED"
    assert exc.details == {"step": "create_payment_method"}


def test_record_store_error() -> None:
    exc = RecordStoreError("query", "adsAccounts", "timeout")
    assert exc.error_code == "RECORD_STORE_ERROR"
    assert exc.operation == "query"
    assert exc.details["reason"] == "timeout"


def test_infrastructure_errors_codes() -> None:
    assert EmailDispatchError("a@b.c", "500").error_code == "EMAIL_DISPATCH_ERROR"
    assert PaymentGatewayError("create_customer", "down").error_code == "PAYMENT_GATEWAY_ERROR"
    assert StorageUploadError("avatars/x", "disk full").error_code == "STORAGE_UPLOAD_ERROR"


def test_exception_is_raiseable() -> None:
    """All exceptions can be raised and caught as AdAlertException."""
    with pytest.raises(AdAlertException) as exc_info:
        raise RecordStoreError("delete", "users/u1", "denied")
    assert exc_info.value.error_code == "RECORD_STORE_ERROR"
