"""Infrastructure exceptions for the record store, storage and external services.

All extend AdAlertException so presentation can map them to HTTP
responses consistently (502 for upstream failures).
"""

from app.domain.exceptions import AdAlertException


class RecordStoreError(AdAlertException):
    """A record store read or write failed (transport, permission, missing target)."""

    def __init__(self, operation: str, target: str, reason: str) -> None:
        super().__init__(
            f"Record store {operation} failed for {target}",
            "RECORD_STORE_ERROR",
            {"operation": operation, "target": target, "reason": reason},
        )
        self.operation = operation
        self.target = target


class EmailDispatchError(AdAlertException):
    """The email endpoint rejected or could not receive a send request."""

    def __init__(self, to: str, reason: str) -> None:
        super().__init__(
            f"Failed to send email to {to}",
            "EMAIL_DISPATCH_ERROR",
            {"to": to, "reason": reason},
        )


class PaymentGatewayError(AdAlertException):
    """The payment provider could not be reached or returned an API error."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            f"Payment provider call failed: {operation}",
            "PAYMENT_GATEWAY_ERROR",
            {"operation": operation, "reason": reason},
        )


class StorageException(AdAlertException):
    """Base exception for storage operations."""


class StorageUploadError(StorageException):
    """File upload failed."""

    def __init__(self, file_path: str, reason: str) -> None:
        super().__init__(
            f"Failed to upload file: {file_path}",
            "STORAGE_UPLOAD_ERROR",
            {"file_path": file_path, "reason": reason},
        )


class StorageDeleteError(StorageException):
    """File deletion failed."""

    def __init__(self, file_path: str, reason: str) -> None:
        super().__init__(
            f"Failed to delete file: {file_path}",
            "STORAGE_DELETE_ERROR",
            {"file_path": file_path, "reason": reason},
        )


class StoragePermissionError(StorageException):
    """Insufficient permissions for storage operation (e.g. path traversal)."""

    def __init__(self, file_path: str, operation: str) -> None:
        super().__init__(
            f"Permission denied for {operation} on {file_path}",
            "STORAGE_PERMISSION_ERROR",
            {"file_path": file_path, "operation": operation},
        )
