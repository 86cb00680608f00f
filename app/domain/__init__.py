"""Domain layer: entities, value objects, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.entities import (
    InvitationEntity,
    UserDocument,
    calculate_subscription_price,
)
from app.domain.enums import InvitationStatus, SubscriptionStatus, UserRole
from app.domain.exceptions import (
    AdAlertException,
    AuthenticationException,
    AuthorizationException,
    DuplicateEmailException,
    PaymentException,
    ResourceNotFoundException,
    ValidationException,
)
from app.domain.value_objects import DocumentRef

__all__ = [
    # Entities
    "InvitationEntity",
    "UserDocument",
    "calculate_subscription_price",
    # Enums
    "InvitationStatus",
    "SubscriptionStatus",
    "UserRole",
    # Exceptions
    "AdAlertException",
    "AuthenticationException",
    "AuthorizationException",
    "DuplicateEmailException",
    "PaymentException",
    "ResourceNotFoundException",
    "ValidationException",
    # Value objects
    "DocumentRef",
]
