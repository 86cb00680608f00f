"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure or app.api.
"""

from app.application.interfaces.repositories import IRecordStore
from app.application.interfaces.services import (
    ICountryNameResolver,
    IEmailDispatcher,
    IPaymentGateway,
)
from app.application.interfaces.storage import IAvatarStorage

__all__ = [
    "IAvatarStorage",
    "ICountryNameResolver",
    "IEmailDispatcher",
    "IPaymentGateway",
    "IRecordStore",
]
