"""Public schema exports."""

from .auth import ErrorResponse, PendingResponse, TokenDeliveryResponse

__all__ = [
    "ErrorResponse",
    "PendingResponse",
    "TokenDeliveryResponse",
]
