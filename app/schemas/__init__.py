from .payment import (
    CallbackPayload,
    HealthResponse,
    SessionRequest,
    SessionResponse,
    StatusResponse,
)

__all__ = [
    "CallbackPayload",
    "HealthResponse",
    "SessionRequest",
    "SessionResponse",
    "StatusResponse",
]
