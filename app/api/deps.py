from fastapi import HTTPException, Request, status

from app.services.qpay import QPayRelay


def get_relay(request: Request) -> QPayRelay:
    """Lifespan'de oluşturulan relay; testlerde dependency_overrides ile değiştirilir."""
    relay = getattr(request.app.state, "relay", None)
    if relay is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="QPay relay is not initialised.",
        )
    return relay
