"""QPay uçları: /qpay/session, /qpay/return (QPay bildirimi), /qpay/status/{orderNumber}."""
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from app.api.deps import get_relay
from app.schemas.payment import CallbackPayload, SessionRequest, SessionResponse, StatusResponse
from app.services.qpay import QPayRelay

router = APIRouter(prefix="/qpay", tags=["qpay"])
log = logging.getLogger("qpay_relay.api")


@router.post("/session", response_model=SessionResponse)
async def qpay_session(body: SessionRequest | None = None, relay: QPayRelay = Depends(get_relay)):
    """Ödeme oturumu açar. Eksik alan 400, QPay reddi 400 (veya QPay'in kodu), bağlantı hatası 500."""
    return await relay.create_session(body or SessionRequest())


async def _read_callback_body(request: Request) -> dict[str, Any]:
    content_type = (request.headers.get("content-type") or "").lower()
    if content_type.startswith("application/json"):
        data = await request.json()
        if not isinstance(data, dict):
            raise ValueError("callback body must be a JSON object")
        return data
    form = await request.form()
    return {k: form.get(k) for k in form}


@router.post("/return")
async def qpay_return(request: Request, relay: QPayRelay = Depends(get_relay)):
    """
    QPay dönüş/bildirim URL'si. Ödeme başarısız olsa bile 200 "OK" döner;
    200 dışı yanıt QPay tarafında tekrar gönderime yol açar.
    """
    try:
        post = await _read_callback_body(request)
        log.info("[QPay Return] Received callback from QPay: %s", post)
        relay.handle_callback(CallbackPayload.model_validate(post))
    except Exception:
        log.exception("[QPay Return] Error processing callback")
        return PlainTextResponse("ERROR", status_code=500)
    return PlainTextResponse("OK", status_code=200)


@router.get("/status/{order_number}", response_model=StatusResponse)
async def qpay_status(order_number: str, relay: QPayRelay = Depends(get_relay)):
    return await relay.query_status(order_number)
