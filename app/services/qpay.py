"""
QPay relay: ödeme oturumu açma, dönüş bildirimi ve işlem durumu sorgulama.

Durum tutmaz; her çağrı tek bir istek/yanıt alışverişidir. Tekrar deneme yoktur.
QPay form-encoded istek alır (ACTION alanı işlemi seçer), JSON döner.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import httpx

from app.core.config import QPayConfig
from app.core.errors import GatewayError, UpstreamError, ValidationError
from app.schemas.payment import (
    CallbackPayload,
    HealthResponse,
    SessionRequest,
    SessionResponse,
    StatusResponse,
)
from app.services.signature import NoopSignatureVerifier, SignatureVerifier

log = logging.getLogger("qpay_relay.relay")

SESSION_TTL = timedelta(days=7)
SUCCESS_RESPONSE_CODE = "00"
PAYMENT_PATH = "/post/sale3d"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def isoformat_z(dt: datetime) -> str:
    """2026-01-01T00:00:00.000Z biçimi (milisaniye, UTC)."""
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _form_fields(values: dict[str, Any]) -> dict[str, str]:
    # None alanlar gönderilmez
    return {k: str(v) for k, v in values.items() if v is not None}


def _response_body(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text


class QPayClient:
    """QPay API'sine tek POST. Yanıt geldiyse ama hata koduysa GatewayError, yanıt yoksa UpstreamError."""

    def __init__(self, config: QPayConfig, http: httpx.AsyncClient) -> None:
        self.config = config
        self.http = http

    async def post_form(self, fields: dict[str, Any], *, send_user_agent: bool = True) -> tuple[httpx.Response, Any]:
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
        }
        if send_user_agent:
            headers["User-Agent"] = self.config.user_agent
        try:
            resp = await self.http.post(
                self.config.api_url,
                data=_form_fields(fields),
                headers=headers,
                timeout=self.config.timeout_seconds,
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise GatewayError(
                status_code=e.response.status_code,
                details=_response_body(e.response),
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamError(message=str(e) or type(e).__name__) from e
        return resp, _response_body(resp)


@dataclass(frozen=True)
class CallbackOutcome:
    order_number: Any
    transaction_id: Any
    successful: bool
    signature_checked: bool = False
    signature_valid: bool | None = None


class QPayRelay:
    def __init__(
        self,
        config: QPayConfig,
        http: httpx.AsyncClient,
        *,
        verifier: SignatureVerifier | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.config = config
        self.client = QPayClient(config, http)
        self.verifier = verifier or NoopSignatureVerifier()
        self.clock = clock

    def payment_url(self, token: str) -> str:
        return f"{self.config.api_url}{PAYMENT_PATH}/{token}"

    async def create_session(self, req: SessionRequest) -> SessionResponse:
        """QPay'den SESSIONTOKEN alır; ödeme sayfası URL'si ve 7 günlük son kullanma ile döner."""
        missing = req.missing_fields()
        if missing:
            raise ValidationError(missing)

        currency = req.currency
        log.info("[QPay Session] Creating session for order: %s, amount: %s %s", req.orderNumber, req.amount, currency)

        fields = {
            "ACTION": "SESSIONTOKEN",
            "SESSIONTYPE": "PAYMENTSESSION",
            "MERCHANTUSER": self.config.merchant_user,
            "MERCHANTPASSWORD": self.config.merchant_password,
            "MERCHANT": self.config.merchant,
            "MERCHANTPAYMENTID": req.orderNumber,
            "AMOUNT": req.amount,
            "CURRENCY": currency,
            "RETURNURL": req.returnUrl,
        }
        try:
            resp, data = await self.client.post_form(fields)
        except GatewayError as e:
            log.error("[QPay Session] QPay API Error Response: status=%s body=%s", e.status_code, e.details)
            raise
        except UpstreamError as e:
            log.error("[QPay Session] Error: %s", e.message)
            raise

        log.info("[QPay Session] QPay response status: %s", resp.status_code)
        token = data.get("SESSIONTOKEN") if isinstance(data, dict) else None
        if not token:
            log.error("[QPay Session] Session token creation failed: %s", data)
            raise GatewayError("QPay session token creation failed", status_code=400, details=data)

        log.info("[QPay Session] Session token created successfully for order: %s", req.orderNumber)
        expires_at = self.clock() + SESSION_TTL
        return SessionResponse(
            sessionToken=str(token),
            paymentUrl=self.payment_url(str(token)),
            expiresAt=isoformat_z(expires_at),
            orderNumber=req.orderNumber,
        )

    def handle_callback(self, payload: CallbackPayload) -> CallbackOutcome:
        """
        QPay dönüş bildirimini değerlendirir. Sonuç ne olursa olsun çağıran taraf QPay'e "OK" döner;
        onay (acknowledgment) ile ödeme sonucu ayrıdır.
        Sonucun ana uygulamaya iletilmesi henüz yok.
        """
        checked = False
        valid: bool | None = None
        if self.config.secret_key and payload.sdSha512:
            checked = True
            valid = self.verifier.verify(payload, self.config.secret_key)
            if valid is False:
                log.warning("[QPay Return] Invalid signature for order: %s", payload.orderNumber)

        successful = payload.responseCode == SUCCESS_RESPONSE_CODE
        if successful:
            log.info(
                "[QPay Return] Payment successful for order: %s, transaction: %s",
                payload.orderNumber,
                payload.transactionId,
            )
        else:
            log.info("[QPay Return] Payment failed for order: %s, reason: %s", payload.orderNumber, payload.responseMsg)

        return CallbackOutcome(
            order_number=payload.orderNumber,
            transaction_id=payload.transactionId,
            successful=successful,
            signature_checked=checked,
            signature_valid=valid,
        )

    async def query_status(self, order_number: str) -> StatusResponse:
        log.info("[QPay Status] Querying status for order: %s", order_number)
        fields = {
            "ACTION": "QUERYSTATUS",
            "MERCHANTUSER": self.config.merchant_user,
            "MERCHANTPASSWORD": self.config.merchant_password,
            "MERCHANT": self.config.merchant,
            "ORDERNUMBER": order_number,
        }
        try:
            _, data = await self.client.post_form(fields, send_user_agent=False)
        except GatewayError as e:
            message = f"Request failed with status code {e.status_code}"
            log.error("[QPay Status] Error querying status: %s", message)
            raise UpstreamError("Failed to query transaction status", message=message) from e
        except UpstreamError as e:
            log.error("[QPay Status] Error querying status: %s", e.message)
            raise UpstreamError("Failed to query transaction status", message=e.message) from e

        return StatusResponse(orderNumber=order_number, status=data)

    def health(self) -> HealthResponse:
        return HealthResponse(timestamp=isoformat_z(self.clock()), environment=self.config.environment)
