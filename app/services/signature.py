"""
QPay dönüş imzası (sdSha512) doğrulama adımı.

İmzanın hangi alanlardan, hangi sırayla üretildiği QPay desteği ile henüz netleşmedi.
Bu yüzden varsayılan doğrulayıcı bilerek hiçbir şey doğrulamaz ve sonucu "bilinmiyor" (None) döner.
Algoritma netleşince SignatureVerifier protokolünü uygulayan bir sınıf QPayRelay'e verilir.
"""
import logging
from typing import Protocol

from app.schemas.payment import CallbackPayload

log = logging.getLogger("qpay_relay.signature")


class SignatureVerifier(Protocol):
    def verify(self, payload: CallbackPayload, secret_key: str) -> bool | None:
        """True: geçerli, False: geçersiz, None: doğrulanmadı."""
        ...


class NoopSignatureVerifier:
    """Varsayılan: doğrulama yapılmaz, sadece loglanır."""

    def verify(self, payload: CallbackPayload, secret_key: str) -> bool | None:
        log.info(
            "Signature validation needed for order %s - not implemented, awaiting QPay support guidance",
            payload.orderNumber,
        )
        return None
