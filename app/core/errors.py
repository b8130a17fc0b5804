"""
Relay hata sınıfları.

Upstream hataları iki etiketle ayrılır:
- GatewayError: QPay'e ulaşıldı, ama yanıt bir ret (HTTP hata kodu veya token'sız gövde).
- UpstreamError: yanıt yok (bağlantı hatası, zaman aşımı) veya beklenmeyen istisna.
Her hata {success: false, error, details|message} zarfına çevrilir; HTTP kodu hatanın üzerinde durur.
"""
from __future__ import annotations

from typing import Any

REQUIRED_SESSION_FIELDS = ("amount", "orderNumber", "customerEmail", "returnUrl")


class RelayError(Exception):
    status_code: int = 500
    error: str = "Internal server error"

    def __init__(
        self,
        error: str | None = None,
        *,
        status_code: int | None = None,
        details: Any = None,
        message: str | None = None,
    ) -> None:
        if error is not None:
            self.error = error
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        self.message = message
        super().__init__(message or self.error)

    def envelope(self) -> dict[str, Any]:
        body: dict[str, Any] = {"success": False, "error": self.error}
        if self.message is not None:
            body["message"] = self.message
        else:
            body["details"] = self.details
        return body


class ValidationError(RelayError):
    """İstemci zorunlu alan göndermedi; upstream çağrısından önce kısa devre."""

    status_code = 400
    error = "Missing required fields"

    def __init__(self, missing: list[str]) -> None:
        super().__init__(details=list(missing))
        self.missing = list(missing)

    def envelope(self) -> dict[str, Any]:
        body = super().envelope()
        body["required"] = list(REQUIRED_SESSION_FIELDS)
        return body


class GatewayError(RelayError):
    status_code = 400
    error = "QPay API Error"


class UpstreamError(RelayError):
    status_code = 500
    error = "Internal server error"
