from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SessionRequest(BaseModel):
    """Mobil/web istemciden gelen ödeme oturumu isteği. Eksik alanlar 400 ile döner (422 değil)."""
    amount: int | float | str | None = None
    currency: str | None = "TRY"  # Sadece alan hiç gönderilmezse TRY; null gönderilirse forma eklenmez
    orderNumber: Any = None
    customerEmail: str | None = None
    returnUrl: str | None = None

    def missing_fields(self) -> list[str]:
        # Boş, null ve 0 eksik sayılır
        values = {
            "amount": self.amount,
            "orderNumber": self.orderNumber,
            "customerEmail": self.customerEmail,
            "returnUrl": self.returnUrl,
        }
        return [name for name, value in values.items() if not value]


class SessionResponse(BaseModel):
    success: bool = True
    sessionToken: str
    paymentUrl: str
    expiresAt: str
    orderNumber: Any


class CallbackPayload(BaseModel):
    """QPay'in dönüş bildirimi. Alanlar olduğu gibi geçer; sadece responseCode yorumlanır."""
    model_config = ConfigDict(extra="allow")

    responseCode: Any = None
    responseMsg: Any = None
    orderNumber: Any = None
    transactionId: Any = None
    amount: Any = None
    currency: Any = None
    sdSha512: Any = None  # İmza
    random: Any = None
    authCode: Any = None
    rrn: Any = None
    batchNumber: Any = None


class StatusResponse(BaseModel):
    success: bool = True
    orderNumber: str
    status: Any = Field(default=None, description="QPay'in ham yanıt gövdesi")


class HealthResponse(BaseModel):
    status: str = "OK"
    timestamp: str
    environment: str
