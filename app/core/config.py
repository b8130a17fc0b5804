from dataclasses import dataclass
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

# .env proje kökünde: app/core/config.py -> app/core -> app -> kök
_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _ROOT / ".env"

DEFAULT_QPAY_API_URL = "https://qpos-test.qpay.com.tr/qpay/api/v2"
DEFAULT_CORS_ORIGINS = ",".join(
    [
        "https://www.marinekspertiz.com",
        "https://marinekspertiz.com",
        "http://localhost:3000",  # Geliştirme
        "capacitor://localhost",
        "ionic://localhost",
    ]
)


class Settings(BaseSettings):
    # QPay üye işyeri bilgileri (QPay panelinden)
    qpay_merchant_user: str = ""       # Sistem kullanıcısı (e-posta)
    qpay_merchant_password: str = ""   # Sistem kullanıcısı şifresi
    qpay_merchant: str = ""            # Üye işyeri numarası
    qpay_secret_key: str = ""          # Dönüş (callback) imzası için gizli anahtar
    qpay_api_url: str = DEFAULT_QPAY_API_URL
    qpay_timeout_seconds: float = 30.0
    qpay_user_agent: str = "MEKS-Marine-App/1.0"
    port: int = 8080
    environment: str = "development"
    # CORS: virgülle ayrılmış origin listesi
    cors_origins: str = DEFAULT_CORS_ORIGINS

    model_config = {
        "env_file": _ENV_FILE if _ENV_FILE.is_file() else ".env",
        "extra": "ignore",
    }

    @field_validator(
        "qpay_merchant_user",
        "qpay_merchant_password",
        "qpay_merchant",
        "qpay_secret_key",
        mode="before",
    )
    @classmethod
    def strip_credentials(cls, v: str | None) -> str:
        """Boşluk/yanlış kopya kaynaklı hataları azaltır."""
        return (v or "").strip()

    @field_validator("qpay_api_url", mode="before")
    @classmethod
    def strip_api_url(cls, v: str | None) -> str:
        return (v or "").strip().rstrip("/") or DEFAULT_QPAY_API_URL


@dataclass(frozen=True)
class QPayConfig:
    """Süreç başında bir kez oluşturulan, değiştirilemez QPay ayarları. Relay'e açıkça verilir."""

    merchant_user: str
    merchant_password: str
    merchant: str
    secret_key: str
    api_url: str
    timeout_seconds: float = 30.0
    user_agent: str = "MEKS-Marine-App/1.0"
    environment: str = "development"

    @classmethod
    def from_settings(cls, s: Settings) -> "QPayConfig":
        return cls(
            merchant_user=s.qpay_merchant_user,
            merchant_password=s.qpay_merchant_password,
            merchant=s.qpay_merchant,
            secret_key=s.qpay_secret_key,
            api_url=s.qpay_api_url,
            timeout_seconds=s.qpay_timeout_seconds,
            user_agent=s.qpay_user_agent,
            environment=s.environment,
        )

    def missing_credentials(self) -> list[str]:
        """Eksik zorunlu ortam değişkenlerinin adları (sadece varlık kontrolü)."""
        required = {
            "QPAY_MERCHANT_USER": self.merchant_user,
            "QPAY_MERCHANT_PASSWORD": self.merchant_password,
            "QPAY_MERCHANT": self.merchant,
        }
        return [name for name, value in required.items() if not value]


settings = Settings()


def cors_origins_list(s: Settings = settings) -> list[str]:
    if not s.cors_origins or s.cors_origins.strip() == "*":
        return ["*"]
    return [o.strip() for o in s.cors_origins.split(",") if o.strip()]
