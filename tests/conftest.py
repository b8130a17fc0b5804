"""Pytest fixtures: test client, sahte QPay upstream (httpx.MockTransport)."""
import os
from datetime import datetime, timezone
from urllib.parse import parse_qsl

import httpx
import pytest
from fastapi.testclient import TestClient

# Test ortamı ayarları (app import edilmeden önce set edilmeli)
os.environ.setdefault("QPAY_MERCHANT_USER", "merchant@example.com")
os.environ.setdefault("QPAY_MERCHANT_PASSWORD", "merchant-pass")
os.environ.setdefault("QPAY_MERCHANT", "378855")
os.environ.setdefault("ENVIRONMENT", "test")

from app.api.deps import get_relay
from app.core.config import QPayConfig
from app.main import app
from app.services.qpay import QPayRelay

FIXED_NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)
API_URL = "https://qpay.test/qpay/api/v2"


class FakeQPay:
    """Gelen istekleri kaydeder; `respond` ile ayarlanan yanıtı (veya istisnayı) döner."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.respond = lambda request: httpx.Response(200, json={})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)

    def last_form(self) -> dict[str, str]:
        return dict(parse_qsl(self.requests[-1].content.decode(), keep_blank_values=True))


@pytest.fixture
def upstream():
    return FakeQPay()


@pytest.fixture
def qpay_config():
    return QPayConfig(
        merchant_user="merchant@example.com",
        merchant_password="merchant-pass",
        merchant="378855",
        secret_key="",
        api_url=API_URL,
        environment="test",
    )


@pytest.fixture
def make_relay(qpay_config, upstream):
    def _make(config=None, **kwargs):
        http = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
        return QPayRelay(config or qpay_config, http, clock=lambda: FIXED_NOW, **kwargs)

    return _make


@pytest.fixture
def relay(make_relay):
    return make_relay()


@pytest.fixture
def client_for():
    """Verilen relay ile TestClient açar."""
    def _client(relay):
        app.dependency_overrides[get_relay] = lambda: relay
        return TestClient(app)

    yield _client
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(client_for, relay):
    with client_for(relay) as c:
        yield c


@pytest.fixture
def fixed_now():
    return FIXED_NOW
