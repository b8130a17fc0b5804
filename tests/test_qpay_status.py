"""GET /qpay/status/{orderNumber}: QUERYSTATUS iletimi ve hata zarfı."""
import httpx
from fastapi.testclient import TestClient


def test_status_forwards_order_number(client: TestClient, upstream):
    upstream_body = {"RESPONSECODE": "00", "TRANSACTIONSTATUS": "APPROVED"}
    upstream.respond = lambda request: httpx.Response(200, json=upstream_body)
    r = client.get("/qpay/status/ORDER123")
    assert r.status_code == 200
    assert r.json() == {"success": True, "orderNumber": "ORDER123", "status": upstream_body}
    assert upstream.last_form() == {
        "ACTION": "QUERYSTATUS",
        "MERCHANTUSER": "merchant@example.com",
        "MERCHANTPASSWORD": "merchant-pass",
        "MERCHANT": "378855",
        "ORDERNUMBER": "ORDER123",
    }


def test_status_returns_raw_body_even_without_success_code(client: TestClient, upstream):
    upstream.respond = lambda request: httpx.Response(200, json={"RESPONSECODE": "05"})
    r = client.get("/qpay/status/ORDER123")
    assert r.status_code == 200
    assert r.json()["status"] == {"RESPONSECODE": "05"}


def test_status_upstream_error_returns_500(client: TestClient, upstream):
    upstream.respond = lambda request: httpx.Response(503, text="unavailable")
    r = client.get("/qpay/status/ORDER123")
    assert r.status_code == 500
    j = r.json()
    assert j["success"] is False
    assert j["error"] == "Failed to query transaction status"
    assert j["message"] == "Request failed with status code 503"


def test_status_transport_error_returns_500(client: TestClient, upstream):
    def _refused(request):
        raise httpx.ConnectError("connection refused", request=request)

    upstream.respond = _refused
    r = client.get("/qpay/status/ORDER123")
    assert r.status_code == 500
    assert r.json()["message"] == "connection refused"
