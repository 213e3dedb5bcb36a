from decimal import Decimal

import pytest
import requests

from techpedia.core.errors import GatewayError
from techpedia.core.payment_gateway import XenditGateway

INVOICE = {
    "id": "inv_abc",
    "external_id": "order-1",
    "status": "PENDING",
    "invoice_url": "https://checkout.xendit.co/web/inv_abc",
    "created": "2024-01-01T00:00:00.000Z",
}


class StubResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self.ok = status_code < 400
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class StubHttp:
    """Stands in for requests.Session: returns or raises a canned outcome."""

    def __init__(self, outcome):
        self.outcome = outcome
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


@pytest.fixture()
def make_gateway():
    def _make(outcome):
        gateway = XenditGateway("xnd_secret", "https://api.xendit.co/", timeout=3)
        gateway.http = StubHttp(outcome)
        return gateway

    return _make


def create(gateway):
    return gateway.create_invoice(
        external_id="order-1",
        amount=Decimal("25.50"),
        payer_email="alice@example.com",
        description="Payment for Order #order-1",
        success_url="http://shop/orders/order-1?payment=success",
        failure_url="http://shop/orders/order-1?payment=failed",
    )


class TestCreateInvoice:
    def test_posts_invoice_and_maps_result(self, make_gateway):
        gateway = make_gateway(StubResponse(payload=INVOICE))

        result = create(gateway)

        assert result.invoice_id == "inv_abc"
        assert result.invoice_url == INVOICE["invoice_url"]
        method, url, kwargs = gateway.http.requests[0]
        assert (method, url) == ("POST", "https://api.xendit.co/v2/invoices")
        assert kwargs["timeout"] == 3
        assert kwargs["json"]["external_id"] == "order-1"
        assert kwargs["json"]["amount"] == 25.5
        assert kwargs["json"]["success_redirect_url"].endswith("payment=success")

    def test_timeout(self, make_gateway):
        with pytest.raises(GatewayError):
            create(make_gateway(requests.Timeout("read timed out")))

    def test_connection_error(self, make_gateway):
        with pytest.raises(GatewayError):
            create(make_gateway(requests.ConnectionError("refused")))

    def test_rejected_request(self, make_gateway):
        with pytest.raises(GatewayError) as excinfo:
            create(make_gateway(StubResponse(status_code=400, text="INVALID_AMOUNT")))

        assert excinfo.value.extra["gateway_status"] == 400

    def test_invalid_body(self, make_gateway):
        with pytest.raises(GatewayError):
            create(make_gateway(StubResponse(payload=None)))

    def test_missing_fields(self, make_gateway):
        with pytest.raises(GatewayError):
            create(make_gateway(StubResponse(payload={"id": "inv_abc"})))


class TestLookups:
    def test_get_invoice(self, make_gateway):
        gateway = make_gateway(StubResponse(payload=INVOICE))

        assert gateway.get_invoice("inv_abc").status == "PENDING"
        assert gateway.http.requests[0][1] == "https://api.xendit.co/v2/invoices/inv_abc"

    def test_find_invoice_picks_latest(self, make_gateway):
        newer = {**INVOICE, "id": "inv_new", "created": "2024-02-01T00:00:00.000Z"}
        gateway = make_gateway(StubResponse(payload=[INVOICE, newer]))

        result = gateway.find_invoice("order-1")

        assert result.invoice_id == "inv_new"
        assert gateway.http.requests[0][2]["params"] == {"external_id": "order-1"}

    def test_find_invoice_none(self, make_gateway):
        assert make_gateway(StubResponse(payload=[])).find_invoice("order-1") is None
