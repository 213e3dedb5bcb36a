# techpedia/core/payment_gateway.py
"""
Payment gateway adapter for hosted invoices (Xendit).

Responsibilities:
  - Create a hosted invoice for an order and return its redirect URL.
  - Retrieve an existing invoice by id.
  - Translate every transport / remote failure into GatewayError.

Typical .env configuration:

    XENDIT_SECRET_KEY=xnd_development_...
    XENDIT_API_URL=https://api.xendit.co
    XENDIT_TIMEOUT_SECONDS=10

Services receive the gateway through the `get_gateway` FastAPI dependency,
so tests can swap in a fake implementation via `dependency_overrides`.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache

import requests

from techpedia.core.config import get_settings
from techpedia.core.errors import GatewayError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvoiceResult:
    """Subset of the gateway's invoice payload that the backend uses."""

    invoice_id: str
    invoice_url: str
    status: str
    external_id: str | None = None


class PaymentGateway(ABC):
    """Abstract invoice gateway."""

    @abstractmethod
    def create_invoice(
        self,
        external_id: str,
        amount: Decimal,
        payer_email: str,
        description: str,
        success_url: str,
        failure_url: str,
    ) -> InvoiceResult:
        ...

    @abstractmethod
    def get_invoice(self, invoice_id: str) -> InvoiceResult:
        ...

    @abstractmethod
    def find_invoice(self, external_id: str) -> InvoiceResult | None:
        """Latest invoice created for this external reference, if any."""
        ...


class XenditGateway(PaymentGateway):
    """
    Xendit Invoice API client over HTTPS.

    Auth is HTTP basic with the secret key as username and an empty
    password. Every call has a bounded timeout.
    """

    def __init__(self, secret_key: str, base_url: str, timeout: float):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = requests.Session()
        self.http.auth = (secret_key, "")

    def _request(self, method: str, path: str, **kwargs) -> dict | list:
        url = f"{self.base_url}{path}"
        try:
            response = self.http.request(method, url, timeout=self.timeout, **kwargs)
        except requests.Timeout as e:
            logger.error("Xendit %s %s timed out: %s", method, path, e)
            raise GatewayError(
                "Payment gateway timed out. Retry invoice retrieval for this order."
            ) from e
        except requests.RequestException as e:
            logger.error("Xendit %s %s failed: %s", method, path, e)
            raise GatewayError("Payment gateway is unreachable") from e

        if not response.ok:
            logger.error(
                "Xendit %s %s returned %s: %s",
                method,
                path,
                response.status_code,
                response.text,
            )
            raise GatewayError(
                "Payment gateway rejected the request",
                gateway_status=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise GatewayError("Payment gateway returned an invalid response") from e

    @staticmethod
    def _to_result(data: dict) -> InvoiceResult:
        try:
            return InvoiceResult(
                invoice_id=data["id"],
                invoice_url=data["invoice_url"],
                status=data.get("status", "PENDING"),
                external_id=data.get("external_id"),
            )
        except KeyError as e:
            raise GatewayError(f"Payment gateway response missing {e.args[0]}") from e

    def create_invoice(
        self,
        external_id: str,
        amount: Decimal,
        payer_email: str,
        description: str,
        success_url: str,
        failure_url: str,
    ) -> InvoiceResult:
        data = self._request(
            "POST",
            "/v2/invoices",
            json={
                "external_id": external_id,
                "amount": float(amount),
                "payer_email": payer_email,
                "description": description,
                "success_redirect_url": success_url,
                "failure_redirect_url": failure_url,
            },
        )
        return self._to_result(data)

    def get_invoice(self, invoice_id: str) -> InvoiceResult:
        return self._to_result(self._request("GET", f"/v2/invoices/{invoice_id}"))

    def find_invoice(self, external_id: str) -> InvoiceResult | None:
        data = self._request("GET", "/v2/invoices", params={"external_id": external_id})
        if not data:
            return None
        latest = max(data, key=lambda invoice: invoice.get("created", ""))
        return self._to_result(latest)


@lru_cache
def get_gateway() -> PaymentGateway:
    """
    FastAPI dependency returning the process-wide Xendit client.

    Raises:
        GatewayError: if XENDIT_SECRET_KEY is not configured.
    """
    settings = get_settings()
    if not settings.XENDIT_SECRET_KEY:
        raise GatewayError("Missing XENDIT_SECRET_KEY in .env")
    return XenditGateway(
        secret_key=settings.XENDIT_SECRET_KEY,
        base_url=settings.XENDIT_API_URL,
        timeout=settings.XENDIT_TIMEOUT_SECONDS,
    )
