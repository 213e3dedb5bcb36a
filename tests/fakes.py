from decimal import Decimal
from typing import Callable

from techpedia.core.errors import GatewayError
from techpedia.core.payment_gateway import InvoiceResult, PaymentGateway


class FakeGateway(PaymentGateway):
    """In-memory invoice gateway recording every call."""

    def __init__(self) -> None:
        self.mode = "succeed"
        self.calls: list[dict] = []
        self.invoices: dict[str, InvoiceResult] = {}
        # called with the method name before each gateway call
        self.before_call: Callable[[str], None] | None = None

    def configure(self, mode: str) -> None:
        """
        succeed        - invoices are created
        fail           - the gateway is unreachable, nothing is created
        lost_response  - the invoice is created but the caller sees a timeout
        """
        self.mode = mode

    def _before(self, method: str) -> None:
        if self.before_call is not None:
            self.before_call(method)

    def _store(self, external_id: str) -> InvoiceResult:
        invoice_id = f"inv_{len(self.invoices) + 1}"
        invoice = InvoiceResult(
            invoice_id=invoice_id,
            invoice_url=f"https://checkout.xendit.co/web/{invoice_id}",
            status="PENDING",
            external_id=external_id,
        )
        self.invoices[invoice_id] = invoice
        return invoice

    def create_invoice(
        self,
        external_id: str,
        amount: Decimal,
        payer_email: str,
        description: str,
        success_url: str,
        failure_url: str,
    ) -> InvoiceResult:
        self.calls.append(
            {
                "method": "create_invoice",
                "external_id": external_id,
                "amount": amount,
                "payer_email": payer_email,
                "description": description,
                "success_url": success_url,
                "failure_url": failure_url,
            }
        )
        self._before("create_invoice")
        if self.mode == "fail":
            raise GatewayError("Payment gateway is unreachable")
        invoice = self._store(external_id)
        if self.mode == "lost_response":
            raise GatewayError("Payment gateway timed out")
        return invoice

    def get_invoice(self, invoice_id: str) -> InvoiceResult:
        self.calls.append({"method": "get_invoice", "invoice_id": invoice_id})
        self._before("get_invoice")
        if invoice_id not in self.invoices:
            raise GatewayError("Invoice not found")
        return self.invoices[invoice_id]

    def find_invoice(self, external_id: str) -> InvoiceResult | None:
        self.calls.append({"method": "find_invoice", "external_id": external_id})
        self._before("find_invoice")
        matches = [i for i in self.invoices.values() if i.external_id == external_id]
        return matches[-1] if matches else None

    def created(self) -> list[dict]:
        return [c for c in self.calls if c["method"] == "create_invoice"]
