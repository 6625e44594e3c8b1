"""Integration tests for Invoice API endpoints"""

import base64
import pytest
from httpx import AsyncClient

from config import ApplicationConfig

API = ApplicationConfig.API_PREFIX

INVOICE_PAYLOAD = {
    "customer_id": 42,
    "customer_name": "Acme Bakery",
    "issue_date": "2024-03-01",
    "due_date": "2024-03-31",
    "status": "sent",
    "items": [
        {"product_name": "LPG 12.5kg refill", "quantity": "2", "unit_price": "50.00", "tax_rate": "10"}
    ],
}


async def create_invoice(client: AsyncClient, **overrides) -> dict:
    response = await client.post(f"{API}/invoices", json={**INVOICE_PAYLOAD, **overrides})
    assert response.status_code == 201
    return response.json()


def payment(amount: str) -> dict:
    return {"amount": amount, "payment_method": "cash", "payment_date": "2024-03-10"}


class TestInvoicesAPIIntegration:

    @pytest.mark.asyncio
    async def test_create_invoice(self, client: AsyncClient):
        invoice = await create_invoice(client, discount_amount="5.00")

        assert invoice["invoice_number"].startswith("INV-")
        assert invoice["subtotal"] == "100.00"
        assert invoice["tax_amount"] == "10.00"
        assert invoice["total_amount"] == "105.00"
        assert invoice["remaining_amount"] == "105.00"
        assert invoice["status"] == "sent"

        by_number = await client.get(f"{API}/invoices/number/{invoice['invoice_number']}")
        assert by_number.status_code == 200
        assert by_number.json()["id"] == invoice["id"]

    @pytest.mark.asyncio
    async def test_payments(self, client: AsyncClient):
        invoice_id = (await create_invoice(client))["id"]

        first = await client.post(f"{API}/invoices/{invoice_id}/payments", json=payment("60.00"))
        second = await client.post(f"{API}/invoices/{invoice_id}/payments", json=payment("60.00"))
        third = await client.post(f"{API}/invoices/{invoice_id}/payments", json=payment("50.00"))
        listed = await client.get(f"{API}/invoices/{invoice_id}/payments")

        assert first.status_code == 201
        assert first.json()["invoice"]["status"] == "partially_paid"
        assert second.status_code == 422
        assert second.json()["error"]["code"] == "AMOUNT_EXCEEDS_BALANCE"
        assert third.status_code == 201
        assert third.json()["invoice"]["status"] == "paid"
        assert third.json()["invoice"]["is_paid"] is True
        assert [p["amount"] for p in listed.json()] == ["60.00", "50.00"]

    @pytest.mark.asyncio
    async def test_paid_invoice_is_locked(self, client: AsyncClient):
        invoice_id = (await create_invoice(client))["id"]
        await client.post(f"{API}/invoices/{invoice_id}/mark-paid", json=payment("110.00"))

        add_item = await client.post(
            f"{API}/invoices/{invoice_id}/items",
            json={"product_name": "Hose", "quantity": "1", "unit_price": "3.00"},
        )
        cancel = await client.post(f"{API}/invoices/{invoice_id}/cancel", json={"reason": "duplicate"})

        assert add_item.status_code == 409
        assert add_item.json()["error"]["code"] == "INVOICE_LOCKED"
        assert cancel.status_code == 409
        assert cancel.json()["error"]["code"] == "INVOICE_ALREADY_PAID"

    @pytest.mark.asyncio
    async def test_status_update_cannot_set_paid(self, client: AsyncClient):
        invoice_id = (await create_invoice(client))["id"]

        response = await client.patch(f"{API}/invoices/{invoice_id}/status", json={"status": "paid"})

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "INVALID_TRANSITION"

    @pytest.mark.asyncio
    async def test_missing_invoice_returns_404(self, client: AsyncClient):
        response = await client.get(f"{API}/invoices/999")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "INVOICE_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_due_date_before_issue_date_returns_400(self, client: AsyncClient):
        response = await client.post(
            f"{API}/invoices", json={**INVOICE_PAYLOAD, "issue_date": "2024-03-10", "due_date": "2024-03-01"}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_null_issue_date_returns_400(self, client: AsyncClient):
        invoice = await create_invoice(client, status="draft")

        response = await client.patch(f"{API}/invoices/{invoice['id']}", json={"issue_date": None})
        unchanged = await client.get(f"{API}/invoices/{invoice['id']}")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        assert unchanged.json()["issue_date"] == "2024-03-01"

    @pytest.mark.asyncio
    async def test_empty_invoice_is_paid(self, client: AsyncClient):
        invoice = await create_invoice(client, items=[])

        assert invoice["total_amount"] == "0.00"
        assert invoice["paid_amount"] == "0.00"
        assert invoice["is_paid"] is True
        assert invoice["status"] == "sent"

    @pytest.mark.asyncio
    async def test_overdue_sweep_and_statistics(self, client: AsyncClient):
        late = await create_invoice(client, due_date="2024-03-05")
        await create_invoice(client, due_date="2024-04-30")

        swept = await client.post(f"{API}/invoices/overdue/mark", params={"as_of": "2024-03-20"})
        stats = await client.get(f"{API}/invoices/statistics")

        assert swept.status_code == 200
        assert swept.json()["invoice_ids"] == [late["id"]]
        assert stats.json()["total_unpaid"] == "220.00"
        assert stats.json()["invoice_count"] == 2

    @pytest.mark.asyncio
    async def test_pdf_download(self, client: AsyncClient):
        invoice = await create_invoice(client)

        download = await client.get(f"{API}/invoices/{invoice['id']}/pdf")
        encoded = await client.get(f"{API}/invoices/{invoice['id']}/pdf/base64")

        assert download.status_code == 200
        assert download.headers["content-type"] == "application/pdf"
        assert f"invoice_{invoice['invoice_number']}.pdf" in download.headers["content-disposition"]
        assert download.content.startswith(b"%PDF")
        assert base64.b64decode(encoded.json()["pdf_base64"]).startswith(b"%PDF")
