"""Unit tests for invoice use cases

Tests cover:
- Invoice creation with derived totals and generated number
- Item edits on locked invoices and totals dropping below paid amount
- Payments through ApplyInvoicePayment and MarkInvoicePaid
- Status transitions, cancel and delete rules
- Statistics, overdue sweep and PDF generation
"""

import base64
import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.invoices import (
    AddInvoiceItem,
    ApplyInvoicePayment,
    CancelInvoice,
    CancelInvoiceCommandDTO,
    CreateInvoice,
    CreateInvoiceCommandDTO,
    DeleteInvoice,
    GenerateInvoicePdf,
    GetInvoiceStatistics,
    InvoiceItemInputDTO,
    MarkInvoicePaid,
    MarkInvoiceSent,
    MarkOverdueInvoices,
    PaymentCommandDTO,
    RemoveInvoiceItem,
    UpdateInvoice,
    UpdateInvoiceCommandDTO,
    UpdateInvoiceItem,
    UpdateInvoiceItemCommandDTO,
    UpdateInvoiceStatus,
    UpdateInvoiceStatusCommandDTO,
)
from src.app.repositories.invoice_repository import InvoiceAggregates
from src.domain.invoice import Invoice, InvoiceStatus, PaymentMethod
from src.domain.invoice_item import InvoiceItem
from src.domain.totals import apply_line_totals


class FakeInvoiceStore:
    """Invoice, item and payment repository mocks backed by dicts"""

    def __init__(self):
        self.invoices = {}
        self.items = {}
        self.payments = []

        self.invoice_repo = MagicMock()
        self.invoice_repo.generate_invoice_number = AsyncMock(return_value="INV-2024-000001")
        self.invoice_repo.create = AsyncMock(side_effect=self._create_invoice)
        self.invoice_repo.get_by_id = AsyncMock(
            side_effect=lambda invoice_id, for_update=False: self.invoices.get(invoice_id)
        )
        self.invoice_repo.update = AsyncMock(side_effect=self._update_invoice)
        self.invoice_repo.list = AsyncMock(
            side_effect=lambda filters, **kwargs: (list(self.invoices.values()), len(self.invoices))
        )
        self.invoice_repo.find_overdue = AsyncMock(
            side_effect=lambda as_of, limit=500: [i for i in self.invoices.values() if i.is_overdue(as_of)]
        )

        self.item_repo = MagicMock()
        self.item_repo.create = AsyncMock(side_effect=self._create_item)
        self.item_repo.bulk_create = AsyncMock(side_effect=self._bulk_create)
        self.item_repo.get_by_id = AsyncMock(side_effect=lambda item_id: self.items.get(item_id))
        self.item_repo.get_by_invoice_id = AsyncMock(
            side_effect=lambda invoice_id: [i for i in self.items.values() if i.invoice_id == invoice_id]
        )
        self.item_repo.delete = AsyncMock(side_effect=lambda item_id: self.items.pop(item_id, None) is not None)

        self.payment_repo = MagicMock()
        self.payment_repo.create = AsyncMock(side_effect=self._create_payment)
        self.payment_repo.get_by_invoice_id = AsyncMock(
            side_effect=lambda invoice_id: [p for p in self.payments if p.invoice_id == invoice_id]
        )
        self.payment_repo.sum_by_invoice_id = AsyncMock(
            side_effect=lambda invoice_id: sum(
                (p.amount for p in self.payments if p.invoice_id == invoice_id), Decimal("0.00")
            )
        )

    def add_invoice(self, status=InvoiceStatus.SENT, total="110.00", **overrides) -> Invoice:
        invoice_id = len(self.invoices) + 1
        data = dict(
            id=invoice_id,
            invoice_number=f"INV-2024-{invoice_id:06d}",
            customer_id=42,
            issue_date=date(2024, 3, 1),
            due_date=date(2024, 3, 31),
            status=status,
            total_amount=Decimal(total),
        )
        data.update(overrides)
        invoice = Invoice(**data)
        self.invoices[invoice.id] = invoice
        return invoice

    def add_item(self, invoice_id, quantity="2", unit_price="50.00", tax_rate="10") -> InvoiceItem:
        item = InvoiceItem(
            id=len(self.items) + 1,
            invoice_id=invoice_id,
            product_name="LPG 12.5kg refill",
            quantity=Decimal(quantity),
            unit_price=Decimal(unit_price),
            tax_rate=Decimal(tax_rate),
        )
        apply_line_totals(item)
        self.items[item.id] = item
        return item

    async def _create_invoice(self, invoice):
        invoice.id = len(self.invoices) + 1
        self.invoices[invoice.id] = invoice
        return invoice

    async def _update_invoice(self, invoice_id, fields):
        invoice = self.invoices[invoice_id]
        for name, value in fields.items():
            setattr(invoice, name, value)
        return invoice

    async def _create_item(self, item):
        item.id = len(self.items) + 1
        self.items[item.id] = item
        return item

    async def _bulk_create(self, items):
        return [await self._create_item(i) for i in items]

    async def _create_payment(self, payment):
        payment.id = len(self.payments) + 1
        self.payments.append(payment)
        return payment


@pytest.fixture
def store():
    return FakeInvoiceStore()


def payment(amount, method=PaymentMethod.CASH):
    return PaymentCommandDTO(amount=Decimal(amount), payment_method=method, payment_date=date(2024, 3, 10))


@pytest.mark.asyncio
class TestCreateInvoice:

    async def test_totals_are_derived_from_items(self, store, mock_uow, mock_cache):
        """
        Given: One item 2 x 50.00 at 10% tax and a 5.00 discount
        When: The invoice is created
        Then: subtotal 100.00, tax 10.00, total 105.00 and a generated number
        """
        use_case = CreateInvoice(
            mock_uow, store.invoice_repo, store.item_repo, store.payment_repo, cache=mock_cache
        )
        command = CreateInvoiceCommandDTO(
            customer_id=42,
            issue_date=date(2024, 3, 1),
            discount_amount=Decimal("5.00"),
            items=[InvoiceItemInputDTO(product_name="LPG 12.5kg refill", quantity=Decimal("2"),
                                       unit_price=Decimal("50.00"), tax_rate=Decimal("10"))],
        )

        result = await use_case.execute(command)

        assert result.is_ok()
        invoice = result.value
        assert invoice.invoice_number == "INV-2024-000001"
        assert invoice.subtotal == Decimal("100.00")
        assert invoice.tax_amount == Decimal("10.00")
        assert invoice.total_amount == Decimal("105.00")
        assert invoice.remaining_amount == Decimal("105.00")
        assert invoice.status == InvoiceStatus.DRAFT
        assert invoice.due_date == date(2024, 3, 31)
        assert invoice.currency == "USD"
        assert invoice.items[0].total == Decimal("110.00")
        mock_uow.commit.assert_awaited_once()
        mock_cache.invalidate.assert_awaited_once_with("invoice:1")

    async def test_due_date_before_issue_date_rejected(self, store, mock_uow):
        use_case = CreateInvoice(mock_uow, store.invoice_repo, store.item_repo, store.payment_repo)
        command = CreateInvoiceCommandDTO(
            customer_id=42, issue_date=date(2024, 3, 10), due_date=date(2024, 3, 1)
        )

        result = await use_case.execute(command)

        assert result.error.code == "INVALID_DUE_DATE"
        store.invoice_repo.create.assert_not_called()
        mock_uow.rollback.assert_awaited_once()

    async def test_discount_above_amount_rejected(self, store, mock_uow):
        use_case = CreateInvoice(mock_uow, store.invoice_repo, store.item_repo, store.payment_repo)
        command = CreateInvoiceCommandDTO(
            customer_id=42,
            discount_amount=Decimal("500.00"),
            items=[InvoiceItemInputDTO(product_name="Regulator", quantity=Decimal("1"), unit_price=Decimal("20.00"))],
        )

        result = await use_case.execute(command)

        assert result.error.code == "VALIDATION_ERROR"
        mock_uow.commit.assert_not_called()

    async def test_cannot_be_created_as_paid(self, store, mock_uow):
        use_case = CreateInvoice(mock_uow, store.invoice_repo, store.item_repo, store.payment_repo)

        result = await use_case.execute(CreateInvoiceCommandDTO(customer_id=42, status=InvoiceStatus.PAID))

        assert result.error.code == "INVALID_INITIAL_STATUS"

    async def test_empty_invoice_is_settled_but_not_paid_status(self, store, mock_uow):
        use_case = CreateInvoice(mock_uow, store.invoice_repo, store.item_repo, store.payment_repo)

        result = await use_case.execute(CreateInvoiceCommandDTO(customer_id=42, status=InvoiceStatus.SENT))

        assert result.value.total_amount == Decimal("0.00")
        assert result.value.paid_amount == Decimal("0.00")
        assert result.value.is_paid is True
        assert result.value.status == InvoiceStatus.SENT
        assert result.value.paid_date is None

    async def test_adding_an_item_unsettles_an_empty_invoice(self, store, mock_uow):
        created = await CreateInvoice(
            mock_uow, store.invoice_repo, store.item_repo, store.payment_repo
        ).execute(CreateInvoiceCommandDTO(customer_id=42))

        result = await AddInvoiceItem(mock_uow, store.invoice_repo, store.item_repo, store.payment_repo).execute(
            created.value.id,
            InvoiceItemInputDTO(product_name="Regulator", quantity=Decimal("1"), unit_price=Decimal("20.00")),
        )

        assert result.value.total_amount == Decimal("20.00")
        assert result.value.is_paid is False


@pytest.mark.asyncio
class TestInvoiceItems:

    async def test_paid_invoice_is_locked(self, store, mock_uow):
        invoice = store.add_invoice(status=InvoiceStatus.PAID, is_paid=True, paid_amount=Decimal("110.00"))
        use_case = AddInvoiceItem(mock_uow, store.invoice_repo, store.item_repo, store.payment_repo)

        result = await use_case.execute(
            invoice.id,
            InvoiceItemInputDTO(product_name="Hose", quantity=Decimal("1"), unit_price=Decimal("9.99")),
        )

        assert result.error.code == "INVOICE_LOCKED"
        assert result.error.details["category"] == "INVALID_STATE"
        store.item_repo.create.assert_not_called()
        assert store.items == {}

    async def test_add_item_rebuilds_totals(self, store, mock_uow, mock_cache):
        invoice = store.add_invoice(status=InvoiceStatus.DRAFT, total="0.00")
        store.add_item(invoice.id)
        use_case = AddInvoiceItem(
            mock_uow, store.invoice_repo, store.item_repo, store.payment_repo, cache=mock_cache
        )

        result = await use_case.execute(
            invoice.id,
            InvoiceItemInputDTO(product_name="Regulator", quantity=Decimal("1.5"), unit_price=Decimal("10.00")),
        )

        assert result.value.subtotal == Decimal("115.00")
        assert result.value.tax_amount == Decimal("10.00")
        assert result.value.total_amount == Decimal("125.00")
        assert len(result.value.items) == 2

    async def test_removing_item_below_paid_amount_rejected(self, store, mock_uow):
        invoice = store.add_invoice(status=InvoiceStatus.PARTIALLY_PAID, total="220.00")
        store.add_item(invoice.id)
        second = store.add_item(invoice.id)
        await ApplyInvoicePayment(mock_uow, store.invoice_repo, store.payment_repo).execute(
            invoice.id, payment("150.00")
        )
        use_case = RemoveInvoiceItem(mock_uow, store.invoice_repo, store.item_repo, store.payment_repo)

        result = await use_case.execute(invoice.id, second.id)

        assert result.error.code == "TOTAL_BELOW_PAID_AMOUNT"
        mock_uow.rollback.assert_awaited()

    async def test_discount_edit_that_settles_balance_marks_paid(self, store, mock_uow):
        invoice = store.add_invoice(status=InvoiceStatus.SENT, total="110.00")
        store.add_item(invoice.id)
        await ApplyInvoicePayment(mock_uow, store.invoice_repo, store.payment_repo).execute(
            invoice.id, payment("100.00")
        )
        use_case = UpdateInvoice(mock_uow, store.invoice_repo, store.item_repo, store.payment_repo)

        result = await use_case.execute(invoice.id, UpdateInvoiceCommandDTO(discount_amount=Decimal("10.00")))

        assert result.value.total_amount == Decimal("100.00")
        assert result.value.is_paid is True
        assert result.value.status == InvoiceStatus.PAID

    @pytest.mark.parametrize("field", ["issue_date", "due_date", "payment_terms", "currency", "exchange_rate"])
    async def test_null_for_required_header_field_rejected(self, store, mock_uow, field):
        invoice = store.add_invoice(status=InvoiceStatus.DRAFT)
        use_case = UpdateInvoice(mock_uow, store.invoice_repo, store.item_repo, store.payment_repo)

        result = await use_case.execute(invoice.id, UpdateInvoiceCommandDTO(**{field: None}))

        assert result.error.code == "VALIDATION_ERROR"
        assert result.error.details["field"] == field
        store.invoice_repo.update.assert_not_called()
        mock_uow.rollback.assert_awaited_once()

    async def test_null_product_name_rejected(self, store, mock_uow):
        invoice = store.add_invoice(status=InvoiceStatus.DRAFT)
        item = store.add_item(invoice.id)
        use_case = UpdateInvoiceItem(mock_uow, store.invoice_repo, store.item_repo, store.payment_repo)

        result = await use_case.execute(invoice.id, item.id, UpdateInvoiceItemCommandDTO(product_name=None))

        assert result.error.code == "VALIDATION_ERROR"
        assert result.error.details["field"] == "product_name"
        assert item.product_name == "LPG 12.5kg refill"

    async def test_null_for_nullable_field_clears_it(self, store, mock_uow):
        invoice = store.add_invoice(status=InvoiceStatus.DRAFT, notes="Quarterly supply")
        use_case = UpdateInvoice(mock_uow, store.invoice_repo, store.item_repo, store.payment_repo)

        result = await use_case.execute(invoice.id, UpdateInvoiceCommandDTO(notes=None))

        assert result.value.notes is None


@pytest.mark.asyncio
class TestInvoicePayments:

    async def test_sixty_sixty_fifty_sequence(self, store, mock_uow, mock_cache):
        """
        Given: A sent invoice with total 110.00
        When: 60.00 is paid, then 60.00, then 50.00
        Then: First partial, second refused, third settles it
        """
        invoice = store.add_invoice()
        use_case = ApplyInvoicePayment(
            mock_uow, store.invoice_repo, store.payment_repo, store.item_repo, cache=mock_cache
        )

        first = await use_case.execute(invoice.id, payment("60.00"))
        assert first.value.invoice.status == InvoiceStatus.PARTIALLY_PAID
        assert first.value.invoice.remaining_amount == Decimal("50.00")
        assert first.value.payment.amount == Decimal("60.00")

        second = await use_case.execute(invoice.id, payment("60.00"))
        assert second.error.code == "AMOUNT_EXCEEDS_BALANCE"
        assert len(store.payments) == 1

        third = await use_case.execute(invoice.id, payment("50.00"))
        assert third.value.invoice.status == InvoiceStatus.PAID
        assert third.value.invoice.is_paid is True
        assert third.value.invoice.paid_date == date(2024, 3, 10)
        assert len(third.value.invoice.payments) == 2

    async def test_mark_paid_requires_exact_balance(self, store, mock_uow):
        invoice = store.add_invoice()
        use_case = MarkInvoicePaid(mock_uow, store.invoice_repo, store.payment_repo)

        short = await use_case.execute(invoice.id, payment("100.00"))
        exact = await use_case.execute(invoice.id, payment("110.00"))

        assert short.error.code == "AMOUNT_MISMATCH"
        assert exact.value.invoice.status == InvoiceStatus.PAID

    async def test_mark_paid_twice_rejected(self, store, mock_uow):
        invoice = store.add_invoice()
        use_case = MarkInvoicePaid(mock_uow, store.invoice_repo, store.payment_repo)
        await use_case.execute(invoice.id, payment("110.00"))

        result = await use_case.execute(invoice.id, payment("110.00"))

        assert result.error.code == "INVOICE_ALREADY_PAID"

    async def test_payment_on_missing_invoice(self, store, mock_uow):
        result = await ApplyInvoicePayment(mock_uow, store.invoice_repo, store.payment_repo).execute(
            7, payment("1.00")
        )

        assert result.error.code == "INVOICE_NOT_FOUND"


@pytest.mark.asyncio
class TestInvoiceStatus:

    async def test_status_update_cannot_set_paid(self, store, mock_uow):
        invoice = store.add_invoice()
        use_case = UpdateInvoiceStatus(mock_uow, store.invoice_repo)

        result = await use_case.execute(invoice.id, UpdateInvoiceStatusCommandDTO(status="paid"))

        assert result.error.code == "INVALID_TRANSITION"
        store.invoice_repo.update.assert_not_called()

    async def test_draft_to_issued(self, store, mock_uow, mock_cache):
        invoice = store.add_invoice(status=InvoiceStatus.DRAFT)
        use_case = UpdateInvoiceStatus(mock_uow, store.invoice_repo, cache=mock_cache)

        result = await use_case.execute(
            invoice.id, UpdateInvoiceStatusCommandDTO(status="issued", updated_by="clerk")
        )

        assert result.value.status == InvoiceStatus.ISSUED
        assert result.value.updated_by == "clerk"
        mock_cache.invalidate.assert_awaited_once_with("invoice:1")

    async def test_same_status_is_noop(self, store, mock_uow, mock_cache):
        invoice = store.add_invoice()

        result = await MarkInvoiceSent(mock_uow, store.invoice_repo, cache=mock_cache).execute(invoice.id)

        assert result.value.status == InvoiceStatus.SENT
        store.invoice_repo.update.assert_not_called()
        mock_cache.invalidate.assert_not_called()

    async def test_paid_invoice_cannot_be_cancelled(self, store, mock_uow):
        invoice = store.add_invoice(status=InvoiceStatus.PAID, is_paid=True, paid_amount=Decimal("110.00"))

        result = await CancelInvoice(mock_uow, store.invoice_repo).execute(
            invoice.id, CancelInvoiceCommandDTO(reason="duplicate")
        )

        assert result.error.code == "INVOICE_ALREADY_PAID"
        assert invoice.status == InvoiceStatus.PAID

    async def test_zero_total_invoice_can_be_cancelled(self, store, mock_uow):
        invoice = store.add_invoice(total="0.00", is_paid=True)

        result = await CancelInvoice(mock_uow, store.invoice_repo).execute(
            invoice.id, CancelInvoiceCommandDTO(reason="raised by mistake")
        )

        assert result.value.status == InvoiceStatus.CANCELLED

    async def test_cancel_appends_reason(self, store, mock_uow):
        invoice = store.add_invoice(notes="Quarterly supply")

        result = await CancelInvoice(mock_uow, store.invoice_repo).execute(
            invoice.id, CancelInvoiceCommandDTO(reason="duplicate")
        )

        assert result.value.status == InvoiceStatus.CANCELLED
        assert result.value.notes == "Quarterly supply\nCANCELLATION: duplicate"

    async def test_delete_requires_draft(self, store, mock_uow):
        invoice = store.add_invoice(status=InvoiceStatus.SENT)

        result = await DeleteInvoice(mock_uow, store.invoice_repo).execute(invoice.id)

        assert result.error.code == "INVOICE_NOT_DRAFT"

    async def test_delete_draft_cancels_it(self, store, mock_uow):
        invoice = store.add_invoice(status=InvoiceStatus.DRAFT)

        result = await DeleteInvoice(mock_uow, store.invoice_repo).execute(invoice.id)

        assert result.value.status == InvoiceStatus.CANCELLED


@pytest.mark.asyncio
class TestInvoiceReporting:

    async def test_statistics(self, store):
        store.invoice_repo.aggregate = AsyncMock(
            return_value=InvoiceAggregates(
                invoice_count=4,
                total_paid=Decimal("100"),
                total_unpaid=Decimal("70.00"),
                total_overdue=Decimal("50.00"),
                average_payment_days=Decimal("10.0"),
            )
        )

        result = await GetInvoiceStatistics(store.invoice_repo).execute(as_of=date(2024, 3, 20))

        stats = result.value
        assert stats.total_paid == Decimal("100.00")
        assert stats.total_unpaid == Decimal("70.00")
        assert stats.total_overdue == Decimal("50.00")
        assert stats.average_payment_time == Decimal("10.00")
        assert stats.invoice_count == 4
        store.invoice_repo.aggregate.assert_awaited_once()
        assert store.invoice_repo.aggregate.await_args.args[1] == date(2024, 3, 20)
        store.invoice_repo.list.assert_not_called()

    async def test_statistics_without_paid_invoices(self, store):
        store.invoice_repo.aggregate = AsyncMock(return_value=InvoiceAggregates())

        result = await GetInvoiceStatistics(store.invoice_repo).execute()

        assert result.value.average_payment_time == Decimal("0.00")
        assert result.value.invoice_count == 0

    async def test_mark_overdue(self, store, mock_uow, mock_cache):
        late = store.add_invoice(status=InvoiceStatus.SENT, due_date=date(2024, 3, 5))
        store.add_invoice(status=InvoiceStatus.SENT, due_date=date(2024, 4, 5))
        store.add_invoice(status=InvoiceStatus.DRAFT, due_date=date(2024, 3, 5))
        store.add_invoice(status=InvoiceStatus.OVERDUE, due_date=date(2024, 3, 1))

        result = await MarkOverdueInvoices(mock_uow, store.invoice_repo, cache=mock_cache).execute(
            as_of=date(2024, 3, 20)
        )

        assert result.value.invoice_ids == [late.id]
        assert result.value.invoices_checked == 2
        assert late.status == InvoiceStatus.OVERDUE
        mock_cache.invalidate.assert_awaited_once_with(f"invoice:{late.id}")

    async def test_pdf_is_base64_encoded(self, store):
        invoice = store.add_invoice()
        store.add_item(invoice.id)
        pdf_service = MagicMock()
        pdf_service.generate_invoice = MagicMock(return_value=b"%PDF-1.4 test")
        use_case = GenerateInvoicePdf(
            store.invoice_repo, store.item_repo, store.payment_repo, pdf_service, company_name="Gas Co"
        )

        result = await use_case.execute(invoice.id)

        assert result.value.invoice_number == invoice.invoice_number
        assert base64.b64decode(result.value.pdf_base64) == b"%PDF-1.4 test"
        kwargs = pdf_service.generate_invoice.call_args.kwargs
        assert kwargs["company_name"] == "Gas Co"
        assert len(kwargs["items"]) == 1

    async def test_pdf_for_missing_invoice(self, store):
        use_case = GenerateInvoicePdf(store.invoice_repo, store.item_repo, store.payment_repo, MagicMock())

        result = await use_case.execute(99)

        assert result.error.code == "INVOICE_NOT_FOUND"
