"""GenerateInvoicePdf Use Case

Renders an invoice, its items and payments to PDF.
"""

import base64
import logging
from libs.result import Result, Return
from src.app.repositories.invoice_item_repository import InvoiceItemRepository
from src.app.repositories.invoice_payment_repository import InvoicePaymentRepository
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.services.pdf_service import PdfService
from src.app.use_cases.shared import unexpected
from src.domain.base import utcnow
from src.domain.errors import NotFoundError
from .dtos import InvoicePdfDTO

logger = logging.getLogger(__name__)


class GenerateInvoicePdf:
    """
    Use Case: Generate an invoice PDF

    Flow:
    1. Get invoice by ID
    2. Get items and payments
    3. Render PDF
    4. Return base64-encoded PDF
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        item_repo: InvoiceItemRepository,
        payment_repo: InvoicePaymentRepository,
        pdf_service: PdfService,
        company_name: str = "",
        company_address: str = "",
    ):
        self.invoice_repo = invoice_repo
        self.item_repo = item_repo
        self.payment_repo = payment_repo
        self.pdf_service = pdf_service
        self.company_name = company_name
        self.company_address = company_address

    async def execute(self, invoice_id: int) -> Result[InvoicePdfDTO]:
        try:
            # Step 1: Get invoice
            invoice = await self.invoice_repo.get_by_id(invoice_id)
            if not invoice:
                return Return.err(
                    NotFoundError(
                        f"Invoice with ID {invoice_id} not found",
                        code="INVOICE_NOT_FOUND",
                        invoice_id=invoice_id,
                    ).to_error()
                )

            # Step 2: Get items and payments
            items = await self.item_repo.get_by_invoice_id(invoice_id)
            payments = await self.payment_repo.get_by_invoice_id(invoice_id)

            # Step 3: Render PDF
            pdf_bytes = self.pdf_service.generate_invoice(
                invoice=invoice,
                items=items,
                payments=payments,
                company_name=self.company_name,
                company_address=self.company_address,
            )
            logger.debug(f"Rendered {len(pdf_bytes)} byte PDF for invoice {invoice.invoice_number}")

            # Step 4: Return base64-encoded PDF
            return Return.ok(
                InvoicePdfDTO(
                    invoice_id=invoice.id,
                    invoice_number=invoice.invoice_number,
                    pdf_base64=base64.b64encode(pdf_bytes).decode("utf-8"),
                    generated_at=utcnow(),
                )
            )
        except Exception as e:
            return unexpected(e, "generate invoice PDF", invoice_id=invoice_id)
