"""ReportLab PDF Generation Service Implementation

Implements PDF generation using ReportLab library.
"""

from io import BytesIO
from typing import List

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import (
    SimpleDocTemplate,
    Table,
    TableStyle,
    Paragraph,
    Spacer,
)

from src.app.services.pdf_service import PdfService
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_item import InvoiceItem
from src.domain.invoice_payment import InvoicePayment

HEADER_COLOR = colors.HexColor("#1F3A5F")
MUTED_COLOR = colors.HexColor("#7F8C8D")
GRID_COLOR = colors.HexColor("#BDC3C7")

COLUMN_WIDTHS = [70 * mm, 20 * mm, 25 * mm, 20 * mm, 35 * mm]


def _qty(value) -> str:
    return f"{value:,.3f}".rstrip("0").rstrip(".")


class ReportLabPdfService(PdfService):
    """
    ReportLab implementation of PdfService

    Renders the invoice header, items, totals and payment history on A4.
    """

    def generate_invoice(
        self,
        invoice: Invoice,
        items: List[InvoiceItem],
        payments: List[InvoicePayment],
        company_name: str,
        company_address: str,
    ) -> bytes:
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=20 * mm,
            leftMargin=20 * mm,
            topMargin=20 * mm,
            bottomMargin=20 * mm,
            title=invoice.invoice_number,
        )

        styles = getSampleStyleSheet()
        title_style = ParagraphStyle(
            "TitleStyle",
            parent=styles["Heading1"],
            fontSize=22,
            spaceAfter=8,
            textColor=HEADER_COLOR,
        )
        label_style = ParagraphStyle(
            "LabelStyle",
            parent=styles["Heading2"],
            fontSize=14,
            textColor=colors.HexColor("#C0392B"),
            spaceAfter=16,
        )
        muted_style = ParagraphStyle(
            "MutedStyle",
            parent=styles["Normal"],
            fontSize=10,
            textColor=MUTED_COLOR,
        )
        normal_style = ParagraphStyle("NormalStyle", parent=styles["Normal"], fontSize=10)
        bold_style = ParagraphStyle(
            "BoldStyle",
            parent=styles["Normal"],
            fontSize=10,
            fontName="Helvetica-Bold",
        )

        currency = invoice.currency
        elements = [
            Paragraph(company_name, title_style),
            Paragraph(company_address, muted_style),
            Spacer(1, 8 * mm),
            Paragraph(self._label(invoice), label_style),
        ]

        # Invoice details
        info = [
            ["Invoice Number:", invoice.invoice_number],
            ["Status:", invoice.status.value.replace("_", " ").upper()],
            ["Issue Date:", invoice.issue_date.strftime("%Y-%m-%d")],
            ["Due Date:", invoice.due_date.strftime("%Y-%m-%d")],
            ["Payment Terms:", invoice.payment_terms],
            ["Currency:", currency],
        ]
        if invoice.paid_date:
            info.append(["Paid On:", invoice.paid_date.strftime("%Y-%m-%d")])

        info_table = Table(info, colWidths=[40 * mm, 100 * mm])
        info_table.setStyle(
            TableStyle(
                [
                    ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, -1), 10),
                    ("TEXTCOLOR", (0, 0), (0, -1), MUTED_COLOR),
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
                ]
            )
        )
        elements.append(info_table)
        elements.append(Spacer(1, 8 * mm))

        elements.append(Paragraph("Bill To:", bold_style))
        elements.append(Paragraph(invoice.customer_name or f"Customer #{invoice.customer_id}", normal_style))
        elements.append(Spacer(1, 8 * mm))

        # Items
        rows = [["Item", "Qty", "Unit Price", "Tax %", "Total"]]
        for item in items:
            name = item.product_name
            if item.description:
                name = f"{name}<br/><font size=8 color='#7F8C8D'>{item.description}</font>"
            rows.append(
                [
                    Paragraph(name, normal_style),
                    f"{_qty(item.quantity)} {item.unit_of_measurement}",
                    f"{item.unit_price:,.2f}",
                    f"{item.tax_rate:,.2f}",
                    f"{currency} {item.total:,.2f}",
                ]
            )
        if not items:
            rows.append(["No items", "", "", "", f"{currency} 0.00"])

        items_table = Table(rows, colWidths=COLUMN_WIDTHS)
        items_table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), HEADER_COLOR),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("ALIGN", (0, 0), (-1, 0), "CENTER"),
                    ("FONTSIZE", (0, 1), (-1, -1), 9),
                    ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
                    ("GRID", (0, 0), (-1, -1), 0.5, GRID_COLOR),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
                    ("TOPPADDING", (0, 0), (-1, -1), 6),
                    ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#F8F9F9")]),
                ]
            )
        )
        elements.append(items_table)
        elements.append(Spacer(1, 4 * mm))

        # Totals
        totals = [
            ["", "", "", "Subtotal:", f"{currency} {invoice.subtotal:,.2f}"],
            ["", "", "", "Tax:", f"{currency} {invoice.tax_amount:,.2f}"],
        ]
        if invoice.discount_amount:
            totals.append(["", "", "", "Discount:", f"-{currency} {invoice.discount_amount:,.2f}"])
        totals.append(["", "", "", "Total:", f"{currency} {invoice.total_amount:,.2f}"])
        totals.append(["", "", "", "Paid:", f"{currency} {invoice.paid_amount:,.2f}"])
        totals.append(["", "", "", "Balance Due:", f"{currency} {invoice.remaining_amount():,.2f}"])

        totals_table = Table(totals, colWidths=COLUMN_WIDTHS)
        totals_table.setStyle(
            TableStyle(
                [
                    ("FONTNAME", (3, 0), (-1, -1), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, -1), 10),
                    ("ALIGN", (3, 0), (-1, -1), "RIGHT"),
                    ("LINEABOVE", (3, -3), (-1, -3), 1.5, HEADER_COLOR),
                    ("TOPPADDING", (0, 0), (-1, -1), 4),
                ]
            )
        )
        elements.append(totals_table)

        # Payment history
        if payments:
            elements.append(Spacer(1, 8 * mm))
            elements.append(Paragraph("Payments", bold_style))
            payment_rows = [["Date", "Method", "Reference", "Amount"]]
            for payment in payments:
                payment_rows.append(
                    [
                        payment.payment_date.strftime("%Y-%m-%d"),
                        payment.payment_method.value.replace("_", " "),
                        payment.reference or "",
                        f"{currency} {payment.amount:,.2f}",
                    ]
                )
            payments_table = Table(payment_rows, colWidths=[30 * mm, 40 * mm, 65 * mm, 35 * mm])
            payments_table.setStyle(
                TableStyle(
                    [
                        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                        ("FONTSIZE", (0, 0), (-1, -1), 9),
                        ("ALIGN", (-1, 0), (-1, -1), "RIGHT"),
                        ("LINEBELOW", (0, 0), (-1, 0), 0.5, GRID_COLOR),
                    ]
                )
            )
            elements.append(payments_table)

        if invoice.notes:
            elements.append(Spacer(1, 8 * mm))
            elements.append(Paragraph("Notes", bold_style))
            elements.append(Paragraph(invoice.notes.replace("\n", "<br/>"), muted_style))

        doc.build(elements)
        pdf_bytes = buffer.getvalue()
        buffer.close()

        return pdf_bytes

    @staticmethod
    def _label(invoice: Invoice) -> str:
        if invoice.status == InvoiceStatus.DRAFT:
            return "DRAFT INVOICE"
        if invoice.status in (InvoiceStatus.CANCELLED, InvoiceStatus.VOID):
            return f"INVOICE ({invoice.status.value.upper()})"
        return "INVOICE"
