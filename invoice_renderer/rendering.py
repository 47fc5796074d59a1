"""Invoice PDF rendering logic."""

from __future__ import annotations

import asyncio
import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Union

from .config import BRAND_DOMAIN
from .layout import (
    BLOCK_GAP,
    PAGE,
    Field,
    LayoutCursor,
    PageGeometry,
    draw_columns,
    draw_divider,
    draw_footer,
    draw_page_header,
)
from .errors import InvalidInvoiceError
from .models import Company, InvoiceDocument
from .payment import PAYMENT_TITLE, PaymentLayout, draw_payment_instructions
from .qr import QrEncoder, encode_qr
from .sink import DocumentSink, PdfSink
from .styles import LABEL, MUTED
from .table import TotalPlacement, build_rows, draw_rows, draw_total

logger = logging.getLogger(__name__)

INVOICE_TITLE = "Invoice"
SinkFactory = Callable[[InvoiceDocument], DocumentSink]


def pdf_sink_factory(document: InvoiceDocument) -> DocumentSink:
    return PdfSink(title=f"Invoice {document.invoice_number}".strip())


@dataclass(frozen=True)
class RenderReport:
    total: TotalPlacement
    payment_layout: PaymentLayout
    page_count: int


class InvoiceRenderer:
    """Draws one invoice into a private sink.

    Page one flows top-down from a cursor, except the total row which is
    pinned above the footer. Page two holds the payment instructions.
    """

    def __init__(
        self,
        document: InvoiceDocument,
        sink_factory: SinkFactory = pdf_sink_factory,
        qr_encoder: QrEncoder = encode_qr,
        page: PageGeometry = PAGE,
        domain: str = BRAND_DOMAIN,
    ) -> None:
        # Validation happens before the sink exists so nothing is drawn for bad input.
        self.document = document.validate()
        self.page = page
        self.domain = domain
        self.qr_encoder = qr_encoder
        self.sink = sink_factory(document)
        self.report: Optional[RenderReport] = None

    def _company(self) -> Company:
        if self.document.company is None:
            raise InvalidInvoiceError(["company details are required"])
        return self.document.company

    def _draw_company_block(self, cursor: LayoutCursor, company: Company) -> None:
        contact = tuple(line for line in (company.email, company.phone) if line)
        height = draw_columns(
            self.sink,
            self.page,
            cursor.y,
            [
                Field(company.legal_name, company.address),
                Field("Contact", contact),
            ],
        )
        cursor.advance(height + BLOCK_GAP)

    def _draw_details_row(self, cursor: LayoutCursor) -> None:
        client = self.document.client
        to_lines = (client.name, *client.address, client.email)
        height = draw_columns(
            self.sink,
            self.page,
            cursor.y,
            [
                Field("Invoice no.", (self.document.invoice_number,)),
                Field("To", to_lines),
                Field("Issue Date", (self.document.date,)),
                Field("Due Date", (self.document.due_date,)),
            ],
        )
        cursor.advance(height + BLOCK_GAP)

    def _draw_divider(self, cursor: LayoutCursor) -> None:
        draw_divider(self.sink, self.page, cursor.y)
        cursor.advance(BLOCK_GAP)

    def _draw_page_one(self) -> TotalPlacement:
        self.sink.add_page()
        cursor = LayoutCursor(self.page.padding_y)
        draw_page_header(self.sink, self.page, cursor, INVOICE_TITLE, self.domain, LABEL)
        self._draw_company_block(cursor, self._company())
        self._draw_divider(cursor)
        self._draw_details_row(cursor)
        self._draw_divider(cursor)

        placements = draw_rows(
            self.sink, self.page, cursor, build_rows(self.document), self.document.currency
        )
        rows_end_y = placements[-1].divider_y if placements else cursor.y
        total = draw_total(
            self.sink, self.page, self.document.total_cents, self.document.currency, rows_end_y
        )
        draw_footer(self.sink, self.page, 1, self.domain)
        return total

    def _draw_page_two(self) -> PaymentLayout:
        self.sink.add_page()
        cursor = LayoutCursor(self.page.padding_y)
        draw_page_header(self.sink, self.page, cursor, PAYMENT_TITLE, self.domain, MUTED)
        self._draw_divider(cursor)
        layout = draw_payment_instructions(
            self.sink, self.page, cursor, self.document, self.qr_encoder
        )
        draw_footer(self.sink, self.page, 2, self.domain)
        return layout

    def render(self) -> bytes:
        logger.debug("Rendering invoice %s", self.document.invoice_number)
        total = self._draw_page_one()
        layout = self._draw_page_two()
        self.report = RenderReport(total, layout, self.sink.page_count)
        pdf_bytes = self.sink.finalize()
        logger.debug(
            "Rendered invoice %s (%d bytes, %s)",
            self.document.invoice_number,
            len(pdf_bytes),
            layout.value,
        )
        return pdf_bytes


def as_document(data: Union[InvoiceDocument, Mapping[str, Any]]) -> InvoiceDocument:
    if isinstance(data, InvoiceDocument):
        return data
    return InvoiceDocument.from_payload(data)


def render_invoice(data: Union[InvoiceDocument, Mapping[str, Any]], **options: Any) -> bytes:
    return InvoiceRenderer(as_document(data), **options).render()


async def render_invoice_async(
    data: Union[InvoiceDocument, Mapping[str, Any]], **options: Any
) -> bytes:
    """Render in the default executor; resolves once the whole buffer is ready."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(render_invoice, data, **options))
