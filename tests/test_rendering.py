import asyncio
import re
import unittest
from decimal import Decimal
from importlib import util as importlib_util
from unittest import mock

from invoice_renderer.errors import InvalidInvoiceError, MeasurementError
from invoice_renderer.models import BankDetails, CryptoDetails, LineItem
from invoice_renderer.payment import PAYMENT_TITLE, PaymentLayout
from invoice_renderer.rendering import InvoiceRenderer, render_invoice
from invoice_renderer.styles import LABEL, MUTED, TITLE

from tests.fakes import RecordingSink, fake_qr, sample_document

PDF_STACK_AVAILABLE = all(
    importlib_util.find_spec(name) is not None for name in ("fpdf", "qrcode", "PIL")
)
DOMAIN = "example.test"

BANK = BankDetails("First Test Bank", "GB00TEST00000000000000", "TESTGB2L", ("1 Bank Rd", "London"))
CRYPTO = CryptoDetails("Ethereum", "0x52908400098527886E0F7030069857D2E4169EE7")


def render_recorded(document, **options):
    sink = RecordingSink()
    renderer = InvoiceRenderer(
        document, sink_factory=lambda _: sink, qr_encoder=fake_qr, domain=DOMAIN, **options
    )
    output = renderer.render()
    return renderer, sink, output


class InvoiceLayoutTests(unittest.TestCase):
    def test_single_item_invoice(self) -> None:
        renderer, sink, _ = render_recorded(sample_document())

        self.assertEqual(sink.page_count, 2)
        self.assertEqual(renderer.report.page_count, 2)
        totals = [command for command in sink.on_page(1, "text") if command.text == "$5,000.00"]
        self.assertEqual(len(totals), 2)
        self.assertEqual(totals[-1].style, TITLE)
        self.assertAlmostEqual(totals[-1].y, renderer.report.total.y)
        self.assertEqual(sink.find_text("1 of 2").page, 1)
        self.assertEqual(sink.find_text("2 of 2").page, 2)

    def test_page_one_blocks_flow_top_down(self) -> None:
        _, sink, _ = render_recorded(sample_document())

        order = ["Invoice", "Outpace Studios Ltd", "Invoice no.", "Description", "Design retainer", "Total"]
        ys = [sink.find_text(text, page=1).y for text in order]
        self.assertEqual(ys, sorted(ys))
        self.assertEqual(sink.find_text("Contact").y, sink.find_text("Outpace Studios Ltd").y)
        self.assertIn("+44 20 0000 0000", sink.texts(1))
        self.assertIn("billing@northwind.test", sink.texts(1))
        self.assertEqual(sink.find_text("Mar 28, 2025").page, 1)

    def test_header_domain_is_stronger_on_page_one(self) -> None:
        _, sink, _ = render_recorded(sample_document())

        self.assertEqual(sink.find_text(DOMAIN, page=1).style, LABEL)
        self.assertEqual(sink.find_text(DOMAIN, page=2).style, MUTED)
        self.assertEqual(len(sink.on_page(1, "path")), 2)
        self.assertEqual(len(sink.on_page(2, "path")), 2)

    def test_page_two_without_payment_details(self) -> None:
        renderer, sink, _ = render_recorded(sample_document())

        self.assertIs(renderer.report.payment_layout, PaymentLayout.NONE)
        self.assertEqual(sink.texts(2), [DOMAIN, PAYMENT_TITLE, DOMAIN, "2 of 2"])
        self.assertEqual(sink.on_page(2, "image"), [])

    def test_page_two_with_both_payment_methods(self) -> None:
        renderer, sink, _ = render_recorded(
            sample_document(bank_details=BANK, crypto_details=CRYPTO)
        )

        self.assertIs(renderer.report.payment_layout, PaymentLayout.BANK_AND_CRYPTO)
        self.assertEqual(sink.texts(2).count("OR"), 1)
        self.assertEqual(len(sink.on_page(2, "image")), 1)
        self.assertNotIn("Bank Transfer", sink.texts(1))

    def test_fee_row_follows_line_items(self) -> None:
        document = sample_document(
            line_items=(
                LineItem("Sprint 12", 1, 100000, "Mar 1 - Mar 14"),
                LineItem("Sprint 13", 1, 100000, "Mar 15 - Mar 28"),
                LineItem("Hosting", 1, 50000, "March"),
            ),
            total_cents=261000,
            processing_fee_percent=Decimal("4.4"),
        )

        renderer, sink, _ = render_recorded(document)

        table_rules = [line for line in sink.on_page(1, "line") if line.x == 421.0]
        # header, four rows and the total
        self.assertEqual(len(table_rules), 6)
        fee = sink.find_text("Processing fee (4.4%)")
        self.assertGreater(fee.y, sink.find_text("Hosting").y)
        self.assertEqual(sink.find_text("$110.00").y, fee.y)
        self.assertIn("$2,610.00", sink.texts(1))
        self.assertFalse(renderer.report.total.overflow)

    def test_identical_input_gives_identical_output(self) -> None:
        document = sample_document(bank_details=BANK, crypto_details=CRYPTO)
        _, _, first = render_recorded(document)
        _, _, second = render_recorded(document)
        self.assertEqual(first, second)


class RenderFailureTests(unittest.TestCase):
    def test_invalid_document_fails_before_any_drawing(self) -> None:
        factory = mock.Mock(return_value=RecordingSink())

        with self.assertRaises(InvalidInvoiceError) as ctx:
            InvoiceRenderer(sample_document(line_items=()), sink_factory=factory)

        factory.assert_not_called()
        self.assertIn("at least one line item is required", str(ctx.exception))

    def test_invalid_payload_mapping_is_rejected(self) -> None:
        factory = mock.Mock()
        with self.assertRaises(InvalidInvoiceError):
            render_invoice({"invoiceNumber": "X"}, sink_factory=factory)
        factory.assert_not_called()

    def test_company_is_rechecked_when_drawing(self) -> None:
        from dataclasses import replace

        sink = RecordingSink()
        renderer = InvoiceRenderer(sample_document(), sink_factory=lambda _: sink, qr_encoder=fake_qr)
        renderer.document = replace(renderer.document, company=None)

        with self.assertRaises(InvalidInvoiceError):
            renderer.render()
        self.assertFalse(sink.finalized)

    def test_measurement_errors_propagate(self) -> None:
        sink = RecordingSink(fail_measure=True)
        renderer = InvoiceRenderer(sample_document(), sink_factory=lambda _: sink, qr_encoder=fake_qr)

        with self.assertRaises(MeasurementError):
            renderer.render()
        self.assertFalse(sink.finalized)


def count_pages(pdf: bytes) -> int:
    return len(re.findall(rb"/Type\s*/Page\b", pdf))


@unittest.skipUnless(PDF_STACK_AVAILABLE, "fpdf2, qrcode or Pillow is not installed")
class PdfOutputTests(unittest.TestCase):
    document = sample_document(
        bank_details=BANK,
        crypto_details=CRYPTO,
        processing_fee_cents=11000,
        processing_fee_percent=Decimal("4.4"),
        total_cents=511000,
    )

    def test_render_returns_two_page_pdf(self) -> None:
        pdf = render_invoice(self.document)

        self.assertIsInstance(pdf, bytes)
        self.assertTrue(pdf.startswith(b"%PDF"))
        self.assertEqual(count_pages(pdf), 2)

    def test_render_accepts_payload_mapping(self) -> None:
        pdf = render_invoice(
            {
                "invoiceNumber": "INV-001",
                "date": "2026-01-15",
                "dueDate": "2026-01-29",
                "clientName": "Client LLC",
                "clientEmail": "ap@client.test",
                "lineItems": [{"description": "Consulting", "quantity": 2, "unitAmountCents": 15000}],
                "totalCents": 30000,
                "currency": "eur",
                "company": {"legalName": "ACME Inc.", "email": "hi@acme.test", "address": []},
            }
        )
        self.assertEqual(count_pages(pdf), 2)

    def test_output_is_byte_identical_across_renders(self) -> None:
        self.assertEqual(render_invoice(self.document), render_invoice(self.document))

    def test_async_render_matches_sync_render(self) -> None:
        from invoice_renderer.rendering import render_invoice_async

        pdf = asyncio.run(render_invoice_async(self.document))
        self.assertEqual(pdf, render_invoice(self.document))


if __name__ == "__main__":
    unittest.main()
