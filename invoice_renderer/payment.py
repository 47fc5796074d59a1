"""Page-two payment instructions: bank transfer, crypto, or both."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from .errors import QrEncodingError
from .layout import (
    ROW_GAP,
    Field,
    LayoutCursor,
    PageGeometry,
    draw_columns,
    draw_divider,
    draw_wrapped,
    measure,
)
from .models import BankDetails, CryptoDetails, InvoiceDocument
from .qr import QrEncoder
from .sink import DocumentSink
from .styles import LABEL, MUTED

logger = logging.getLogger(__name__)

PAYMENT_TITLE = "Payment Instructions"
BANK_HEADING = "Bank Transfer"
CRYPTO_HEADING = "Crypto Transfer"
SEPARATOR_TEXT = "OR"
QR_SIZE = 80.0
SEPARATOR_PADDING = 12.0
SECTION_GAP = 24.0


class PaymentLayout(enum.Enum):
    NONE = "none"
    BANK_ONLY = "bank_only"
    CRYPTO_ONLY = "crypto_only"
    BANK_AND_CRYPTO = "bank_and_crypto"

    @classmethod
    def select(
        cls,
        bank: Optional[BankDetails],
        crypto: Optional[CryptoDetails],
    ) -> "PaymentLayout":
        if bank is not None and crypto is not None:
            return cls.BANK_AND_CRYPTO
        if bank is not None:
            return cls.BANK_ONLY
        if crypto is not None:
            return cls.CRYPTO_ONLY
        return cls.NONE


SECTIONS: Dict[PaymentLayout, Tuple[str, ...]] = {
    PaymentLayout.NONE: (),
    PaymentLayout.BANK_ONLY: ("bank",),
    PaymentLayout.CRYPTO_ONLY: ("crypto",),
    PaymentLayout.BANK_AND_CRYPTO: ("bank", "separator", "crypto"),
}


@dataclass(frozen=True)
class CryptoPlacement:
    y: float
    height: float
    qr_drawn: bool


class PaymentComposer:
    """Draws the sections chosen by PaymentLayout below the page-two title."""

    def __init__(
        self,
        sink: DocumentSink,
        page: PageGeometry,
        document: InvoiceDocument,
        qr_encoder: QrEncoder,
    ) -> None:
        self.sink = sink
        self.page = page
        self.document = document
        self.qr_encoder = qr_encoder
        # Inputs are immutable, so the layout is decided once.
        self.layout = PaymentLayout.select(document.bank_details, document.crypto_details)
        self.crypto: Optional[CryptoPlacement] = None

    def draw(self, cursor: LayoutCursor) -> PaymentLayout:
        steps: Dict[str, Callable[[LayoutCursor], None]] = {
            "bank": self._draw_bank,
            "separator": self._draw_separator,
            "crypto": self._draw_crypto,
        }
        for section in SECTIONS[self.layout]:
            steps[section](cursor)
        return self.layout

    def _draw_heading(self, cursor: LayoutCursor, heading: str) -> None:
        height = draw_wrapped(
            self.sink, heading, self.page.padding_x, cursor.y, self.page.content_width, LABEL
        )
        cursor.advance(height + ROW_GAP)

    def _draw_bank(self, cursor: LayoutCursor) -> None:
        bank = self.document.bank_details
        if bank is None:
            return
        self._draw_heading(cursor, BANK_HEADING)
        height = draw_columns(
            self.sink,
            self.page,
            cursor.y,
            [
                Field("Bank Name", (bank.bank_name,)),
                Field("IBAN", (bank.iban,)),
                Field("SWIFT/BIC", (bank.swift_code,)),
                Field("Bank Address", bank.bank_address),
            ],
        )
        cursor.advance(height + SECTION_GAP)

    def _draw_separator(self, cursor: LayoutCursor) -> None:
        """Two rules with a centred "OR" between them."""
        page = self.page
        text_height = measure(self.sink, SEPARATOR_TEXT, page.content_width, MUTED)
        text_width = page.column_width() / 4
        center = page.padding_x + page.content_width / 2
        left_end = center - text_width / 2
        right_start = center + text_width / 2
        rule_y = cursor.y + text_height / 2

        draw_divider(self.sink, page, rule_y, page.padding_x, left_end - SEPARATOR_PADDING)
        self.sink.draw_text(SEPARATOR_TEXT, left_end, cursor.y, MUTED, text_width, align="C")
        draw_divider(
            self.sink, page, rule_y, right_start + SEPARATOR_PADDING, page.padding_x + page.content_width
        )
        cursor.advance(text_height + SECTION_GAP)

    def _encode_qr(self, address: str) -> Optional[bytes]:
        try:
            return self.qr_encoder(address)
        except QrEncodingError as exc:
            logger.warning(
                "QR code for invoice %s skipped: %s", self.document.invoice_number, exc
            )
            return None

    def _draw_crypto(self, cursor: LayoutCursor) -> None:
        crypto = self.document.crypto_details
        if crypto is None:
            return
        self._draw_heading(cursor, CRYPTO_HEADING)
        start = cursor.y
        text_height = draw_columns(
            self.sink,
            self.page,
            start,
            [
                Field("Network", (crypto.network,)),
                Field("Wallet Address", (crypto.address,), span=2),
            ],
        )

        image = self._encode_qr(crypto.address)
        if image is not None:
            self.sink.draw_image(image, self.page.column_x(3), start, QR_SIZE, QR_SIZE)

        # The QR area is reserved even when encoding failed.
        height = max(text_height, QR_SIZE)
        self.crypto = CryptoPlacement(y=start, height=height, qr_drawn=image is not None)
        cursor.advance(height + SECTION_GAP)


def draw_payment_instructions(
    sink: DocumentSink,
    page: PageGeometry,
    cursor: LayoutCursor,
    document: InvoiceDocument,
    qr_encoder: QrEncoder,
) -> PaymentLayout:
    return PaymentComposer(sink, page, document, qr_encoder).draw(cursor)

