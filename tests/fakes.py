"""Test doubles for the document sink and QR encoder."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional

from invoice_renderer.brand import VectorPath
from invoice_renderer.errors import QrEncodingError
from invoice_renderer.styles import TextStyle

# Average glyph width as a fraction of the font size.
CHAR_WIDTH_RATIO = 0.5


@dataclass(frozen=True)
class Command:
    kind: str
    page: int
    text: str = ""
    x: float = 0.0
    y: float = 0.0
    x2: float = 0.0
    y2: float = 0.0
    width: float = 0.0
    height: float = 0.0
    style: Optional[TextStyle] = None
    align: str = "L"


class RecordingSink:
    """Records draw calls and measures text with a fixed glyph width."""

    def __init__(self, fail_measure: bool = False) -> None:
        self.commands: List[Command] = []
        self.pages = 0
        self.finalized = False
        self.fail_measure = fail_measure

    @property
    def page_count(self) -> int:
        return self.pages

    def _record(self, kind: str, **fields) -> None:
        if self.finalized:
            raise AssertionError("draw call after finalize")
        if self.pages == 0:
            raise AssertionError(f"{kind} before the first page")
        self.commands.append(Command(kind, self.pages, **fields))

    def measure_text_height(self, text: str, width: float, style: TextStyle) -> float:
        if self.fail_measure:
            from invoice_renderer.errors import MeasurementError

            raise MeasurementError("measurement backend unavailable")
        per_line = max(1, int(width // (style.size * CHAR_WIDTH_RATIO)))
        lines = sum(max(1, math.ceil(len(part) / per_line)) for part in text.split("\n"))
        return lines * style.line_height

    def draw_text(self, text, x, y, style, width, align="L") -> None:
        self._record("text", text=text, x=x, y=y, style=style, width=width, align=align)

    def draw_line(self, x1, y1, x2, y2, opacity=0.06) -> None:
        self._record("line", x=x1, y=y1, x2=x2, y2=y2)

    def draw_image(self, data, x, y, width, height) -> None:
        self._record("image", text=f"{len(data)} bytes", x=x, y=y, width=width, height=height)

    def draw_path(self, path: VectorPath, x, y) -> None:
        self._record("path", text=path.name, x=x, y=y)

    def add_page(self) -> None:
        self.pages += 1

    def finalize(self) -> bytes:
        self.finalized = True
        return "\n".join(repr(command) for command in self.commands).encode("utf-8")

    # -- query helpers -----------------------------------------------------

    def on_page(self, page: int, kind: Optional[str] = None) -> List[Command]:
        return [
            command
            for command in self.commands
            if command.page == page and (kind is None or command.kind == kind)
        ]

    def texts(self, page: Optional[int] = None) -> List[str]:
        return [
            command.text
            for command in self.commands
            if command.kind == "text" and (page is None or command.page == page)
        ]

    def find_text(self, text: str, page: Optional[int] = None) -> Command:
        for command in self.commands:
            if command.kind == "text" and command.text == text:
                if page is None or command.page == page:
                    return command
        raise AssertionError(f"text {text!r} was not drawn")


def fake_qr(payload: str) -> bytes:
    return b"PNG:" + payload.encode("utf-8")


def failing_qr(payload: str) -> bytes:
    raise QrEncodingError("encoder offline")


def sample_document(**overrides):
    from dataclasses import replace

    from invoice_renderer.models import Client, Company, InvoiceDocument, LineItem

    document = InvoiceDocument(
        invoice_number="OUT-0042",
        date="Mar 14, 2025",
        due_date="Mar 28, 2025",
        client=Client(
            name="Northwind Labs",
            email="billing@northwind.test",
            address=("12 Harbour St", "Bristol BS1 4XY"),
        ),
        line_items=(LineItem("Design retainer", 1, 500000),),
        total_cents=500000,
        currency="usd",
        company=Company(
            legal_name="Outpace Studios Ltd",
            address=("1 Market Sq", "London EC1 1AA"),
            email="hello@outpace.test",
            phone="+44 20 0000 0000",
        ),
    )
    return replace(document, **overrides)
