"""Drawing surface the layout engine renders into."""

from __future__ import annotations

import io
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Protocol, Type

from fpdf import FPDF
from fpdf.enums import MethodReturnValue, PathPaintRule, XPos, YPos

from .brand import VectorPath
from .errors import DrawPrimitiveError, InvoiceRenderError, MeasurementError
from .fonts import FontManager
from .styles import BLACK, DIVIDER_OPACITY, DIVIDER_WIDTH, TextStyle

PAGE_SIZE = (842.0, 595.0)

# Fixed so that identical invoices produce identical bytes.
DOCUMENT_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)

FAKE_BOLD_OFFSET = 0.4


class DocumentSink(Protocol):
    def measure_text_height(self, text: str, width: float, style: TextStyle) -> float:
        ...

    def draw_text(
        self,
        text: str,
        x: float,
        y: float,
        style: TextStyle,
        width: float,
        align: str = "L",
    ) -> None:
        ...

    def draw_line(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        opacity: float = DIVIDER_OPACITY,
    ) -> None:
        ...

    def draw_image(self, data: bytes, x: float, y: float, width: float, height: float) -> None:
        ...

    def draw_path(self, path: VectorPath, x: float, y: float) -> None:
        ...

    def add_page(self) -> None:
        ...

    def finalize(self) -> bytes:
        ...

    @property
    def page_count(self) -> int:
        ...


class PdfSink:
    """fpdf2-backed sink. One instance per render, never shared."""

    def __init__(
        self,
        title: str = "",
        page_size: tuple = PAGE_SIZE,
        creation_date: datetime = DOCUMENT_EPOCH,
    ) -> None:
        self.pdf = FPDF(unit="pt", format=page_size)
        self.pdf.set_auto_page_break(False)
        self.pdf.set_margins(0, 0, 0)
        self.pdf.c_margin = 0
        self.pdf.set_creation_date(creation_date)
        if title:
            self.pdf.set_title(title)
        self.fonts = FontManager(self.pdf)
        self._finalized = False

    @contextmanager
    def _guard(self, error_cls: Type[InvoiceRenderError], action: str) -> Iterator[None]:
        if self._finalized:
            raise DrawPrimitiveError(f"Cannot {action}: document already finalized")
        try:
            yield
        except InvoiceRenderError:
            raise
        except Exception as exc:
            raise error_cls(f"Failed to {action}: {exc}") from exc

    @property
    def page_count(self) -> int:
        return self.pdf.pages_count

    def measure_text_height(self, text: str, width: float, style: TextStyle) -> float:
        if not text:
            return 0.0
        with self._guard(MeasurementError, "measure text"):
            self.fonts.apply(style)
            height = self.pdf.multi_cell(
                width,
                style.line_height,
                self.fonts.encode(text),
                align="L",
                dry_run=True,
                output=MethodReturnValue.HEIGHT,
            )
        return float(height)

    def draw_text(
        self,
        text: str,
        x: float,
        y: float,
        style: TextStyle,
        width: float,
        align: str = "L",
    ) -> None:
        if not text:
            return
        with self._guard(DrawPrimitiveError, "draw text"):
            offsets = (0.0, FAKE_BOLD_OFFSET) if self.fonts.fake_bold(style) else (0.0,)
            with self.pdf.local_context(fill_opacity=style.opacity):
                self.fonts.apply(style)
                self.pdf.set_text_color(*style.color)
                for offset in offsets:
                    self.pdf.set_xy(x + offset, y)
                    self.pdf.multi_cell(
                        width,
                        style.line_height,
                        self.fonts.encode(text),
                        align=align,
                        new_x=XPos.LEFT,
                        new_y=YPos.NEXT,
                    )

    def draw_line(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        opacity: float = DIVIDER_OPACITY,
    ) -> None:
        with self._guard(DrawPrimitiveError, "draw line"):
            with self.pdf.local_context(stroke_opacity=opacity):
                self.pdf.set_draw_color(*BLACK)
                self.pdf.set_line_width(DIVIDER_WIDTH)
                self.pdf.line(x1, y1, x2, y2)

    def draw_image(self, data: bytes, x: float, y: float, width: float, height: float) -> None:
        with self._guard(DrawPrimitiveError, "draw image"):
            self.pdf.image(io.BytesIO(data), x=x, y=y, w=width, h=height)

    def draw_path(self, path: VectorPath, x: float, y: float) -> None:
        rule = PathPaintRule.FILL_EVENODD if path.even_odd else PathPaintRule.FILL_NONZERO
        with self._guard(DrawPrimitiveError, f"draw path {path.name}"):
            with self.pdf.new_path(x, y, paint_rule=rule) as shape:
                shape.style.fill_color = path.fill_color
                for command in path.translated(x, y):
                    op = command[0]
                    if op == "M":
                        shape.move_to(*command[1:])
                    elif op == "L":
                        shape.line_to(*command[1:])
                    elif op == "C":
                        shape.curve_to(*command[1:])
                    elif op == "Z":
                        shape.close()
                    else:
                        raise ValueError(f"Unknown path command {op!r} in {path.name}")

    def add_page(self) -> None:
        with self._guard(DrawPrimitiveError, "add page"):
            self.pdf.add_page()

    def finalize(self) -> bytes:
        with self._guard(DrawPrimitiveError, "finalize document"):
            pdf_blob = self.pdf.output()
        self._finalized = True
        if isinstance(pdf_blob, (bytes, bytearray)):
            return bytes(pdf_blob)
        raise DrawPrimitiveError(f"Unexpected PDF output type: {type(pdf_blob).__name__}")
