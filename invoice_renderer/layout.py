"""Page geometry, the layout cursor and the measure-then-draw primitives.

Everything here takes the sink explicitly. Text is always measured at its
target width right before it is drawn and the caller advances its cursor by
the measured height, so wrapped text pushes later blocks down.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .brand import BRAND_MARK, BRAND_MARK_SIZE
from .sink import PAGE_SIZE, DocumentSink
from .styles import LABEL, MUTED, TITLE, VALUE, TextStyle

LABEL_GAP = 8.0
COLUMN_GUTTER = 12.0
HEADER_GAP = 10.0
TITLE_GAP = 12.0
BLOCK_GAP = 16.0
ROW_GAP = 10.0
PAGE_TOTAL = 2


@dataclass(frozen=True)
class PageGeometry:
    width: float = PAGE_SIZE[0]
    height: float = PAGE_SIZE[1]
    padding_x: float = 32.0
    padding_y: float = 24.0

    @property
    def content_width(self) -> float:
        return self.width - 2 * self.padding_x

    def column_width(self, columns: int = 4) -> float:
        return self.content_width / columns

    def column_x(self, index: int, columns: int = 4) -> float:
        return self.padding_x + index * self.column_width(columns)

    def text_width(self, columns: int = 4, span: int = 1) -> float:
        return self.column_width(columns) * span - COLUMN_GUTTER


PAGE = PageGeometry()


class LayoutCursor:
    """Vertical offset of the next block on a page. Only moves down."""

    def __init__(self, y: float) -> None:
        self._y = float(y)

    @property
    def y(self) -> float:
        return self._y

    def advance(self, delta: float) -> float:
        if delta < 0:
            raise ValueError(f"Layout cursor cannot move backwards (delta={delta})")
        self._y += delta
        return self._y

    def __repr__(self) -> str:
        return f"LayoutCursor(y={self._y:.2f})"


@dataclass(frozen=True)
class Field:
    label: str
    lines: Tuple[str, ...]
    span: int = 1
    style: TextStyle = VALUE


@dataclass(frozen=True)
class FooterMetrics:
    label_height: float
    footer_y: float
    divider_y: float


def measure(sink: DocumentSink, text: str, width: float, style: TextStyle) -> float:
    if not text:
        return 0.0
    return sink.measure_text_height(text, width, style)


def draw_wrapped(
    sink: DocumentSink,
    text: str,
    x: float,
    y: float,
    width: float,
    style: TextStyle,
    align: str = "L",
) -> float:
    height = measure(sink, text, width, style)
    if height:
        sink.draw_text(text, x, y, style, width, align)
    return height


def draw_lines(
    sink: DocumentSink,
    lines: Sequence[str],
    x: float,
    y: float,
    width: float,
    style: TextStyle,
) -> float:
    """Draw each line below the previous one; returns the total height."""
    offset = 0.0
    for line in lines:
        offset += draw_wrapped(sink, line, x, y + offset, width, style)
    return offset


def draw_field(
    sink: DocumentSink,
    label: str,
    lines: Sequence[str],
    x: float,
    y: float,
    width: float,
    style: TextStyle = VALUE,
) -> float:
    height = draw_wrapped(sink, label, x, y, width, LABEL)
    values = [line for line in lines if line]
    if values:
        height += LABEL_GAP
        height += draw_lines(sink, values, x, y + height, width, style)
    return height


def draw_columns(
    sink: DocumentSink,
    page: PageGeometry,
    y: float,
    fields: Sequence[Optional[Field]],
    columns: int = 4,
) -> float:
    """Lay fields out left to right; ``None`` leaves a column empty.

    Returns the tallest column's height.
    """
    height = 0.0
    index = 0
    for item in fields:
        if item is None:
            index += 1
            continue
        if index + item.span > columns:
            raise ValueError(f"Field {item.label!r} does not fit in {columns} columns")
        field_height = draw_field(
            sink,
            item.label,
            item.lines,
            page.column_x(index, columns),
            y,
            page.text_width(columns, item.span),
            item.style,
        )
        height = max(height, field_height)
        index += item.span
    return height


def draw_divider(
    sink: DocumentSink,
    page: PageGeometry,
    y: float,
    x1: float = 0.0,
    x2: Optional[float] = None,
) -> None:
    sink.draw_line(x1, y, page.width if x2 is None else x2, y)


def footer_metrics(sink: DocumentSink, page: PageGeometry, page_number: int) -> FooterMetrics:
    label_height = measure(sink, page_label(page_number), page.content_width, MUTED)
    footer_y = page.height - page.padding_y - label_height
    return FooterMetrics(
        label_height=label_height,
        footer_y=footer_y,
        divider_y=footer_y - page.padding_y,
    )


def page_label(page_number: int) -> str:
    return f"{page_number} of {PAGE_TOTAL}"


def draw_footer(sink: DocumentSink, page: PageGeometry, page_number: int, domain: str) -> FooterMetrics:
    metrics = footer_metrics(sink, page, page_number)
    draw_divider(sink, page, metrics.divider_y)
    if domain:
        sink.draw_text(domain, page.padding_x, metrics.footer_y, MUTED, page.content_width / 2)
    sink.draw_text(
        page_label(page_number),
        page.padding_x,
        metrics.footer_y,
        MUTED,
        page.content_width,
        align="R",
    )
    return metrics


def draw_page_header(
    sink: DocumentSink,
    page: PageGeometry,
    cursor: LayoutCursor,
    title: str,
    domain: str,
    domain_style: TextStyle = LABEL,
) -> None:
    """Brand mark with the domain on the right, then the page title."""
    for path in BRAND_MARK:
        sink.draw_path(path, page.padding_x, cursor.y)
    domain_height = draw_wrapped(
        sink, domain, page.padding_x, cursor.y, page.content_width, domain_style, align="R"
    )
    cursor.advance(max(BRAND_MARK_SIZE, domain_height) + HEADER_GAP)

    title_height = draw_wrapped(sink, title, page.padding_x, cursor.y, page.content_width, TITLE)
    cursor.advance(title_height + TITLE_GAP)
