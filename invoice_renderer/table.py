"""Line-item table flow and the bottom-anchored total row."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from .formatting import format_currency
from .layout import ROW_GAP, LayoutCursor, PageGeometry, draw_divider, draw_wrapped, footer_metrics, measure
from .models import InvoiceDocument
from .sink import DocumentSink
from .styles import LABEL, SUBTITLE, TITLE, VALUE

logger = logging.getLogger(__name__)

TOTAL_LABEL = "Total"


@dataclass(frozen=True)
class TableRow:
    description: str
    amount_cents: int
    sub_description: Optional[str] = None


@dataclass(frozen=True)
class TableGeometry:
    x: float
    width: float
    column_width: float
    text_width: float

    @property
    def amount_x(self) -> float:
        return self.x + self.column_width

    @property
    def right(self) -> float:
        return self.x + self.width


@dataclass(frozen=True)
class RowPlacement:
    y: float
    description_height: float
    sub_description_height: float
    divider_y: float


@dataclass(frozen=True)
class TotalPlacement:
    y: float
    divider_y: float
    row_height: float
    rows_end_y: float

    @property
    def overflow(self) -> bool:
        return self.rows_end_y > self.divider_y


def table_geometry(page: PageGeometry) -> TableGeometry:
    width = page.content_width / 2
    column_width = width / 2
    return TableGeometry(
        x=page.padding_x + width,
        width=width,
        column_width=column_width,
        text_width=column_width - ROW_GAP,
    )


def build_rows(document: InvoiceDocument) -> List[TableRow]:
    rows = [
        TableRow(item.description, item.amount_cents, item.sub_description)
        for item in document.line_items
    ]
    fee = document.processing_fee()
    if fee is not None:
        label, cents = fee
        rows.append(TableRow(label, cents))
    return rows


def draw_table_header(sink: DocumentSink, page: PageGeometry, cursor: LayoutCursor) -> float:
    table = table_geometry(page)
    start = cursor.y
    height = max(
        draw_wrapped(sink, "Description", table.x, start, table.text_width, LABEL),
        draw_wrapped(sink, "Amount", table.amount_x, start, table.column_width, LABEL, align="R"),
    )
    divider_y = start + height + ROW_GAP
    draw_divider(sink, page, divider_y, table.x, table.right)
    cursor.advance(height + 2 * ROW_GAP)
    return divider_y


def draw_row(
    sink: DocumentSink,
    page: PageGeometry,
    cursor: LayoutCursor,
    row: TableRow,
    currency: str,
) -> RowPlacement:
    table = table_geometry(page)
    start = cursor.y

    description_height = draw_wrapped(sink, row.description, table.x, start, table.text_width, LABEL)
    sub_height = 0.0
    if row.sub_description:
        sub_height = draw_wrapped(
            sink, row.sub_description, table.x, start + description_height, table.text_width, SUBTITLE
        )
    draw_wrapped(
        sink,
        format_currency(row.amount_cents, currency),
        table.amount_x,
        start,
        table.column_width,
        VALUE,
        align="R",
    )

    divider_y = start + description_height + sub_height + ROW_GAP
    draw_divider(sink, page, divider_y, table.x, table.right)
    cursor.advance(description_height + sub_height + 2 * ROW_GAP)
    return RowPlacement(start, description_height, sub_height, divider_y)


def draw_rows(
    sink: DocumentSink,
    page: PageGeometry,
    cursor: LayoutCursor,
    rows: List[TableRow],
    currency: str,
) -> List[RowPlacement]:
    draw_table_header(sink, page, cursor)
    return [draw_row(sink, page, cursor, row, currency) for row in rows]


def total_row_y(sink: DocumentSink, page: PageGeometry, row_height: float) -> float:
    """Top of the total row, counted up from the page-one footer."""
    footer = footer_metrics(sink, page, 1)
    return footer.divider_y - page.padding_y - row_height


def draw_total(
    sink: DocumentSink,
    page: PageGeometry,
    total_cents: int,
    currency: str,
    rows_end_y: float,
) -> TotalPlacement:
    """Draw the total at its fixed bottom offset.

    The row never moves with the table. Rows that run past its divider are
    reported through ``TotalPlacement.overflow`` and drawn anyway.
    """
    table = table_geometry(page)
    amount = format_currency(total_cents, currency)
    row_height = max(
        measure(sink, TOTAL_LABEL, table.text_width, TITLE),
        measure(sink, amount, table.column_width, TITLE),
    )
    y = total_row_y(sink, page, row_height)
    divider_y = y - ROW_GAP

    draw_divider(sink, page, divider_y, table.x, table.right)
    sink.draw_text(TOTAL_LABEL, table.x, y, TITLE, table.text_width)
    sink.draw_text(amount, table.amount_x, y, TITLE, table.column_width, align="R")

    placement = TotalPlacement(y=y, divider_y=divider_y, row_height=row_height, rows_end_y=rows_end_y)
    if placement.overflow:
        logger.warning(
            "Line items end at y=%.1f, past the anchored total divider at y=%.1f",
            rows_end_y,
            divider_y,
        )
    return placement
