"""Public package API for invoice rendering."""

from __future__ import annotations

from typing import Any, Mapping, Union

from .errors import (
    DrawPrimitiveError,
    InvalidInvoiceError,
    InvoiceRenderError,
    MeasurementError,
    QrEncodingError,
)
from .formatting import format_currency
from .models import BankDetails, Client, Company, CryptoDetails, InvoiceDocument, LineItem


def render_invoice(data: Union[InvoiceDocument, Mapping[str, Any]], **options: Any) -> bytes:
    from .rendering import render_invoice as _render_invoice

    return _render_invoice(data, **options)


async def render_invoice_async(
    data: Union[InvoiceDocument, Mapping[str, Any]], **options: Any
) -> bytes:
    from .rendering import render_invoice_async as _render_invoice_async

    return await _render_invoice_async(data, **options)


def run(host: str = "0.0.0.0", port: int = 8080) -> None:
    from .server import run as _run

    _run(host, port)


__all__ = [
    "BankDetails",
    "Client",
    "Company",
    "CryptoDetails",
    "DrawPrimitiveError",
    "InvalidInvoiceError",
    "InvoiceDocument",
    "InvoiceRenderError",
    "LineItem",
    "MeasurementError",
    "QrEncodingError",
    "format_currency",
    "render_invoice",
    "render_invoice_async",
    "run",
]
