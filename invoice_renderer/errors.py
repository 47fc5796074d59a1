"""Exception types raised while validating and rendering invoices."""

from __future__ import annotations

from typing import Iterable, List


class InvalidInvoiceError(ValueError):
    """Raised before drawing starts when the invoice record is incomplete."""

    def __init__(self, problems: Iterable[str]) -> None:
        self.problems: List[str] = list(problems)
        super().__init__("; ".join(self.problems) or "invalid invoice")


class InvoiceRenderError(RuntimeError):
    """Base class for fatal failures inside the document sink."""


class MeasurementError(InvoiceRenderError):
    pass


class DrawPrimitiveError(InvoiceRenderError):
    pass


class QrEncodingError(RuntimeError):
    """The QR payload could not be encoded. Callers degrade, never abort."""
