"""Immutable invoice records consumed by the renderer."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from .errors import InvalidInvoiceError
from .formatting import (
    calculate_subtotal,
    fmt_date,
    fmt_percent,
    percentage_of,
    split_lines,
    to_decimal,
)

PROCESSING_FEE_LABEL = "Processing fee"


@dataclass(frozen=True)
class Client:
    name: str
    email: str
    address: Tuple[str, ...] = ()


@dataclass(frozen=True)
class LineItem:
    description: str
    quantity: int
    unit_amount_cents: int
    sub_description: Optional[str] = None

    @property
    def amount_cents(self) -> int:
        return self.quantity * self.unit_amount_cents


@dataclass(frozen=True)
class Company:
    legal_name: str
    address: Tuple[str, ...]
    email: str
    phone: str = ""


@dataclass(frozen=True)
class BankDetails:
    bank_name: str
    iban: str
    swift_code: str
    bank_address: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CryptoDetails:
    network: str
    address: str


@dataclass(frozen=True)
class InvoiceDocument:
    invoice_number: str
    date: str
    due_date: str
    client: Client
    line_items: Tuple[LineItem, ...]
    total_cents: int
    currency: str
    company: Optional[Company]
    bank_details: Optional[BankDetails] = None
    crypto_details: Optional[CryptoDetails] = None
    processing_fee_cents: Optional[int] = None
    processing_fee_percent: Optional[Decimal] = field(default=None)

    @property
    def subtotal_cents(self) -> int:
        return calculate_subtotal(self.line_items)

    @property
    def has_processing_fee(self) -> bool:
        return self.processing_fee_cents is not None or self.processing_fee_percent is not None

    def processing_fee(self) -> Optional[Tuple[str, int]]:
        """Label and amount of the surcharge row, or None without a fee."""
        if not self.has_processing_fee:
            return None
        label = PROCESSING_FEE_LABEL
        if self.processing_fee_percent is not None:
            label = f"{PROCESSING_FEE_LABEL} ({fmt_percent(self.processing_fee_percent)}%)"
        if self.processing_fee_cents is not None:
            return label, self.processing_fee_cents
        return label, percentage_of(self.subtotal_cents, self.processing_fee_percent)

    def validate(self) -> "InvoiceDocument":
        problems = collect_problems(self)
        if problems:
            raise InvalidInvoiceError(problems)
        return self

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "InvoiceDocument":
        return parse_invoice(payload)


def _is_cents(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def collect_problems(doc: InvoiceDocument) -> List[str]:
    problems: List[str] = []

    company = doc.company
    if company is None:
        problems.append("company details are required")
    else:
        if not company.legal_name.strip():
            problems.append("company.legal_name is required")
        if not company.email.strip():
            problems.append("company.email is required")

    if not doc.line_items:
        problems.append("at least one line item is required")
    for index, item in enumerate(doc.line_items):
        if not item.description.strip():
            problems.append(f"line_items[{index}].description is required")
        if not _is_cents(item.quantity):
            problems.append(f"line_items[{index}].quantity must be a non-negative integer")
        if not _is_cents(item.unit_amount_cents):
            problems.append(f"line_items[{index}].unit_amount_cents must be a non-negative integer")

    if not _is_cents(doc.total_cents):
        problems.append("total_cents must be a non-negative integer")
    if not doc.currency.strip():
        problems.append("currency is required")
    if doc.processing_fee_cents is not None and not _is_cents(doc.processing_fee_cents):
        problems.append("processing_fee_cents must be a non-negative integer")
    if doc.processing_fee_percent is not None and doc.processing_fee_percent < 0:
        problems.append("processing_fee_percent must not be negative")

    if doc.crypto_details is not None and not doc.crypto_details.address.strip():
        problems.append("crypto_details.address is required")

    return problems


# -- payload parsing -------------------------------------------------------


class _Reader:
    """Reads snake_case or camelCase keys from one JSON object."""

    def __init__(self, data: Any, path: str, problems: List[str]) -> None:
        self.path = path
        self.problems = problems
        if isinstance(data, Mapping):
            self.data: Mapping[str, Any] = data
        else:
            problems.append(f"{path or 'payload'} must be an object")
            self.data = {}

    def _where(self, *keys: str) -> str:
        present = next((key for key in keys if key in self.data), keys[0])
        return f"{self.path}.{present}" if self.path else present

    def raw(self, *keys: str) -> Any:
        for key in keys:
            if key in self.data and self.data[key] is not None:
                return self.data[key]
        return None

    def text(self, *keys: str, default: str = "") -> str:
        value = self.raw(*keys)
        if value is None:
            return default
        if isinstance(value, (dict, list)):
            self.problems.append(f"{self._where(*keys)} must be a string")
            return default
        return str(value).strip()

    def lines(self, *keys: str) -> Tuple[str, ...]:
        value = self.raw(*keys)
        if value is None:
            return ()
        if isinstance(value, str):
            return tuple(split_lines(value))
        if isinstance(value, Sequence):
            return tuple(str(line).strip() for line in value if str(line).strip())
        self.problems.append(f"{self._where(*keys)} must be a string or a list of strings")
        return ()

    def integer(self, *keys: str, required: bool = True) -> Optional[int]:
        value = self.raw(*keys)
        if value is None:
            if required:
                self.problems.append(f"{self._where(*keys)} is required")
            return None
        if isinstance(value, bool):
            self.problems.append(f"{self._where(*keys)} must be an integer")
            return None
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, int):
            return value
        self.problems.append(f"{self._where(*keys)} must be an integer")
        return None

    def decimal(self, *keys: str) -> Optional[Decimal]:
        value = self.raw(*keys)
        if value is None:
            return None
        try:
            return to_decimal(value)
        except ValueError:
            self.problems.append(f"{self._where(*keys)} must be a number")
            return None

    def child(self, *keys: str) -> Optional["_Reader"]:
        value = self.raw(*keys)
        if value is None:
            return None
        return _Reader(value, self._where(*keys), self.problems)


def _parse_line_items(reader: _Reader) -> Tuple[LineItem, ...]:
    raw_items = reader.raw("line_items", "lineItems", "items")
    if raw_items is None:
        return ()
    if isinstance(raw_items, (str, bytes)) or not isinstance(raw_items, Sequence):
        reader.problems.append("line_items must be an array")
        return ()

    items: List[LineItem] = []
    for index, raw in enumerate(raw_items):
        item = _Reader(raw, f"line_items[{index}]", reader.problems)
        quantity = item.integer("quantity", required=False)
        unit = item.integer("unit_amount_cents", "unitAmountCents")
        sub_description = item.text("sub_description", "subDescription") or None
        items.append(
            LineItem(
                description=item.text("description"),
                quantity=1 if quantity is None else quantity,
                unit_amount_cents=0 if unit is None else unit,
                sub_description=sub_description,
            )
        )
    return tuple(items)


def parse_invoice(payload: Mapping[str, Any]) -> InvoiceDocument:
    """Build a document from a JSON-style mapping and validate it.

    Flat client fields (``clientName``/``clientEmail``/``clientAddress``) are
    accepted as well as a nested ``client`` object.
    """
    problems: List[str] = []
    root = _Reader(payload, "", problems)

    client_reader = root.child("client")
    if client_reader is not None:
        client = Client(
            name=client_reader.text("name"),
            email=client_reader.text("email"),
            address=client_reader.lines("address"),
        )
    else:
        client = Client(
            name=root.text("client_name", "clientName"),
            email=root.text("client_email", "clientEmail"),
            address=root.lines("client_address", "clientAddress"),
        )

    company: Optional[Company] = None
    company_reader = root.child("company")
    if company_reader is not None:
        company = Company(
            legal_name=company_reader.text("legal_name", "legalName"),
            address=company_reader.lines("address"),
            email=company_reader.text("email"),
            phone=company_reader.text("phone"),
        )

    bank: Optional[BankDetails] = None
    bank_reader = root.child("bank_details", "bankDetails")
    if bank_reader is not None:
        bank = BankDetails(
            bank_name=bank_reader.text("bank_name", "bankName"),
            iban=bank_reader.text("iban"),
            swift_code=bank_reader.text("swift_code", "swiftCode", "bic"),
            bank_address=bank_reader.lines("bank_address", "bankAddress"),
        )

    crypto: Optional[CryptoDetails] = None
    crypto_reader = root.child("crypto_details", "cryptoDetails")
    if crypto_reader is not None:
        crypto = CryptoDetails(
            network=crypto_reader.text("network"),
            address=crypto_reader.text("address"),
        )

    total = root.integer("total_cents", "totalCents")
    document = InvoiceDocument(
        invoice_number=root.text("invoice_number", "invoiceNumber"),
        date=fmt_date(root.text("date")),
        due_date=fmt_date(root.text("due_date", "dueDate")),
        client=client,
        line_items=_parse_line_items(root),
        total_cents=0 if total is None else total,
        currency=root.text("currency", default="usd"),
        company=company,
        bank_details=bank,
        crypto_details=crypto,
        processing_fee_cents=root.integer(
            "processing_fee_cents", "processingFeeCents", required=False
        ),
        processing_fee_percent=root.decimal("processing_fee_percent", "processingFeePercent"),
    )

    if problems:
        raise InvalidInvoiceError(problems)
    return document.validate()
