"""Font discovery and style-to-font mapping for the PDF sink."""

from __future__ import annotations

import logging
import os
import threading
from typing import List, Optional

from fpdf import FPDF

from .styles import TextStyle

logger = logging.getLogger(__name__)

_PACKAGE_ROOT = os.path.dirname(os.path.abspath(__file__))


def find_font_path(env_var: str, candidates: List[str]) -> Optional[str]:
    override = os.getenv(env_var)
    if override and os.path.exists(override):
        return override

    for path in candidates:
        if os.path.exists(path):
            return path
    return None


FONT_INIT_LOCK = threading.Lock()


class FontManager:
    """Registers the invoice typeface on one FPDF instance.

    DejaVu Sans is used when available so currency symbols such as the euro
    sign render. Without it the PDF core Helvetica face is used and text is
    reduced to Latin-1.
    """

    FAMILY = "InvoiceFont"
    CORE_FAMILY = "helvetica"
    BUNDLED_REGULAR = os.path.join(_PACKAGE_ROOT, "fonts", "DejaVuSans.ttf")
    BUNDLED_BOLD = os.path.join(_PACKAGE_ROOT, "fonts", "DejaVuSans-Bold.ttf")
    SYSTEM_REGULAR_CANDIDATES = [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/dejavu/DejaVuSans.ttf",
        "/Library/Fonts/DejaVuSans.ttf",
    ]
    SYSTEM_BOLD_CANDIDATES = [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
        "/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf",
        "/Library/Fonts/DejaVuSans-Bold.ttf",
    ]

    def __init__(self, pdf: FPDF) -> None:
        self.pdf = pdf
        self.family = self.FAMILY
        self.has_bold = False
        self.unicode = True

        regular_path = find_font_path(
            "INVOICE_FONT_PATH",
            [self.BUNDLED_REGULAR, *self.SYSTEM_REGULAR_CANDIDATES],
        )
        if not regular_path:
            logger.debug("No Unicode TTF found, falling back to core %s", self.CORE_FAMILY)
            self.family = self.CORE_FAMILY
            self.has_bold = True
            self.unicode = False
            return

        bold_path = find_font_path(
            "INVOICE_FONT_BOLD_PATH",
            [self.BUNDLED_BOLD, *self.SYSTEM_BOLD_CANDIDATES],
        )

        with FONT_INIT_LOCK:
            self.pdf.add_font(self.FAMILY, "", regular_path)
            if bold_path:
                self.pdf.add_font(self.FAMILY, "B", bold_path)
                self.has_bold = True

    def font_style(self, style: TextStyle) -> str:
        # There is no medium face; it maps to regular.
        return "B" if style.bold and self.has_bold else ""

    def fake_bold(self, style: TextStyle) -> bool:
        return style.bold and not self.has_bold

    def apply(self, style: TextStyle) -> None:
        self.pdf.set_font(self.family, self.font_style(style), style.size)

    def encode(self, text: str) -> str:
        if self.unicode:
            return text
        return text.encode("latin-1", "replace").decode("latin-1")
