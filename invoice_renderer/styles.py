"""Typography presets passed explicitly to every drawing call."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

BLACK: Tuple[int, int, int] = (0, 0, 0)
BRAND_ORANGE = "#FF4500"

DIVIDER_OPACITY = 0.06
DIVIDER_WIDTH = 1.0
LINE_HEIGHT_FACTOR = 1.2

WEIGHTS = ("bold", "medium")


@dataclass(frozen=True)
class TextStyle:
    weight: str
    size: float
    opacity: float
    color: Tuple[int, int, int] = BLACK

    def __post_init__(self) -> None:
        if self.weight not in WEIGHTS:
            raise ValueError(f"Unknown font weight: {self.weight!r}")
        if not 0.0 <= self.opacity <= 1.0:
            raise ValueError(f"Opacity must be within [0, 1], got {self.opacity}")
        if self.size <= 0:
            raise ValueError(f"Font size must be positive, got {self.size}")

    @property
    def bold(self) -> bool:
        return self.weight == "bold"

    @property
    def line_height(self) -> float:
        return round(self.size * LINE_HEIGHT_FACTOR, 2)


LABEL = TextStyle("bold", 10, 0.88)
VALUE = TextStyle("medium", 10, 0.72)
MUTED = TextStyle("medium", 10, 0.48)
TITLE = TextStyle("bold", 18, 0.88)
SUBTITLE = TextStyle("medium", 9, 0.72)
