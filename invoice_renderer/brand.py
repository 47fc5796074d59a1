"""Vector brand mark drawn in the page header.

Coordinates are relative to the mark's top-left anchor, y grows downwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple

from .styles import BRAND_ORANGE

Command = Tuple[object, ...]

KAPPA = 0.5522847498307936  # circle approximation constant


@dataclass(frozen=True)
class VectorPath:
    name: str
    commands: Tuple[Command, ...]
    fill_color: str = BRAND_ORANGE
    even_odd: bool = False

    def translated(self, x: float, y: float) -> Iterator[Command]:
        """Yield the commands with every point moved to the (x, y) anchor."""
        for command in self.commands:
            op, coords = command[0], command[1:]
            moved = tuple(
                value + (x if index % 2 == 0 else y) for index, value in enumerate(coords)  # type: ignore[operator]
            )
            yield (op, *moved)


def _circle(cx: float, cy: float, r: float) -> Tuple[Command, ...]:
    k = r * KAPPA
    return (
        ("M", cx, cy - r),
        ("C", cx + k, cy - r, cx + r, cy - k, cx + r, cy),
        ("C", cx + r, cy + k, cx + k, cy + r, cx, cy + r),
        ("C", cx - k, cy + r, cx - r, cy + k, cx - r, cy),
        ("C", cx - r, cy - k, cx - k, cy - r, cx, cy - r),
        ("Z",),
    )


BRAND_MARK_SIZE = 20.0

BRAND_RING = VectorPath(
    name="brand-ring",
    commands=_circle(10.0, 10.0, 10.0) + _circle(10.0, 10.0, 5.5),
    even_odd=True,
)

BRAND_SWOOSH = VectorPath(
    name="brand-swoosh",
    commands=(
        ("M", 13.0, 2.0),
        ("C", 17.5, 4.0, 20.0, 8.5, 18.5, 13.0),
        ("C", 17.8, 9.8, 15.6, 7.2, 12.4, 6.1),
        ("C", 13.6, 4.8, 13.8, 3.4, 13.0, 2.0),
        ("Z",),
    ),
)

BRAND_MARK: Tuple[VectorPath, ...] = (BRAND_RING, BRAND_SWOOSH)
