"""
A cell on a game board

(placed in its own module as every rule engine needs to import it)
"""

from __future__ import annotations

from dataclasses import dataclass

from src.core.exceptions import OutOfBoundsError


@dataclass(frozen=True)
class Cell:
    """x is the column (left to right), y is the row (top to bottom)"""

    x: int
    y: int

    def shifted(self, dx: int, dy: int) -> Cell:
        return Cell(self.x + dx, self.y + dy)

    def is_within_bounds(self, width: int, height: int) -> bool:
        return (0 <= self.x < width) and (0 <= self.y < height)

    def assert_within_bounds(self, width: int, height: int) -> None:
        if not self.is_within_bounds(width, height):
            raise OutOfBoundsError(
                f"Cell ({self.x}, {self.y}) is outside of the {width}x{height} board."
            )

    def to_dict(self) -> dict[str, int]:
        return {"x": self.x, "y": self.y}
