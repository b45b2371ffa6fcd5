# stagio - Geometry
"""
Integer rectangle used to describe the bounds of pixel buffers.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Rect:
    """Half-open integer rectangle [min_x, max_x) x [min_y, max_y).

    The minimum corner does not have to be the origin: decoders and sub-images
    may hand out buffers whose first pixel lives at e.g. (-1, -1).
    """

    min_x: int = 0
    min_y: int = 0
    max_x: int = 0
    max_y: int = 0

    @classmethod
    def from_size(cls, width: int, height: int) -> Rect:
        """
        Creates a rectangle with its minimum corner at the origin

        :param width: The width in pixels
        :param height: The height in pixels
        :return: The rectangle. A degenerate Rect(0, 0, 0, 0) if either side
            is not positive.
        """
        if width <= 0 or height <= 0:
            return cls()
        return cls(0, 0, width, height)

    @property
    def width(self) -> int:
        """Width in pixels, never negative."""
        return max(self.max_x - self.min_x, 0)

    @property
    def height(self) -> int:
        """Height in pixels, never negative."""
        return max(self.max_y - self.min_y, 0)

    @property
    def size(self) -> tuple[int, int]:
        """The size as tuple (width, height)."""
        return self.width, self.height

    def empty(self) -> bool:
        """Returns True if the rectangle does not contain any pixel."""
        return self.width == 0 or self.height == 0

    def at_origin(self) -> Rect:
        """Returns the rectangle translated so its minimum corner is (0, 0)."""
        return Rect.from_size(self.width, self.height)

    def __str__(self):
        return f"({self.min_x},{self.min_y})-({self.max_x},{self.max_y})"
