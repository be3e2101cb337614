"""A single editable raster cell."""

from __future__ import annotations

from typing import Any

from brick_icon.color import TRANSPARENT, Color
from brick_icon.palette import Palette


class Pixel:
    """Mutable holder of a :class:`Color` plus palette-matching operations.

    Colour attributes (``r``, ``hsv``, ``to_hex_string`` ...) are read
    through to the held colour.  Filters replace the colour rather than
    mutating it, since :class:`Color` is immutable.
    """

    __slots__ = ("color",)

    def __init__(self, color: Color = TRANSPARENT) -> None:
        self.color = color

    @classmethod
    def from_rgba(cls, r: int, g: int, b: int, a: int = 255) -> Pixel:
        return cls(Color(r, g, b, a))

    def __getattr__(self, name: str) -> Any:
        # Only reached for attributes Pixel itself does not define.
        if name == "color":
            raise AttributeError(name)
        return getattr(self.color, name)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Pixel):
            return self.color == other.color
        if isinstance(other, Color):
            return self.color == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Pixel({self.r}, {self.g}, {self.b}, {self.a})"

    @property
    def r(self) -> int:
        return self.color.r

    @property
    def g(self) -> int:
        return self.color.g

    @property
    def b(self) -> int:
        return self.color.b

    @property
    def a(self) -> int:
        return self.color.a

    def copy(self) -> Pixel:
        return Pixel(self.color)

    def set_color(self, color: Color) -> None:
        self.color = color

    def brightness(self, delta: float) -> None:
        self.color = self.color.brightness(delta)

    def contrast(self, delta: float) -> None:
        self.color = self.color.contrast(delta)

    def distance_to(self, other: Color | Pixel) -> float:
        if isinstance(other, Pixel):
            other = other.color
        return self.color.distance_to(other)

    def nearest(self, palette: Palette) -> Color:
        """Closest palette entry; ties resolve to the later entry."""
        return palette.nearest(self.color)

    def snap_to_palette(self, palette: Palette) -> None:
        """Take r, g, b from the nearest palette entry, keeping alpha."""
        match = self.nearest(palette)
        self.color = Color(match.r, match.g, match.b, self.color.a)
