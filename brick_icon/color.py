"""RGBA colour value with hex/int32 codecs and HSV / CMYK conversions."""

from __future__ import annotations

import math
import string
from dataclasses import dataclass, field, replace

from brick_icon.errors import FormatError


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _channel(value: float) -> int:
    """Round to an integer and clamp into [0, 255]."""
    return min(255, max(0, _round_half_up(value)))


# -- Colour-space conversions ------------------------------------------


def rgb_to_hsv(r: float, g: float, b: float) -> tuple[float, float, float]:
    """Convert 0-255 RGB to ``(hue_degrees, saturation, value)``.

    Saturation and value are in [0, 1]; hue is in [0, 360).
    """
    r, g, b = r / 255, g / 255, b / 255
    hi = max(r, g, b)
    lo = min(r, g, b)
    delta = hi - lo

    if delta == 0:
        h = 0.0
    elif hi == r:
        h = 60 * (((g - b) / delta) % 6)
    elif hi == g:
        h = 60 * ((b - r) / delta + 2)
    else:
        h = 60 * ((r - g) / delta + 4)

    s = 0.0 if hi == 0 else delta / hi
    return h, s, hi


def hsv_to_rgb(h: float, s: float, v: float) -> tuple[int, int, int]:
    """Convert ``(hue_degrees, saturation, value)`` to 0-255 RGB."""
    h = h % 360
    c = v * s
    x = c * (1 - abs((h / 60) % 2 - 1))
    m = v - c

    if h < 60:
        rgb = (c, x, 0.0)
    elif h < 120:
        rgb = (x, c, 0.0)
    elif h < 180:
        rgb = (0.0, c, x)
    elif h < 240:
        rgb = (0.0, x, c)
    elif h < 300:
        rgb = (x, 0.0, c)
    else:
        rgb = (c, 0.0, x)

    r, g, b = (_channel((ch + m) * 255) for ch in rgb)
    return r, g, b


def rgb_to_cmyk(r: float, g: float, b: float) -> tuple[float, float, float, float]:
    """Convert 0-255 RGB to CMYK fractions in [0, 1]."""
    r, g, b = r / 255, g / 255, b / 255
    k = 1 - max(r, g, b)
    if k == 1:
        return 0.0, 0.0, 0.0, 1.0
    c = (1 - r - k) / (1 - k)
    m = (1 - g - k) / (1 - k)
    y = (1 - b - k) / (1 - k)
    return c, m, y, k


def cmyk_to_rgb(c: float, m: float, y: float, k: float) -> tuple[int, int, int]:
    """Convert CMYK fractions to 0-255 RGB."""
    r = _channel(255 * (1 - c) * (1 - k))
    g = _channel(255 * (1 - m) * (1 - k))
    b = _channel(255 * (1 - y) * (1 - k))
    return r, g, b


# -- Colour value ------------------------------------------------------


@dataclass(frozen=True)
class Color:
    """An RGBA colour with 8-bit channels.

    Channels are rounded and clamped on construction, so every derived
    colour stays inside [0, 255].  ``tag`` is a free-form label (e.g. a
    brick part number) and takes no part in equality or distance.
    """

    r: int = 0
    g: int = 0
    b: int = 0
    a: int = 255
    tag: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        for name in ("r", "g", "b", "a"):
            object.__setattr__(self, name, _channel(getattr(self, name)))

    # -- Parsing / formatting ------------------------------------------

    @classmethod
    def from_hex(cls, text: str) -> Color:
        """Parse ``#rgb``, ``#rrggbb`` or ``#rrggbbaa`` (``#`` optional)."""
        if not isinstance(text, str):
            msg = f"Hex colour must be a string, got {type(text).__name__}"
            raise FormatError(msg)

        digits = text.strip().removeprefix("#")
        if not all(ch in string.hexdigits for ch in digits):
            msg = f"Invalid hex colour '{text}': non-hex digit"
            raise FormatError(msg)
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        if len(digits) not in (6, 8):
            msg = f"Invalid hex colour '{text}': expected 3, 6 or 8 hex digits"
            raise FormatError(msg)

        channels = [int(digits[i : i + 2], 16) for i in range(0, len(digits), 2)]
        return cls(*channels)

    @classmethod
    def from_int32(cls, value: int) -> Color:
        """Unpack an ``AABBGGRR`` word (red in the low byte)."""
        value &= 0xFFFFFFFF
        return cls(
            value & 0xFF,
            (value >> 8) & 0xFF,
            (value >> 16) & 0xFF,
            (value >> 24) & 0xFF,
        )

    def to_int32(self) -> int:
        return (self.a << 24) | (self.b << 16) | (self.g << 8) | self.r

    def to_hex_string(self) -> str:
        text = f"#{self.r:02x}{self.g:02x}{self.b:02x}"
        if self.a != 255:
            text += f"{self.a:02x}"
        return text

    def to_rgb_string(self) -> str:
        return f"rgba({self.r}, {self.g}, {self.b}, {self.a})"

    def __str__(self) -> str:
        if self.a == 0:
            return "transparent"
        if self.a == 255:
            return self.to_hex_string()
        return self.to_rgb_string()

    # -- Derived copies ------------------------------------------------

    def with_tag(self, tag: str | None) -> Color:
        return replace(self, tag=tag)

    def fade(self, alpha: float) -> Color:
        """Copy with alpha set to *alpha* (0-255)."""
        return replace(self, a=alpha)

    def fade_float(self, fraction: float) -> Color:
        """Copy with alpha set to *fraction* of full opacity."""
        return replace(self, a=fraction * 255)

    @staticmethod
    def combine(first: Color, second: Color) -> Color:
        """Per-channel average of two colours."""
        return Color(
            (first.r + second.r) / 2,
            (first.g + second.g) / 2,
            (first.b + second.b) / 2,
            (first.a + second.a) / 2,
        )

    # -- Filters -------------------------------------------------------

    def brightness(self, delta: float) -> Color:
        """Shift r, g and b by *delta*; alpha is untouched."""
        return replace(self, r=self.r + delta, g=self.g + delta, b=self.b + delta)

    def contrast(self, delta: float) -> Color:
        """Contrast stretch around mid-grey; *delta* in [-255, 255]."""
        if not -255 <= delta <= 255:
            msg = f"Contrast delta must be in [-255, 255], got {delta}"
            raise ValueError(msg)
        factor = (259 * (delta + 255)) / (255 * (259 - delta))
        return replace(
            self,
            r=factor * (self.r - 128) + 128,
            g=factor * (self.g - 128) + 128,
            b=factor * (self.b - 128) + 128,
        )

    def distance_to(self, other: Color) -> float:
        """Euclidean distance in RGB space (alpha ignored)."""
        return math.sqrt(
            (other.r - self.r) ** 2
            + (other.g - self.g) ** 2
            + (other.b - self.b) ** 2
        )

    # -- Colour spaces -------------------------------------------------

    @property
    def rgb(self) -> tuple[int, int, int]:
        return self.r, self.g, self.b

    @property
    def hsv(self) -> tuple[float, float, float]:
        return rgb_to_hsv(self.r, self.g, self.b)

    @property
    def cmyk(self) -> tuple[float, float, float, float]:
        return rgb_to_cmyk(self.r, self.g, self.b)

    @property
    def c(self) -> float:
        return self.cmyk[0]

    @property
    def m(self) -> float:
        return self.cmyk[1]

    @property
    def y(self) -> float:
        return self.cmyk[2]

    @property
    def k(self) -> float:
        return self.cmyk[3]

    @property
    def perceived_luminosity(self) -> float:
        """Luma-weighted darkness: 1 for black, 0 for white."""
        # Integer weights keep the extremes exact.
        return 1 - (299 * self.r + 587 * self.g + 114 * self.b) / 255_000

    @property
    def is_dark(self) -> bool:
        return self.perceived_luminosity > 0.5

    @property
    def is_light(self) -> bool:
        return not self.is_dark


BLACK = Color(0, 0, 0)
WHITE = Color(255, 255, 255)
RED = Color(255, 0, 0)
GREEN = Color(0, 128, 0)
BLUE = Color(0, 0, 255)
TRANSPARENT = Color(0, 0, 0, 0)
