"""Icon raster: a width x height grid of pixels stored row-major."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from brick_icon.color import Color
from brick_icon.color_utils import nearest_palette_indices
from brick_icon.dithering import Kernel, dither
from brick_icon.errors import EmptyPaletteError
from brick_icon.palette import Palette
from brick_icon.pixel import Pixel
from brick_icon.statistics import ColorStatistics, color_statistics


def _as_uint8(buffer: bytes | bytearray | Sequence[int] | np.ndarray) -> np.ndarray:
    if isinstance(buffer, (bytes, bytearray, memoryview)):
        return np.frombuffer(buffer, dtype=np.uint8)
    return np.asarray(buffer, dtype=np.uint8).reshape(-1)


class Icon:
    """A raster of ``width * height`` pixels, index ``y * width + x``.

    New and resized icons are filled with fully transparent pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        if width < 0 or height < 0:
            msg = f"Icon size must be non-negative, got {width}x{height}"
            raise ValueError(msg)
        self._width = width
        self._height = height
        self.pixels: list[Pixel] = [Pixel() for _ in range(width * height)]

    def __repr__(self) -> str:
        return f"Icon({self._width}x{self._height})"

    # -- Construction --------------------------------------------------

    @classmethod
    def from_rgba(
        cls,
        buffer: bytes | bytearray | Sequence[int] | np.ndarray,
        width: int,
        height: int,
    ) -> Icon:
        """Build an icon from a flat 4-bytes-per-pixel RGBA buffer."""
        icon = cls(width, height)
        icon.import_uint8_array(buffer)
        return icon

    @classmethod
    def from_array(cls, array: np.ndarray) -> Icon:
        """Build an icon from an (H, W, 3) or (H, W, 4) uint8 array."""
        if array.ndim != 3 or array.shape[2] not in (3, 4):
            msg = f"Expected an (H, W, 3|4) array, got shape {array.shape}"
            raise ValueError(msg)
        h, w = array.shape[:2]
        if array.shape[2] == 3:
            alpha = np.full((h, w, 1), 255, dtype=np.uint8)
            array = np.concatenate([array.astype(np.uint8), alpha], axis=2)
        return cls.from_rgba(array.astype(np.uint8), w, h)

    # -- Geometry ------------------------------------------------------

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def size(self) -> tuple[int, int]:
        return self._width, self._height

    def resize(self, width: int, height: int) -> None:
        """Change dimensions; all pixels are reset to transparent."""
        fresh = Icon(width, height)
        self._width, self._height = fresh.width, fresh.height
        self.pixels = fresh.pixels

    def _index(self, x: int, y: int) -> int:
        if not (0 <= x < self._width and 0 <= y < self._height):
            msg = f"Pixel ({x}, {y}) outside {self._width}x{self._height} icon"
            raise IndexError(msg)
        return y * self._width + x

    def get_pixel(self, x: int, y: int) -> Pixel:
        return self.pixels[self._index(x, y)]

    def set_pixel(self, x: int, y: int, pixel: Pixel | Color) -> None:
        if isinstance(pixel, Color):
            pixel = Pixel(pixel)
        self.pixels[self._index(x, y)] = pixel

    def clone(self) -> Icon:
        icon = Icon(self._width, self._height)
        icon.pixels = [p.copy() for p in self.pixels]
        return icon

    # -- Buffer import / export ----------------------------------------

    def import_uint8_array(
        self, buffer: bytes | bytearray | Sequence[int] | np.ndarray,
    ) -> None:
        """Replace all pixels from a flat RGBA buffer (4 bytes per pixel)."""
        data = _as_uint8(buffer)
        expected = self._width * self._height * 4
        if data.size != expected:
            msg = (
                f"RGBA buffer for a {self._width}x{self._height} icon must hold "
                f"{expected} bytes, got {data.size}"
            )
            raise ValueError(msg)
        self.pixels = [Pixel(Color(*rgba)) for rgba in data.reshape(-1, 4).tolist()]

    def import_uint32_array(self, buffer: Sequence[int] | np.ndarray) -> None:
        """Replace all pixels from packed ``AABBGGRR`` words."""
        words = np.asarray(buffer, dtype=np.uint32).reshape(-1)
        if words.size != self._width * self._height:
            msg = (
                f"Packed buffer for a {self._width}x{self._height} icon must hold "
                f"{self._width * self._height} words, got {words.size}"
            )
            raise ValueError(msg)
        self.pixels = [Pixel(Color.from_int32(w)) for w in words.tolist()]

    def to_uint8_array(self) -> np.ndarray:
        """Flat (w*h*4,) uint8 RGBA buffer."""
        rows = [(p.r, p.g, p.b, p.a) for p in self.pixels]
        return np.array(rows, dtype=np.uint8).reshape(-1)

    def to_uint32_array(self) -> np.ndarray:
        """(w*h,) uint32 packed ``AABBGGRR`` buffer with alpha forced to 255."""
        rgba = self.to_uint8_array().reshape(-1, 4).astype(np.uint32)
        packed = (
            np.uint32(0xFF000000)
            | (rgba[:, 2] << 16)
            | (rgba[:, 1] << 8)
            | rgba[:, 0]
        )
        return packed.astype(np.uint32)

    def to_array(self) -> np.ndarray:
        """(H, W, 4) uint8 RGBA array."""
        return self.to_uint8_array().reshape(self._height, self._width, 4)

    def get_pixel_tuples(self) -> list[tuple[int, int, int]]:
        return [(p.r, p.g, p.b) for p in self.pixels]

    # -- Filters -------------------------------------------------------

    def bright(self, delta: float) -> None:
        for p in self.pixels:
            p.brightness(delta)

    def contrast(self, delta: float) -> None:
        for p in self.pixels:
            p.contrast(delta)

    def snap_to_palette(self, palette: Palette, color_space: str = "rgb") -> None:
        """Replace every pixel's RGB by its nearest palette colour, keeping alpha.

        No error is diffused.  ``"rgb"`` gives the same result as
        :meth:`Pixel.snap_to_palette` on each pixel; ``"lab"`` matches
        perceptually in CIELAB.
        """
        if len(palette) == 0:
            msg = "Cannot snap to an empty palette"
            raise EmptyPaletteError(msg)
        if not self.pixels:
            return
        rgb = self.to_uint8_array().reshape(-1, 4)[:, :3]
        indices = nearest_palette_indices(rgb, palette.to_array(), color_space)
        entries = palette.rgb_tuples
        for p, i in zip(self.pixels, indices.tolist(), strict=True):
            p.set_color(Color(*entries[i], p.a))

    def dither(
        self,
        palette: Palette,
        kernel: Kernel | int | str = Kernel.FLOYD_STEINBERG,
        serpentine: bool = False,
    ) -> np.ndarray:
        """Packed dithered copy of this icon; see :func:`brick_icon.dithering.dither`."""
        return dither(self, palette, kernel, serpentine)

    def stick_to_palette(
        self,
        palette: Palette,
        kernel: Kernel | int | str = Kernel.FLOYD_STEINBERG,
        serpentine: bool = False,
    ) -> None:
        """Dither onto *palette* in place; every pixel becomes opaque."""
        self.import_uint32_array(self.dither(palette, kernel, serpentine))

    def color_statistics(self, palette: Palette, min_count: int = 2) -> ColorStatistics:
        return color_statistics(self, palette, min_count)
