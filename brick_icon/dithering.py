"""Palette-constrained error-diffusion dithering.

Every pixel is replaced by its nearest palette colour and the per-channel
quantisation error is pushed onto neighbours the scan has not reached yet,
weighted by one of nine classical diffusion kernels.  The working buffer
holds packed ``AABBGGRR`` words, so accumulated error is truncated to an
integer channel on every write, exactly as packing a float into an 8-bit
lane does.
"""

from __future__ import annotations

import logging
import time
from enum import IntEnum
from typing import TYPE_CHECKING

import numpy as np

from brick_icon.errors import EmptyPaletteError, UnknownKernelError
from brick_icon.palette import Palette

if TYPE_CHECKING:
    from brick_icon.icon import Icon

logger = logging.getLogger(__name__)

Tap = tuple[float, int, int]  # (weight, dx, dy)


class Kernel(IntEnum):
    """Selectable diffusion kernels, numbered as in the editor's slider."""

    FLOYD_STEINBERG = 0
    FALSE_FLOYD_STEINBERG = 1
    STUCKI = 2
    ATKINSON = 3
    JARVIS = 4
    BURKES = 5
    SIERRA = 6
    TWO_SIERRA = 7
    SIERRA_LITE = 8

    @property
    def display_name(self) -> str:
        return "".join(part.capitalize() for part in self.name.split("_"))

    @property
    def taps(self) -> tuple[Tap, ...]:
        return KERNEL_TAPS[self]

    @classmethod
    def resolve(cls, selector: Kernel | int | str) -> Kernel:
        """Map an index, member or display name onto a kernel."""
        if isinstance(selector, str):
            for kernel in cls:
                if selector in (kernel.display_name, kernel.name):
                    return kernel
        elif isinstance(selector, (int, np.integer)) and not isinstance(selector, bool):
            try:
                return cls(int(selector))
            except ValueError:
                pass
        msg = f"Unknown dithering kernel: {selector!r} (expected 0-{len(cls) - 1})"
        raise UnknownKernelError(msg)


KERNEL_TAPS: dict[Kernel, tuple[Tap, ...]] = {
    Kernel.FLOYD_STEINBERG: (
        (7 / 16, 1, 0),
        (3 / 16, -1, 1),
        (5 / 16, 0, 1),
        (1 / 16, 1, 1),
    ),
    Kernel.FALSE_FLOYD_STEINBERG: (
        (3 / 8, 1, 0),
        (3 / 8, 0, 1),
        (2 / 8, 1, 1),
    ),
    Kernel.STUCKI: (
        (8 / 42, 1, 0),
        (4 / 42, 2, 0),
        (2 / 42, -2, 1),
        (4 / 42, -1, 1),
        (8 / 42, 0, 1),
        (4 / 42, 1, 1),
        (2 / 42, 2, 1),
        (1 / 42, -2, 2),
        (2 / 42, -1, 2),
        (4 / 42, 0, 2),
        (2 / 42, 1, 2),
        (1 / 42, 2, 2),
    ),
    Kernel.ATKINSON: (
        (1 / 8, 1, 0),
        (1 / 8, 2, 0),
        (1 / 8, -1, 1),
        (1 / 8, 0, 1),
        (1 / 8, 1, 1),
        (1 / 8, 0, 2),
    ),
    Kernel.JARVIS: (
        (7 / 48, 1, 0),
        (5 / 48, 2, 0),
        (3 / 48, -2, 1),
        (5 / 48, -1, 1),
        (7 / 48, 0, 1),
        (5 / 48, 1, 1),
        (3 / 48, 2, 1),
        (1 / 48, -2, 2),
        (3 / 48, -1, 2),
        (5 / 48, 0, 2),
        (3 / 48, 1, 2),
        (1 / 48, 2, 2),
    ),
    Kernel.BURKES: (
        (8 / 32, 1, 0),
        (4 / 32, 2, 0),
        (2 / 32, -2, 1),
        (4 / 32, -1, 1),
        (8 / 32, 0, 1),
        (4 / 32, 1, 1),
        (2 / 32, 2, 1),
    ),
    Kernel.SIERRA: (
        (5 / 32, 1, 0),
        (3 / 32, 2, 0),
        (2 / 32, -2, 1),
        (4 / 32, -1, 1),
        (5 / 32, 0, 1),
        (4 / 32, 1, 1),
        (2 / 32, 2, 1),
        (2 / 32, -1, 2),
        (3 / 32, 0, 2),
        (2 / 32, 1, 2),
    ),
    Kernel.TWO_SIERRA: (
        (4 / 16, 1, 0),
        (3 / 16, 2, 0),
        (1 / 16, -2, 1),
        (2 / 16, -1, 1),
        (3 / 16, 0, 1),
        (2 / 16, 1, 1),
        (1 / 16, 2, 1),
    ),
    Kernel.SIERRA_LITE: (
        (2 / 4, 1, 0),
        (1 / 4, -1, 1),
        (1 / 4, 0, 1),
    ),
}


def _pack(r: int, g: int, b: int) -> int:
    return 0xFF000000 | (b << 16) | (g << 8) | r


def _unpack(word: int) -> tuple[int, int, int]:
    return word & 0xFF, (word >> 8) & 0xFF, (word >> 16) & 0xFF


def dither(
    icon: Icon,
    palette: Palette,
    kernel: Kernel | int | str = Kernel.FLOYD_STEINBERG,
    serpentine: bool = False,
) -> np.ndarray:
    """Quantise *icon* onto *palette* with error diffusion.

    Args:
        icon:       Source raster; it is not modified.
        palette:    Target colours, matched with last-equal-wins ties.
        kernel:     Kernel member, index 0-8 or display name.
        serpentine: Alternate scan direction per row, starting left-to-right.

    Returns:
        (w*h,) uint32 packed ``AABBGGRR`` buffer, alpha always 255, every
        colour an entry of *palette*.

    Raises:
        UnknownKernelError: *kernel* does not name one of the nine kernels.
        EmptyPaletteError:  *palette* has no entries.
    """
    k = Kernel.resolve(kernel)
    if len(palette) == 0:
        msg = "Cannot dither onto an empty palette"
        raise EmptyPaletteError(msg)

    width, height = icon.width, icon.height
    taps = k.taps
    reversed_taps = taps[::-1]
    packed_palette = [_pack(*rgb) for rgb in palette.rgb_tuples]

    logger.debug(
        "Dithering %dx%d onto %d colours with %s (serpentine=%s) …",
        width, height, len(palette), k.display_name, serpentine,
    )
    t0 = time.perf_counter()

    buf: list[int] = icon.to_uint32_array().tolist()
    direction = -1 if serpentine else 1

    for y in range(height):
        if serpentine:
            direction = -direction
        row = y * width
        xs = range(width) if direction == 1 else range(width - 1, -1, -1)
        row_taps = taps if direction == 1 else reversed_taps

        for x in xs:
            idx = row + x
            r1, g1, b1 = _unpack(buf[idx])
            best = palette.nearest_index((r1, g1, b1))
            buf[idx] = packed_palette[best]

            r2, g2, b2 = palette.rgb_tuples[best]
            er, eg, eb = r1 - r2, g1 - g2, b1 - b2

            for weight, dx, dy in row_taps:
                tx = x + dx * direction
                ty = y + dy
                if not (0 <= tx < width and ty < height):
                    continue
                target = ty * width + tx
                r3, g3, b3 = _unpack(buf[target])
                buf[target] = _pack(
                    int(max(0, min(255, r3 + er * weight))),
                    int(max(0, min(255, g3 + eg * weight))),
                    int(max(0, min(255, b3 + eb * weight))),
                )

    logger.debug("Dither finished  (%.3f s)", time.perf_counter() - t0)
    return np.array(buf, dtype=np.uint32)
