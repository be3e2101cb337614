"""
Brick Icon
==========

Map any image onto a fixed colour set (brick plates, markers, greys)
and keep the overall tone with error-diffusion dithering.
Ships nine diffusion kernels:

- **Floyd-Steinberg**, **False Floyd-Steinberg**, **Stucki**, **Atkinson**
- **Jarvis**, **Burkes**, **Sierra**, **Two-row Sierra**, **Sierra Lite**

Optional serpentine scanning and a colour-usage report come with each run.
"""

__version__ = "0.4.0"

from brick_icon.color import BLACK, BLUE, GREEN, RED, TRANSPARENT, WHITE, Color
from brick_icon.config import IconConfig
from brick_icon.dithering import KERNEL_TAPS, Kernel, dither
from brick_icon.errors import EmptyPaletteError, FormatError, UnknownKernelError
from brick_icon.icon import Icon
from brick_icon.palette import PALETTE_PRESETS, Palette, get_palette
from brick_icon.pipeline import FilterResult, apply_filters
from brick_icon.pixel import Pixel
from brick_icon.statistics import ColorStatistics, color_statistics

__all__ = [
    "BLACK",
    "BLUE",
    "GREEN",
    "KERNEL_TAPS",
    "PALETTE_PRESETS",
    "RED",
    "TRANSPARENT",
    "WHITE",
    "Color",
    "ColorStatistics",
    "EmptyPaletteError",
    "FilterResult",
    "FormatError",
    "Icon",
    "IconConfig",
    "Kernel",
    "Palette",
    "Pixel",
    "UnknownKernelError",
    "apply_filters",
    "color_statistics",
    "dither",
    "get_palette",
]
