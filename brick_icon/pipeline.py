"""The editor's filter chain: contrast → brightness → dither → statistics."""

from __future__ import annotations

import logging
import time
from typing import NamedTuple

from brick_icon.dithering import Kernel
from brick_icon.icon import Icon
from brick_icon.palette import Palette
from brick_icon.statistics import ColorStatistics

logger = logging.getLogger(__name__)


class FilterResult(NamedTuple):
    icon: Icon
    stats: ColorStatistics


def apply_filters(
    base: Icon,
    palette: Palette,
    *,
    contrast: int = 0,
    brightness: int = 0,
    kernel: Kernel | int | str = Kernel.FLOYD_STEINBERG,
    serpentine: bool = False,
    min_count: int = 2,
) -> FilterResult:
    """Derive a palette-locked variant of *base*.

    *base* is left untouched so the chain can be re-run from scratch each
    time a control changes.
    """
    k = Kernel.resolve(kernel)
    t0 = time.perf_counter()

    icon = base.clone()
    if contrast:
        icon.contrast(contrast)
    if brightness:
        icon.bright(brightness)
    icon.stick_to_palette(palette, k, serpentine)
    stats = icon.color_statistics(palette, min_count)

    logger.info(
        "%s: %d colours in use (%s%s, %.2f s)",
        palette.name or "palette", stats.colors, k.display_name,
        ", serpentine" if serpentine else "", time.perf_counter() - t0,
    )
    return FilterResult(icon, stats)
