"""Colour-usage report for a (usually dithered) icon."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from brick_icon.palette import Palette

if TYPE_CHECKING:
    from brick_icon.icon import Icon

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColorStatistics:
    """Pixel counts per colour label.

    Attributes:
        counts: Palette tag (or raw ``rrrgggbbb`` key) → number of pixels,
                in order of first appearance.
        colors: Number of distinct colours that passed the count filter.
    """

    counts: dict[str, int] = field(default_factory=dict)
    colors: int = 0

    @property
    def total(self) -> int:
        return sum(self.counts.values())


def color_key(rgb: tuple[int, int, int]) -> str:
    """Zero-padded decimal key, e.g. ``(12, 34, 255)`` → ``"012034255"``."""
    r, g, b = rgb
    return f"{r:03d}{g:03d}{b:03d}"


def color_statistics(
    icon: Icon,
    palette: Palette,
    min_count: int = 2,
) -> ColorStatistics:
    """Count how many pixels use each colour.

    Colours seen fewer than *min_count* times are left out; the default
    of 2 drops single stray pixels.  Survivors are labelled with the tag
    of the matching palette entry when there is one.  Colours sharing a
    tag are summed under it, so ``total`` always equals the number of
    surviving pixels while ``colors`` still counts them separately.
    """
    occurrences = Counter(color_key(rgb) for rgb in icon.get_pixel_tuples())

    # First matching entry wins, as in Palette.tag_for.
    tags: dict[str, str | None] = {}
    for color in palette:
        tags.setdefault(color_key(color.rgb), color.tag)

    counts: dict[str, int] = {}
    colors = 0
    for key, count in occurrences.items():
        if count < min_count:
            continue
        colors += 1
        label = tags.get(key) or key
        counts[label] = counts.get(label, 0) + count

    logger.debug("colors: %d", colors)
    return ColorStatistics(counts=counts, colors=colors)
