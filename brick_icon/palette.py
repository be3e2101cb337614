"""Palettes: ordered colour sets, nearest-colour lookup and named presets."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, replace
from functools import cached_property
from typing import overload

import numpy as np

from brick_icon.color import BLACK, BLUE, GREEN, RED, WHITE, Color
from brick_icon.errors import EmptyPaletteError


@dataclass(frozen=True)
class Palette:
    """An ordered, optionally named collection of colours.

    Entries are expected to be unique but this is not enforced.  A palette
    is treated as immutable for the duration of any lookup or dither pass.
    """

    colors: tuple[Color, ...]
    name: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "colors", tuple(self.colors))

    # -- Sequence protocol ---------------------------------------------

    def __len__(self) -> int:
        return len(self.colors)

    def __iter__(self) -> Iterator[Color]:
        return iter(self.colors)

    @overload
    def __getitem__(self, index: int) -> Color: ...

    @overload
    def __getitem__(self, index: slice) -> Palette: ...

    def __getitem__(self, index: int | slice) -> Color | Palette:
        if isinstance(index, slice):
            return Palette(self.colors[index], self.name)
        return self.colors[index]

    def __add__(self, other: Palette | Iterable[Color]) -> Palette:
        return Palette(self.colors + tuple(other), self.name)

    def with_name(self, name: str | None) -> Palette:
        return replace(self, name=name)

    # -- Lookups -------------------------------------------------------

    @cached_property
    def rgb_tuples(self) -> tuple[tuple[int, int, int], ...]:
        return tuple(c.rgb for c in self.colors)

    def nearest_index(self, rgb: tuple[int, int, int]) -> int:
        """Index of the palette entry closest to *rgb* (Euclidean RGB).

        Ties go to the **last** equally-near entry: the running best is
        replaced whenever a later distance is less than *or equal to* the
        minimum so far.  Output that must match existing dithers depends
        on this.
        """
        entries = self.rgb_tuples
        if not entries:
            msg = "Cannot match a colour against an empty palette"
            raise EmptyPaletteError(msg)

        r, g, b = rgb
        best = -1
        best_dist = float("inf")
        for i, (pr, pg, pb) in enumerate(entries):
            # Squared distance orders exactly like the Euclidean one.
            dist = (pr - r) ** 2 + (pg - g) ** 2 + (pb - b) ** 2
            if dist <= best_dist:
                best = i
                best_dist = dist
        return best

    def nearest(self, color: Color) -> Color:
        return self.colors[self.nearest_index(color.rgb)]

    def tag_for(self, rgb: tuple[int, int, int]) -> str | None:
        """Tag of the first entry with exactly this RGB, if any."""
        for color in self.colors:
            if color.rgb == tuple(rgb):
                return color.tag
        return None

    def to_array(self) -> np.ndarray:
        """(N, 3) uint8 RGB array."""
        return np.array(self.rgb_tuples, dtype=np.uint8).reshape(-1, 3)


# -- Presets -----------------------------------------------------------

_LEGO_TAG_SUFFIX = "/3024"


def _lego_colors() -> list[Color]:
    return [
        WHITE.with_tag("White 302401" + _LEGO_TAG_SUFFIX),
        RED.with_tag("Red 302421" + _LEGO_TAG_SUFFIX),
        BLUE.with_tag("Blue 302423" + _LEGO_TAG_SUFFIX),
        Color.from_hex("ff0").with_tag("Yellow 302424" + _LEGO_TAG_SUFFIX),
        BLACK.with_tag("Black 302426" + _LEGO_TAG_SUFFIX),
        Color.from_hex("2bc114").with_tag("Green 302428" + _LEGO_TAG_SUFFIX),
        Color.from_hex("d9c285").with_tag("Sand 4159553" + _LEGO_TAG_SUFFIX),
        Color.from_hex("1b3c71").with_tag("Navy 4184108" + _LEGO_TAG_SUFFIX),
        Color.from_hex("555").with_tag("Dark Grey 4210719" + _LEGO_TAG_SUFFIX),
        Color.from_hex("bbb").with_tag("Medium Grey 4211399" + _LEGO_TAG_SUFFIX),
        Color.from_hex("51311a").with_tag("Brown 4221744" + _LEGO_TAG_SUFFIX),
        Color.from_hex("fd9330").with_tag("Orange 4524929" + _LEGO_TAG_SUFFIX),
    ]


def lego_palette() -> Palette:
    """The 12 official 1x1 plate colours."""
    return Palette(tuple(_lego_colors()), "Lego Official Colors")


def lego_palette_grayscale() -> Palette:
    lego = {c.tag: c for c in _lego_colors()}
    colors = (
        lego["White 302401/3024"],
        lego["Black 302426/3024"],
        lego["Dark Grey 4210719/3024"],
        lego["Medium Grey 4211399/3024"],
    )
    return Palette(colors, "Lego Grays")


def lego_palette_with_transparents() -> Palette:
    """Lego colours plus translucent plates seen over a medium grey base."""
    grey = Color.from_hex("bbb")
    trans = [
        Color.combine(grey, RED).with_tag("Trans Red"),
        Color.combine(grey, BLUE).with_tag("Trans Blue"),
        Color.combine(grey, Color.from_hex("ff0")).with_tag("Trans Yellow"),
        Color.combine(grey, Color.from_hex("2bc114")).with_tag("Trans Green"),
        Color.combine(grey, Color.from_hex("fd9330")).with_tag("Trans Orange"),
    ]
    return Palette(tuple(_lego_colors() + trans), "Lego with Transparent Colors")


def sharpie_palette() -> Palette:
    """Fine-point marker set."""
    colors = (
        WHITE.with_tag("White"),
        BLACK.with_tag("Black"),
        Color.from_hex("#8F573B").with_tag("Brown"),
        Color.from_hex("#F14540").with_tag("Red"),
        Color.from_hex("#FF6E3B").with_tag("Orange"),
        Color.from_hex("#FFA05E").with_tag("Salmon"),
        Color.from_hex("#FFAE8D").with_tag("Pink"),
        Color.from_hex("#FFF959").with_tag("Yellow"),
        Color.from_hex("#95D872").with_tag("Green"),
        Color.from_hex("#86D6AB").with_tag("Green Light"),
        Color.from_hex("#3FC7FD").with_tag("Blue"),
        Color.from_hex("#2373F3").with_tag("Blue Royal"),
        Color.from_hex("#786D6E").with_tag("Gray"),
        Color.from_hex("#C333AF").with_tag("Purple"),
        Color.from_hex("#5F1B7A").with_tag("Dark Purple"),
    )
    return Palette(colors, "Sharpie Colors")


def _black_white() -> Palette:
    return Palette((BLACK, WHITE), "Black & White")


def _red_tint() -> Palette:
    return Palette((BLACK, WHITE, RED), "Red Tint")


def _rgb_tints() -> Palette:
    return Palette((BLACK, WHITE, RED, BLUE, GREEN), "RGB Tints")


def _basic_tints() -> Palette:
    extra = tuple(Color.from_hex(h) for h in ("ff0", "0ff", "f0f"))
    return _rgb_tints().with_name("Basic Tints") + extra


def _aliexpress() -> Palette:
    colors = (
        BLACK, RED, WHITE, Color.from_hex("A52A2A"),
        Color.from_hex("ff0"), Color.from_hex("f7d89e"), GREEN, Color.from_hex("a2fb5f"),
        BLUE, Color.from_hex("52c8fd"), Color.from_hex("ccc"), Color.from_hex("777"),
    )
    return Palette(colors, "Aliexpress Legos")


# Ordered as offered by the editor's colour selector.
PALETTE_PRESETS: dict[str, Callable[[], Palette]] = {
    "black_white": _black_white,
    "lego_grays": lego_palette_grayscale,
    "red_tint": _red_tint,
    "rgb_tints": _rgb_tints,
    "basic_tints": _basic_tints,
    "aliexpress": _aliexpress,
    "lego": lego_palette,
    "lego_transparent": lego_palette_with_transparents,
    "sharpie": sharpie_palette,
}


def get_palette(name: str) -> Palette:
    """Build the preset palette registered under *name*."""
    factory = PALETTE_PRESETS.get(name)
    if factory is None:
        available = ", ".join(PALETTE_PRESETS)
        msg = f"Unknown palette '{name}'. Available: {available}"
        raise ValueError(msg)
    return factory()
