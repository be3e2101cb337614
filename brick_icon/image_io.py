"""Image decoding into icon-sized RGBA buffers, saving, and comparison sheets."""

from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont, ImageOps

from brick_icon.errors import EmptyPaletteError
from brick_icon.palette import Palette


def load_rgba(path: str | Path, width: int, height: int) -> np.ndarray:
    """Load an image and aspect-fill it to exactly *width* x *height*.

    The image is scaled to cover the target and centre-cropped, so no
    letterboxing is introduced.

    Returns:
        (H, W, 4) uint8 array.
    """
    img = Image.open(path).convert("RGBA")
    img = ImageOps.fit(img, (width, height), Image.LANCZOS)
    return np.array(img, dtype=np.uint8)


def save_upscaled(
    array: np.ndarray,
    path: str | Path,
    pixel_upscale: int = 12,
) -> None:
    """Save a small (H, W, 3|4) array as a nearest-neighbour-upscaled image."""
    img = Image.fromarray(array.astype(np.uint8))
    h, w = array.shape[:2]
    img = img.resize((w * pixel_upscale, h * pixel_upscale), Image.NEAREST)
    img.save(path)


def make_palette_strip(palette: Palette, swatch: int = 24) -> Image.Image:
    """One square swatch per palette entry, left to right."""
    if not len(palette):
        msg = "Cannot draw a strip for an empty palette"
        raise EmptyPaletteError(msg)
    colors = palette.to_array().reshape(1, -1, 3)
    img = Image.fromarray(colors)
    return img.resize((len(palette) * swatch, swatch), Image.NEAREST)


def make_comparison_grid(
    source: np.ndarray,
    filtered: np.ndarray,
    dithered: np.ndarray,
    palette: Palette,
    output_path: str | Path,
    pixel_upscale: int = 12,
) -> None:
    """Create a 3-panel sheet: Source | Filtered | Dithered, palette below.

    All arrays are (H, W, 3|4) at icon resolution and are upscaled by
    *pixel_upscale*.
    """
    h, w = dithered.shape[:2]
    panel_w = w * pixel_upscale
    panel_h = h * pixel_upscale
    label_height = 36

    panels = [
        Image.fromarray(a.astype(np.uint8)).convert("RGB").resize(
            (panel_w, panel_h), Image.NEAREST,
        )
        for a in (source, filtered, dithered)
    ]
    labels = [
        f"Source {w}x{h}",
        "Filtered",
        palette.name or "Dithered",
    ]

    strip = make_palette_strip(palette)

    gap = 8
    total_w = max(len(panels) * panel_w + (len(panels) - 1) * gap, strip.width)
    total_h = label_height + panel_h + gap + strip.height

    canvas = Image.new("RGB", (total_w, total_h), (30, 30, 30))
    draw = ImageDraw.Draw(canvas)

    try:
        font = ImageFont.truetype(
            "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf", 18,
        )
    except OSError:
        font = ImageFont.load_default()

    for i, (panel, label) in enumerate(zip(panels, labels, strict=False)):
        x = i * (panel_w + gap)
        canvas.paste(panel, (x, label_height))

        bbox = draw.textbbox((0, 0), label, font=font)
        text_w = bbox[2] - bbox[0]
        tx = x + (panel_w - text_w) // 2
        draw.text((tx, 6), label, fill=(220, 220, 220), font=font)

    canvas.paste(strip, (0, label_height + panel_h + gap))
    canvas.save(output_path)
